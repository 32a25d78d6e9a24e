# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Binding collection, prior-reference scanning and detector gating in isolation."""

from dataclasses import replace

from maplint.core.diagnostics import Applicability, Diagnostic
from maplint.core.source_map import SourceMap
from maplint.core.span import Span
from maplint.core.types_core import TypeTable
from maplint.lints import map_unwrap_or, run_lints
from maplint.lints.context import LintContext
from maplint.parser import parse_source
from maplint.stage1 import build_hir_map
from maplint.stage1 import hir_nodes as H
from maplint.stage1.hir_walk import iter_nodes
from maplint.type_checker import TypeChecker


def _analyze(src: str, source_map: SourceMap | None = None):
	module = parse_source(src, file="m.rs")
	hir_map = build_hir_map(module)
	table = TypeTable()
	typed = TypeChecker(table).check_module(module)
	if source_map is None:
		source_map = SourceMap()
		source_map.add_file("m.rs", src)
	return module, hir_map, table, typed, source_map


def _method_calls(root: H.HNode, name: str) -> list[H.HMethodCall]:
	return [n for n in iter_nodes(root) if isinstance(n, H.HMethodCall) and n.method_name == name]


def _site_names(hir_map, ids) -> set[str]:
	return {hir_map.binding_sites[i].name for i in ids}


def test_collector_includes_nested_closures_and_blocks():
	src = """fn f(a: String, b: String, opt: Option<i32>) -> String {
	opt.map(|v| v.to_string()).unwrap_or({ let t = (|| a)(); t + b })
}
"""
	module, hir_map, *_ = _analyze(src)
	(call,) = _method_calls(module, "unwrap_or")
	ids = map_unwrap_or.collect_local_bindings(hir_map, call.args[0])
	assert _site_names(hir_map, ids) == {"a", "b", "t"}


def test_collector_ignores_non_locals():
	src = """fn f(opt: Option<i32>) -> String {
	opt.map(|v| v.to_string()).unwrap_or(String::from(\"x\"))
}
"""
	module, hir_map, *_ = _analyze(src)
	(call,) = _method_calls(module, "unwrap_or")
	assert map_unwrap_or.collect_local_bindings(hir_map, call.args[0]) == set()


def test_collector_distinguishes_shadowed_bindings():
	"""Two bindings that share a name are collected as distinct ids."""
	src = """fn f(x: String) -> String {
	let x = x;
	x
}
"""
	module, hir_map, *_ = _analyze(src)
	fn = module.functions[0]
	ids = map_unwrap_or.collect_local_bindings(hir_map, fn.body.tail)
	assert ids == {fn.body.statements[0].pattern.binding_id}


def test_scanner_requires_strictly_earlier_reference():
	"""A reference starting at the same offset as the fallback is not earlier."""
	src = """fn f(x: Vec<i32>) -> usize {
	x.len()
}
"""
	module, hir_map, *_ = _analyze(src)
	fn = module.functions[0]
	x_ref = fn.body.tail.receiver
	ids = {fn.params[0].pattern.binding_id}
	assert not map_unwrap_or.scan_for_prior_reference(hir_map, fn, ids, x_ref.span)
	later = replace(x_ref.span, lo=x_ref.span.lo + 1)
	assert map_unwrap_or.scan_for_prior_reference(hir_map, fn, ids, later)


def test_scanner_stops_at_first_hit():
	"""Nothing after the first conflicting reference is visited."""
	src = """fn f(x: Vec<i32>) -> usize {
	let a = x.len();
	let b = x.len();
	x.len() + a + b
}
"""
	module, hir_map, *_ = _analyze(src)
	fn = module.functions[0]
	ids = {fn.params[0].pattern.binding_id}
	calls = []
	lookup = hir_map.binding_site

	def _counting(var):
		calls.append(var)
		return lookup(var)

	hir_map.binding_site = _counting
	assert map_unwrap_or.scan_for_prior_reference(hir_map, fn, ids, fn.body.tail.span)
	assert len(calls) == 1


def test_scanner_with_no_identifiers_does_not_walk():
	src = "fn f(x: i32) -> i32 { x }"
	module, hir_map, *_ = _analyze(src)
	fn = module.functions[0]

	def _fail(var):
		raise AssertionError("binding_site must not be consulted")

	hir_map.binding_site = _fail
	assert not map_unwrap_or.scan_for_prior_reference(hir_map, fn, set(), Span(lo=10_000, hi=10_001))


def test_copy_fallback_never_consults_scanner(monkeypatch):
	"""Copy fallbacks skip the body scan entirely."""
	src = """fn f(opt: Option<i32>, d: i32) -> i32 {
	let e = d;
	opt.map(|v| v + e).unwrap_or(d)
}
"""
	module, hir_map, table, typed, sm = _analyze(src)

	def _fail(*_args):
		raise AssertionError("scanner must be skipped for Copy fallbacks")

	monkeypatch.setattr(map_unwrap_or, "scan_for_prior_reference", _fail)
	out: list[Diagnostic] = []
	run_lints(hir_map, typed, table, sm, out.append)
	assert len(out) == 1


def test_differing_expansion_contexts_decline():
	"""A fallback from another expansion context than `map` is never rewritten."""
	src = """fn f(opt: Option<i32>) -> i32 {
	opt.map(|v| v + 1).unwrap_or(0)
}
"""
	module, hir_map, table, typed, sm = _analyze(src)
	(call,) = _method_calls(module, "unwrap_or")
	map_call = call.receiver
	out: list[Diagnostic] = []
	cx = LintContext(hir_map=hir_map, typed=typed, type_table=table, source_map=sm, report=out.append)

	def _run(map_span: Span) -> None:
		map_unwrap_or.check(
			cx,
			call,
			recv=map_call.receiver,
			map_arg=map_call.args[0],
			unwrap_recv=map_call,
			unwrap_arg=call.args[0],
			map_span=map_span,
		)

	_run(replace(map_call.name_span, ctxt=7))
	assert out == []
	_run(map_call.name_span)
	assert len(out) == 1


def test_unavailable_source_text_downgrades_to_placeholders():
	src = """fn f(opt: Option<i32>) -> i32 {
	opt.map(|v| v + 1).unwrap_or(0)
}
"""
	module, hir_map, table, typed, _ = _analyze(src)
	out: list[Diagnostic] = []
	run_lints(hir_map, typed, table, SourceMap(), out.append)
	(diag,) = out
	(sugg,) = diag.suggestions
	assert sugg.applicability is Applicability.HAS_PLACEHOLDERS
	assert sugg.parts[-1].snippet == ".., "
	assert diag.message.endswith("calling `map_or(<a>, <f>)` instead")


def test_running_twice_reports_equal_diagnostics():
	src = """fn f(opt: Option<i32>) -> i32 {
	opt.map(|v| v + 1).unwrap_or(0)
}
"""
	_, hir_map, table, typed, sm = _analyze(src)
	first: list[Diagnostic] = []
	second: list[Diagnostic] = []
	run_lints(hir_map, typed, table, sm, first.append)
	run_lints(hir_map, typed, table, sm, second.append)
	assert first == second and len(first) == 1
