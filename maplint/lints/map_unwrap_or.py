# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lint `opt.map(<f>).unwrap_or(<a>)` on `Option` values.

Suggests `opt.map_or(<a>, <f>)`, or `opt.and_then(<f>)` when `<a>` is the
literal `None`.

The rewrite moves `<a>` from after the `map` call to before `<f>`. When
`<a>` is not Copy that is only sound if nothing earlier in the body still
uses a binding `<a>` consumes:

	let x = vec![1, 2];
	x.get(0..1).map(|s| s.to_vec()).unwrap_or(x);   // compiles

	let x = vec![1, 2];
	x.get(0..1).map_or(x, |s| s.to_vec());           // moves `x` while borrowed

So the locals referenced by `<a>` are collected, and the whole enclosing
body (not just the call chain) is scanned for a reference to any of them
positioned before `<a>`. Source position stands in for evaluation order; a
hit anywhere earlier suppresses the suggestion, even if control flow would
make it harmless.
"""

from __future__ import annotations

from typing import Set

from maplint.core.diagnostics import Applicability, Suggestion, SuggestionPart
from maplint.core.span import Span
from maplint.stage1 import hir_nodes as H
from maplint.stage1.hir_walk import walk
from maplint.stage1.resolve import HirMap

from .context import LintContext

LINT_NAME = "map_unwrap_or"
DESCRIPTION = "usage of `option.map(_).unwrap_or(_)`"


def collect_local_bindings(hir_map: HirMap, expr: H.HExpr) -> Set[H.BindingId]:
	"""
	Binding ids of every local referenced anywhere inside `expr`.

	Nested closures and blocks are included; non-local paths are ignored.
	"""
	identifiers: Set[H.BindingId] = set()

	def _visit(node: H.HNode) -> bool:
		if isinstance(node, H.HVar):
			site = hir_map.binding_site(node)
			if site is not None and site.binding_id is not None:
				identifiers.add(site.binding_id)
		return False

	walk(expr, _visit)
	return identifiers


def scan_for_prior_reference(
	hir_map: HirMap,
	body: H.HNode,
	identifiers: Set[H.BindingId],
	target_span: Span,
) -> bool:
	"""
	True if any expression in `body` starting before `target_span` refers to
	one of `identifiers`. Stops at the first hit.
	"""
	if not identifiers:
		return False

	def _visit(node: H.HNode) -> bool:
		if not isinstance(node, H.HVar) or not node.span.starts_before(target_span):
			return False
		site = hir_map.binding_site(node)
		return site is not None and site.binding_id in identifiers

	return walk(body, _visit)


def _is_none_path(expr: H.HExpr) -> bool:
	return isinstance(expr, H.HVar) and expr.name == "None" and expr.binding_id is None


def check(
	cx: LintContext,
	expr: H.HMethodCall,
	recv: H.HExpr,
	map_arg: H.HExpr,
	unwrap_recv: H.HExpr,
	unwrap_arg: H.HExpr,
	map_span: Span,
) -> None:
	"""
	`expr` is the whole `recv.map(map_arg).unwrap_or(unwrap_arg)` chain,
	`unwrap_recv` the `recv.map(map_arg)` call and `map_span` the span of the
	`map` method name.
	"""
	# lint only if the caller of `map()` is an `Option`
	if not cx.is_option(cx.expr_ty(recv)):
		return
	# `unwrap_or(None)` only type-checks when `map` already yields `Option<Option<_>>`.
	if _is_none_path(unwrap_arg):
		mapped = cx.expr_ty(unwrap_recv)
		inner = cx.type_table.option_inner(mapped) if cx.is_option(mapped) else None
		if inner is None or not cx.is_option(inner):
			return

	if not cx.is_copy(cx.expr_ty(unwrap_arg)):
		identifiers = collect_local_bindings(cx.hir_map, unwrap_arg)
		body = cx.enclosing_body(expr)
		if body is not None and scan_for_prior_reference(cx.hir_map, body, identifiers, unwrap_arg.span):
			return

	if unwrap_arg.span.ctxt != map_span.ctxt:
		return

	applicability = Applicability.MACHINE_APPLICABLE
	unwrap_snippet, applicability = cx.snippet_with_applicability(unwrap_arg.span, "..", applicability)
	# Comparing source text with "None" is safe: the type was checked above.
	unwrap_snippet_none = unwrap_snippet == "None"
	arg = "None" if unwrap_snippet_none else "<a>"
	suggest = "and_then(<f>)" if unwrap_snippet_none else "map_or(<a>, <f>)"
	msg = (
		f"called `map(<f>).unwrap_or({arg})` on an `Option` value. "
		f"This can be done more directly by calling `{suggest}` instead"
	)

	parts = [
		SuggestionPart(map_span, "and_then" if unwrap_snippet_none else "map_or"),
		SuggestionPart(expr.span.with_lo(unwrap_recv.span.hi), ""),
	]
	if not unwrap_snippet_none:
		parts.append(SuggestionPart(map_arg.span.shrink_to_lo(), f"{unwrap_snippet}, "))

	cx.span_lint(
		LINT_NAME,
		expr.span,
		msg,
		[Suggestion(f"use `{suggest}` instead", tuple(parts), applicability)],
	)


__all__ = ["LINT_NAME", "DESCRIPTION", "check", "collect_local_bindings", "scan_for_prior_reference"]
