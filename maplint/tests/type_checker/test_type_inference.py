# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Local type inference and the Copy/Option oracle."""

from maplint.core.types_core import TypeKind, TypeTable
from maplint.parser import parse_source
from maplint.stage1 import build_hir_map
from maplint.stage1 import hir_nodes as H
from maplint.type_checker import TypeChecker


def _check(src: str):
	module = parse_source(src)
	build_hir_map(module)
	table = TypeTable()
	typed = TypeChecker(table).check_module(module)
	return module, table, typed


def _let_types(module, typed) -> dict[str, int]:
	out = {}
	for stmt in module.functions[-1].body.statements:
		if isinstance(stmt, H.HLet) and isinstance(stmt.pattern, H.HPatBinding):
			out[stmt.pattern.name] = typed.binding_types[stmt.pattern.binding_id]
	return out


def test_get_with_range_yields_option_of_slice_ref():
	module, table, typed = _check(
		"fn f() { let x = vec![1, 2]; let a = x.get(0..1); let b = x.get(0); let c = x.first(); }"
	)
	i32 = table.scalar("i32")
	assert _let_types(module, typed) == {
		"x": table.new_vec(i32),
		"a": table.new_option(table.new_ref(table.new_slice(i32))),
		"b": table.new_option(table.new_ref(i32)),
		"c": table.new_option(table.new_ref(i32)),
	}


def test_map_pushes_inner_type_into_closure():
	module, table, typed = _check(
		"fn f(o: Option<String>) { let a = o.map(|s| s.len()); let b = o.map(|s| s.len()).unwrap_or(0); }"
	)
	types = _let_types(module, typed)
	usize = table.scalar("usize")
	assert types["a"] == table.new_option(usize)
	assert types["b"] == usize


def test_unwrap_or_argument_adopts_inner_type():
	"""An unsuffixed literal fallback takes the Option's integer type."""
	module, table, typed = _check("fn f(o: Option<u8>) -> u8 { o.unwrap_or(7) }")
	tail = module.functions[0].body.tail
	assert typed.expr_types[tail.args[0].node_id] == table.scalar("u8")


def test_none_and_some():
	module, table, typed = _check(
		"fn f() { let a: Option<i32> = None; let b = None; let c = Some(\"s\"); let d = Some(Some(1)); }"
	)
	i32 = table.scalar("i32")
	assert _let_types(module, typed) == {
		"a": table.new_option(i32),
		"b": table.new_option(table.ensure_unknown()),
		"c": table.new_option(table.new_ref(table.ensure_str())),
		"d": table.new_option(table.new_option(i32)),
	}


def test_user_function_return_types():
	module, table, typed = _check(
		"fn h() -> Option<i32> { None }\nfn f() { let a = h(); let b = g(); }"
	)
	assert _let_types(module, typed) == {
		"a": table.new_option(table.scalar("i32")),
		"b": table.ensure_unknown(),
	}


def test_checked_arithmetic_returns_option():
	module, table, typed = _check("fn f(o: Option<i32>) { let a = o.map(|v| v.checked_add(1)); }")
	i32 = table.scalar("i32")
	assert _let_types(module, typed)["a"] == table.new_option(table.new_option(i32))


def test_every_expression_in_closures_is_typed():
	module, _table, typed = _check("fn f(o: Option<i32>) -> i32 { o.map(|v| v + 1).unwrap_or(0) }")
	fn = module.functions[0]
	lam = fn.body.tail.receiver.args[0]
	assert lam.node_id in typed.expr_types
	assert lam.body.node_id in typed.expr_types
	assert lam.body.left.node_id in typed.expr_types


def test_long_operator_chain_types_every_link():
	"""A left-deep sum far past the recursion limit is typed link by link."""
	terms = " + ".join(["1u8"] * 1200)
	module, table, typed = _check(f"fn f() {{ let a = {terms}; let b = a == 2; }}")
	types = _let_types(module, typed)
	assert types == {"a": table.scalar("u8"), "b": table.scalar("bool")}
	cur = module.functions[0].body.statements[0].value
	while isinstance(cur, H.HBinary):
		assert typed.expr_types[cur.node_id] == table.scalar("u8")
		cur = cur.left


def test_tuple_literals_and_patterns():
	module, table, typed = _check(
		"fn f() { let t = (1u8, String::new()); let (a, b) = t; let c = t.0; let (d, e) = (1, 2, 3); }"
	)
	u8 = table.scalar("u8")
	string = table.ensure_string()
	fn = module.functions[0]
	assert typed.binding_types[fn.body.statements[0].pattern.binding_id] == table.new_tuple([u8, string])
	a, b = fn.body.statements[1].pattern.elems
	assert typed.binding_types[a.binding_id] == u8
	assert typed.binding_types[b.binding_id] == string
	assert typed.binding_types[fn.body.statements[2].pattern.binding_id] == u8
	# Arity mismatch leaves the elements untyped.
	d, e = fn.body.statements[3].pattern.elems
	assert typed.binding_types[d.binding_id] == table.ensure_unknown()
	assert typed.binding_types[e.binding_id] == table.ensure_unknown()


def test_declared_tuple_type_guides_literal_elements():
	module, table, typed = _check("fn f() { let t: (u8, i64) = (1, 2); }")
	value = module.functions[0].body.statements[0].value
	assert typed.expr_types[value.node_id] == table.new_tuple([table.scalar("u8"), table.scalar("i64")])


def test_copy_rules():
	table = TypeTable()
	i32 = table.scalar("i32")
	string = table.ensure_string()
	assert table.is_copy(i32)
	assert table.is_copy(table.ensure_unit())
	assert table.is_copy(table.new_ref(string))
	assert not table.is_copy(table.new_ref(string, is_mut=True))
	assert not table.is_copy(string)
	assert not table.is_copy(table.new_vec(i32))
	assert table.is_copy(table.new_option(i32))
	assert not table.is_copy(table.new_option(string))
	assert table.is_copy(table.new_function([i32], i32))
	assert table.is_copy(table.new_tuple([i32, table.new_ref(string)]))
	assert not table.is_copy(table.new_tuple([i32, string]))
	assert not table.is_copy(table.ensure_unknown())
	assert not table.is_copy(table.new_adt("Foo"))


def test_empty_tuple_is_unit():
	table = TypeTable()
	assert table.new_tuple([]) == table.ensure_unit()
	assert table.get(table.new_tuple([table.scalar("i32")])).kind is TypeKind.TUPLE


def test_option_oracle():
	table = TypeTable()
	i32 = table.scalar("i32")
	opt = table.new_option(i32)
	assert table.is_option(opt)
	assert table.option_inner(opt) == i32
	assert table.option_inner(i32) is None
	assert not table.is_option(i32)
	assert not table.is_option(None)
	assert not table.is_option(table.ensure_unknown())
	assert not table.is_option(table.new_adt("Option2", [i32]))


def test_types_are_interned():
	table = TypeTable()
	a = table.new_option(table.new_ref(table.new_slice(table.scalar("i32"))))
	b = table.new_option(table.new_ref(table.new_slice(table.scalar("i32"))))
	assert a == b
