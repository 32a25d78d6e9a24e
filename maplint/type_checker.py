#!/usr/bin/env python3
# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Small local type inference over resolved HIR.

This is not a full checker: it exists so lints can ask "is this an Option?"
and "is this Copy?" about real expressions. It understands:
- literals (integer/float suffixes), declared and inferred `let` types,
- typed function params and user function return types,
- `Some(..)` / `None`, `vec![..]`, `format!(..)`,
- a table of builtin methods on Option, Vec/slices/arrays, str/String and
  scalars, pushing parameter types into closure arguments.

Anything it cannot type is `Unknown`, which the Copy oracle treats as
move-only and the Option test rejects. Inference never raises for valid HIR.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from maplint.core.types_core import SCALAR_NAMES, TypeId, TypeKind, TypeTable
from maplint.stage1 import hir_nodes as H

_INT_NAMES = frozenset(n for n in SCALAR_NAMES if n[0] in "iu")
_COMPARISON_OPS = {
	H.BinaryOp.EQ,
	H.BinaryOp.NE,
	H.BinaryOp.LT,
	H.BinaryOp.LE,
	H.BinaryOp.GT,
	H.BinaryOp.GE,
	H.BinaryOp.AND,
	H.BinaryOp.OR,
}
# Macros whose expansion produces no value.
_UNIT_MACROS = frozenset({"println", "print", "eprintln", "eprint", "assert", "assert_eq", "assert_ne", "dbg"})


@dataclass
class TypedModule:
	"""Type side tables for one module (NodeIds are module-unique)."""

	expr_types: Dict[H.NodeId, TypeId] = field(default_factory=dict)
	binding_types: Dict[H.BindingId, TypeId] = field(default_factory=dict)
	fn_types: Dict[str, TypeId] = field(default_factory=dict)


class TypeChecker:
	"""Infers expression and binding types for a resolved module."""

	def __init__(self, type_table: Optional[TypeTable] = None):
		self.type_table = type_table or TypeTable()
		self._unknown = self.type_table.ensure_unknown()
		self._unit = self.type_table.ensure_unit()
		self._bool = self.type_table.scalar("bool")
		self._i32 = self.type_table.scalar("i32")
		self._usize = self.type_table.scalar("usize")
		self._f64 = self.type_table.scalar("f64")
		self._string = self.type_table.ensure_string()
		self._str_ref = self.type_table.new_ref(self.type_table.ensure_str())
		self._typed = TypedModule()

	# Entry points

	def check_module(self, module: H.HModule) -> TypedModule:
		"""Type every function of `module` (ids and bindings must be assigned)."""
		self._typed = TypedModule()
		for fn in module.functions:
			params = [self.resolve_type(p.type_expr) for p in fn.params]
			ret = self.resolve_type(fn.ret_type) if fn.ret_type is not None else self._unit
			self._typed.fn_types[fn.name] = self.type_table.new_function(params, ret)
		for fn in module.functions:
			self.check_function(fn)
		return self._typed

	def check_function(self, fn: H.HFunction) -> None:
		for param in fn.params:
			self._bind_pattern(param.pattern, self.resolve_type(param.type_expr))
		self._infer_block(fn.body)

	def resolve_type(self, te: Optional[H.HTypeExpr]) -> TypeId:
		"""Map a surface type expression onto the TypeTable."""
		tt = self.type_table
		if te is None:
			return self._unknown
		args = [self.resolve_type(a) for a in te.args]
		if te.name in SCALAR_NAMES and not args:
			return tt.scalar(te.name)
		if te.name == "()":
			return tt.new_tuple(args)
		if te.name == "str":
			return tt.ensure_str()
		if te.name == "String":
			return self._string
		if te.name in ("&", "&mut") and len(args) == 1:
			return tt.new_ref(args[0], is_mut=te.name == "&mut")
		if te.name == "[]" and len(args) == 1:
			return tt.new_slice(args[0])
		if te.name == "Option" and len(args) == 1:
			return tt.new_option(args[0])
		if te.name == "Vec" and len(args) == 1:
			return tt.new_vec(args[0])
		return tt.new_adt(te.name, args)

	# Bindings

	def _bind_pattern(self, pat: H.HPat, ty: TypeId) -> None:
		if isinstance(pat, H.HPatBinding):
			if pat.binding_id is not None:
				self._typed.binding_types[pat.binding_id] = ty
		elif isinstance(pat, H.HPatTuple):
			td = self.type_table.get(ty)
			if td.kind is TypeKind.TUPLE and len(td.param_types) == len(pat.elems):
				elem_types = list(td.param_types)
			else:
				elem_types = [self._unknown] * len(pat.elems)
			for elem, elem_ty in zip(pat.elems, elem_types):
				self._bind_pattern(elem, elem_ty)

	# Blocks and statements

	def _infer_block(self, block: H.HBlock, expected: Optional[TypeId] = None) -> TypeId:
		for stmt in block.statements:
			if isinstance(stmt, H.HLet):
				declared = self.resolve_type(stmt.declared_type) if stmt.declared_type is not None else None
				value_ty = self._infer(stmt.value, declared) if stmt.value is not None else None
				ty = declared if declared is not None else (value_ty if value_ty is not None else self._unknown)
				self._bind_pattern(stmt.pattern, ty)
			elif isinstance(stmt, H.HExprStmt):
				self._infer(stmt.expr)
		if block.tail is not None:
			return self._infer(block.tail, expected)
		return self._unit

	# Expressions

	def _infer(self, expr: H.HExpr, expected: Optional[TypeId] = None) -> TypeId:
		ty = self._infer_inner(expr, expected)
		self._typed.expr_types[expr.node_id] = ty
		return ty

	def _infer_inner(self, expr: H.HExpr, expected: Optional[TypeId]) -> TypeId:
		tt = self.type_table
		if isinstance(expr, H.HLiteralInt):
			if expr.suffix is not None:
				return tt.scalar(expr.suffix)
			if expected is not None and tt.get(expected).name in _INT_NAMES:
				return expected
			return self._i32
		if isinstance(expr, H.HLiteralFloat):
			return tt.scalar(expr.suffix) if expr.suffix is not None else self._f64
		if isinstance(expr, H.HLiteralString):
			return self._str_ref
		if isinstance(expr, H.HLiteralBool):
			return self._bool
		if isinstance(expr, H.HVar):
			return self._infer_var(expr, expected)
		if isinstance(expr, H.HCall):
			return self._infer_call(expr, expected)
		if isinstance(expr, H.HMethodCall):
			return self._infer_method(expr, expected)
		if isinstance(expr, H.HField):
			subject = tt.get(tt.peel_refs(self._infer(expr.subject)))
			if subject.kind is TypeKind.TUPLE and expr.name.isdigit():
				idx = int(expr.name)
				if idx < len(subject.param_types):
					return subject.param_types[idx]
			return self._unknown
		if isinstance(expr, H.HIndex):
			subject = tt.peel_refs(self._infer(expr.subject))
			index = self._infer(expr.index)
			elem = self._element_type(subject)
			if elem is None:
				return self._unknown
			if tt.get(index).kind is TypeKind.RANGE:
				return tt.new_slice(elem)
			return elem
		if isinstance(expr, H.HUnary):
			inner = self._infer(expr.expr)
			if expr.op is H.UnaryOp.REF:
				return tt.new_ref(inner)
			if expr.op is H.UnaryOp.REF_MUT:
				return tt.new_ref(inner, is_mut=True)
			if expr.op is H.UnaryOp.DEREF:
				td = tt.get(inner)
				return td.param_types[0] if td.kind is TypeKind.REF else self._unknown
			return inner
		if isinstance(expr, H.HBinary):
			return self._infer_binary(expr)
		if isinstance(expr, H.HRange):
			bounds = [self._infer(b) for b in (expr.start, expr.end) if b is not None]
			return tt.new_range(bounds[0] if bounds else self._unknown)
		if isinstance(expr, H.HArrayLiteral):
			elems = [self._infer(e) for e in expr.elements]
			return tt.new_array(elems[0] if elems else self._unknown)
		if isinstance(expr, H.HTupleLiteral):
			hints: List[Optional[TypeId]] = [None] * len(expr.elements)
			if expected is not None:
				expected_td = tt.get(expected)
				if expected_td.kind is TypeKind.TUPLE and len(expected_td.param_types) == len(expr.elements):
					hints = list(expected_td.param_types)
			return tt.new_tuple([self._infer(e, h) for e, h in zip(expr.elements, hints)])
		if isinstance(expr, H.HLambda):
			return self._infer_lambda(expr, [])
		if isinstance(expr, H.HMacroCall):
			return self._infer_macro(expr)
		if isinstance(expr, H.HBlockExpr):
			return self._infer_block(expr.block, expected)
		if isinstance(expr, H.HIf):
			self._infer(expr.cond)
			then_ty = self._infer_block(expr.then_block, expected)
			if expr.else_expr is None:
				return self._unit
			self._infer(expr.else_expr, then_ty)
			return then_ty
		if isinstance(expr, H.HWhile):
			self._infer(expr.cond)
			self._infer_block(expr.body)
			return self._unit
		if isinstance(expr, H.HLoop):
			self._infer_block(expr.body)
			return self._unknown
		if isinstance(expr, H.HFor):
			iter_ty = tt.get(self._infer(expr.iterable))
			elem = self._unknown
			if iter_ty.kind in (TypeKind.RANGE, TypeKind.VEC, TypeKind.ARRAY):
				elem = iter_ty.param_types[0]
			elif iter_ty.kind is TypeKind.REF:
				inner_elem = self._element_type(tt.peel_refs(iter_ty.param_types[0]))
				if inner_elem is not None:
					elem = tt.new_ref(inner_elem)
			self._bind_pattern(expr.pattern, elem)
			self._infer_block(expr.body)
			return self._unit
		if isinstance(expr, H.HReturn):
			if expr.value is not None:
				self._infer(expr.value)
			return self._unknown
		if isinstance(expr, (H.HBreak, H.HContinue)):
			return self._unknown
		raise TypeError(f"unhandled HIR expression kind: {type(expr).__name__}")

	def _infer_binary(self, expr: H.HBinary) -> TypeId:
		"""
		Type a left-deep operator chain without recursing down its spine.

		Each operand on the right is inferred with the running left type as its
		expected type, so unsuffixed literals follow the leftmost operand.
		"""
		spine: List[H.HBinary] = []
		cur: H.HExpr = expr
		while isinstance(cur, H.HBinary):
			spine.append(cur)
			cur = cur.left
		left = self._infer(cur)
		ty = left
		for node in reversed(spine):
			self._infer(node.right, left)
			ty = self._bool if node.op in _COMPARISON_OPS else left
			if node is not expr:
				self._typed.expr_types[node.node_id] = ty
			left = ty
		return ty

	def _infer_var(self, expr: H.HVar, expected: Optional[TypeId]) -> TypeId:
		tt = self.type_table
		if expr.binding_id is not None:
			return self._typed.binding_types.get(expr.binding_id, self._unknown)
		if expr.name == "None":
			if expected is not None and tt.is_option(expected):
				return expected
			return tt.new_option(self._unknown)
		fn_ty = self._typed.fn_types.get(expr.name)
		return fn_ty if fn_ty is not None else self._unknown

	def _infer_call(self, expr: H.HCall, expected: Optional[TypeId]) -> TypeId:
		tt = self.type_table
		callee = expr.fn
		if isinstance(callee, H.HVar) and callee.binding_id is None:
			if callee.name == "Some" and len(expr.args) == 1:
				inner_expected = tt.option_inner(expected) if expected is not None and tt.is_option(expected) else None
				return tt.new_option(self._infer(expr.args[0], inner_expected))
			if callee.name in ("String::new", "String::from"):
				for arg in expr.args:
					self._infer(arg)
				return self._string
			if callee.name == "Vec::new":
				if expected is not None and tt.get(expected).kind is TypeKind.VEC:
					return expected
				return tt.new_vec(self._unknown)
		fn_ty = self._infer(callee)
		td = tt.get(fn_ty)
		if td.kind in (TypeKind.FUNCTION, TypeKind.CLOSURE):
			params = td.param_types[:-1]
			for idx, arg in enumerate(expr.args):
				self._infer(arg, params[idx] if idx < len(params) else None)
			return td.param_types[-1]
		for arg in expr.args:
			self._infer(arg)
		return self._unknown

	def _infer_lambda(self, expr: H.HLambda, param_hints: List[TypeId]) -> TypeId:
		params: List[TypeId] = []
		for idx, param in enumerate(expr.params):
			if param.type_expr is not None:
				ty = self.resolve_type(param.type_expr)
			elif idx < len(param_hints):
				ty = param_hints[idx]
			else:
				ty = self._unknown
			self._bind_pattern(param.pattern, ty)
			params.append(ty)
		ret = self._infer(expr.body)
		return self.type_table.new_closure(params, ret)

	def _infer_closure_arg(self, arg: H.HExpr, param_hints: List[TypeId]) -> TypeId:
		"""Infer a callable argument; returns its result type."""
		if isinstance(arg, H.HLambda):
			ty = self._infer_lambda(arg, param_hints)
			self._typed.expr_types[arg.node_id] = ty
		else:
			ty = self._infer(arg)
		td = self.type_table.get(ty)
		if td.kind in (TypeKind.FUNCTION, TypeKind.CLOSURE):
			return td.param_types[-1]
		return self._unknown

	def _infer_macro(self, expr: H.HMacroCall) -> TypeId:
		tt = self.type_table
		arg_types = [self._infer(a) for a in expr.args]
		if expr.name == "vec":
			return tt.new_vec(arg_types[0] if arg_types else self._unknown)
		if expr.name == "format":
			return self._string
		if expr.name in _UNIT_MACROS:
			return self._unit
		return self._unknown

	def _element_type(self, ty: TypeId) -> Optional[TypeId]:
		td = self.type_table.get(ty)
		if td.kind in (TypeKind.VEC, TypeKind.SLICE, TypeKind.ARRAY):
			return td.param_types[0]
		return None

	# Methods

	def _infer_method(self, expr: H.HMethodCall, expected: Optional[TypeId]) -> TypeId:
		tt = self.type_table
		recv_ty = self._infer(expr.receiver)
		base_ty = tt.peel_refs(recv_ty)
		base = tt.get(base_ty)
		name = expr.method_name
		args = expr.args

		def infer_args(*hints: Optional[TypeId]) -> List[TypeId]:
			return [self._infer(a, hints[i] if i < len(hints) else None) for i, a in enumerate(args)]

		if name == "clone" and not args:
			return base_ty
		if name == "to_string" and not args:
			return self._string

		if base.kind is TypeKind.OPTION:
			inner = base.param_types[0]
			if name == "map" and len(args) == 1:
				return tt.new_option(self._infer_closure_arg(args[0], [inner]))
			if name == "and_then" and len(args) == 1:
				return self._infer_closure_arg(args[0], [inner])
			if name == "map_or" and len(args) == 2:
				default = self._infer(args[0])
				self._infer_closure_arg(args[1], [inner])
				return default
			if name == "filter" and len(args) == 1:
				self._infer_closure_arg(args[0], [tt.new_ref(inner)])
				return base_ty
			if name == "unwrap_or_else" and len(args) == 1:
				self._infer_closure_arg(args[0], [])
				return inner
			if name == "unwrap_or":
				infer_args(inner)
				return inner
			if name in ("unwrap", "expect", "unwrap_or_default"):
				infer_args()
				return inner
			if name in ("is_some", "is_none"):
				return self._bool
			if name in ("cloned", "copied"):
				inner_td = tt.get(inner)
				return tt.new_option(inner_td.param_types[0] if inner_td.kind is TypeKind.REF else self._unknown)
			if name == "as_ref":
				return tt.new_option(tt.new_ref(inner))
			if name in ("or", "take", "xor"):
				infer_args(base_ty)
				return base_ty

		if base.kind in (TypeKind.VEC, TypeKind.SLICE, TypeKind.ARRAY):
			elem = base.param_types[0]
			if name == "len":
				return self._usize
			if name in ("is_empty", "contains"):
				infer_args()
				return self._bool
			if name == "get" and len(args) == 1:
				(index_ty,) = infer_args()
				if tt.get(index_ty).kind is TypeKind.RANGE:
					return tt.new_option(tt.new_ref(tt.new_slice(elem)))
				return tt.new_option(tt.new_ref(elem))
			if name in ("first", "last"):
				return tt.new_option(tt.new_ref(elem))
			if name == "to_vec":
				return tt.new_vec(elem)
			if name == "pop":
				return tt.new_option(elem)
			if name == "push":
				infer_args(elem)
				return self._unit
			if name == "iter":
				return tt.new_adt("Iter", [tt.new_ref(elem)])

		if base.kind in (TypeKind.STRING, TypeKind.STR):
			if name == "len":
				return self._usize
			if name == "is_empty":
				return self._bool
			if name in ("to_owned", "to_uppercase", "to_lowercase"):
				return self._string
			if name in ("as_str", "trim"):
				return self._str_ref

		if base.kind is TypeKind.SCALAR:
			if name in ("abs", "min", "max", "pow", "saturating_add", "saturating_sub", "wrapping_add"):
				infer_args(base_ty)
				return base_ty
			if name in ("checked_add", "checked_sub", "checked_mul", "checked_div"):
				infer_args(base_ty)
				return tt.new_option(base_ty)

		# Unknown method: still type the arguments so nested expressions get entries.
		for arg in args:
			if isinstance(arg, H.HLambda):
				self._infer_closure_arg(arg, [])
			else:
				self._infer(arg)
		return self._unknown


__all__ = ["TypedModule", "TypeChecker"]
