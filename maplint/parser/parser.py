from __future__ import annotations

import codecs
import re
from pathlib import Path
from typing import List, Optional

from lark import Lark, Token, Tree

from maplint.core.span import ROOT_CTXT, ExpansionTable, Span
from maplint.stage1 import hir_nodes as H

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="contextual",
	start="module",
	propagate_positions=True,
	maybe_placeholders=False,
)

_INT_SUFFIX_RE = re.compile(r"(i|u)(8|16|32|64|128|size)$")
_FLOAT_SUFFIX_RE = re.compile(r"f(32|64)$")

_TYPE_NODES = {"ty_named", "ty_ref", "ty_slice", "ty_unit", "ty_tuple"}
_BLOCK_LIKE = (H.HIf, H.HWhile, H.HLoop, H.HFor, H.HBlockExpr)

_BINARY_OPS = {
	"||": H.BinaryOp.OR,
	"&&": H.BinaryOp.AND,
	"==": H.BinaryOp.EQ,
	"!=": H.BinaryOp.NE,
	"<": H.BinaryOp.LT,
	"<=": H.BinaryOp.LE,
	">": H.BinaryOp.GT,
	">=": H.BinaryOp.GE,
	"+": H.BinaryOp.ADD,
	"-": H.BinaryOp.SUB,
	"*": H.BinaryOp.MUL,
	"/": H.BinaryOp.DIV,
	"%": H.BinaryOp.MOD,
}


class ParseError(ValueError):
	"""
	User-facing structural error found while building HIR from the parse tree.

	This is a `ValueError` subclass carrying a span so the driver can report a
	parser-phase diagnostic instead of crashing.
	"""

	def __init__(self, message: str, *, span: Span) -> None:
		super().__init__(message)
		self.span = span


def _decode_string_token(tok: Token) -> str:
	"""
	Decode STRING tokens, including \\xHH hex byte escapes. Python-style escapes
	are interpreted first (unicode_escape), then the resulting code points are
	reinterpreted as raw bytes (latin-1) and decoded as UTF-8.
	"""
	content = tok.value[1:-1]  # strip quotes
	unescaped = codecs.decode(content, "unicode_escape")
	raw_bytes = unescaped.encode("latin-1")
	return raw_bytes.decode("utf-8")


def _name(node: Tree | Token) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	if isinstance(node, Token):
		return node.type
	return str(node)


def _trees(node: Tree) -> List[Tree]:
	return [c for c in node.children if isinstance(c, Tree)]


def _tokens(node: Tree, *types: str) -> List[Token]:
	return [c for c in node.children if isinstance(c, Token) and (not types or c.type in types)]


class _HirBuilder:
	"""Builds HIR nodes (with spans) from a Lark parse tree."""

	def __init__(self, file: Optional[str], expansions: ExpansionTable) -> None:
		self.file = file
		self.expansions = expansions
		self.ctxt = ROOT_CTXT

	# Spans

	def _span(self, node: Tree | Token, *, ctxt: Optional[int] = None) -> Span:
		if isinstance(node, Token):
			return Span(
				file=self.file,
				line=node.line,
				column=node.column,
				end_line=node.end_line,
				end_column=node.end_column,
				lo=node.start_pos,
				hi=node.end_pos,
				ctxt=self.ctxt if ctxt is None else ctxt,
			)
		meta = node.meta
		if meta.empty:
			return Span(file=self.file, ctxt=self.ctxt if ctxt is None else ctxt)
		return Span(
			file=self.file,
			line=meta.line,
			column=meta.column,
			end_line=meta.end_line,
			end_column=meta.end_column,
			lo=meta.start_pos,
			hi=meta.end_pos,
			ctxt=self.ctxt if ctxt is None else ctxt,
		)

	def _join(self, start: Span, end: Span) -> Span:
		"""Span from the start of `start` to the end of `end`."""
		return Span(
			file=self.file,
			line=start.line,
			column=start.column,
			end_line=end.end_line,
			end_column=end.end_column,
			lo=start.lo,
			hi=end.hi,
			ctxt=self.ctxt,
		)

	# Items

	def build_module(self, tree: Tree) -> H.HModule:
		functions = [self.build_function(child) for child in _trees(tree)]
		return H.HModule(functions=functions, file=self.file, span=self._span(tree))

	def build_function(self, tree: Tree) -> H.HFunction:
		name_tok = _tokens(tree, "NAME")[0]
		params: List[H.HParam] = []
		ret_type: Optional[H.HTypeExpr] = None
		body: Optional[H.HBlock] = None
		for child in _trees(tree):
			kind = _name(child)
			if kind == "params":
				params = [self.build_param(p) for p in _trees(child)]
			elif kind in _TYPE_NODES:
				ret_type = self.build_type(child)
			elif kind == "block":
				body = self.build_block(child)
		assert body is not None, "grammar guarantees a function body"
		return H.HFunction(name=name_tok.value, params=params, body=body, ret_type=ret_type, span=self._span(tree))

	def build_param(self, tree: Tree) -> H.HParam:
		parts = _trees(tree)
		pattern = self.build_pattern(parts[0])
		type_expr = self.build_type(parts[1]) if len(parts) > 1 else None
		return H.HParam(pattern=pattern, type_expr=type_expr, span=self._span(tree))

	# Patterns and types

	def build_pattern(self, tree: Tree) -> H.HPat:
		kind = _name(tree)
		span = self._span(tree)
		if kind == "pat_name":
			return H.HPatBinding(name=_tokens(tree, "NAME")[0].value, span=span)
		if kind == "pat_mut":
			return H.HPatBinding(name=_tokens(tree, "NAME")[0].value, mutable=True, span=span)
		if kind == "pat_wild":
			return H.HPatWild(span=span)
		if kind == "pat_tuple":
			return H.HPatTuple(elems=[self.build_pattern(p) for p in _trees(tree)], span=span)
		raise ParseError(f"unsupported pattern form '{kind}'", span=span)

	def build_type(self, tree: Tree) -> H.HTypeExpr:
		kind = _name(tree)
		span = self._span(tree)
		if kind == "ty_named":
			parts = _trees(tree)
			path = "::".join(t.value for t in _tokens(parts[0], "NAME"))
			return H.HTypeExpr(name=path, args=[self.build_type(t) for t in parts[1:]], span=span)
		if kind == "ty_ref":
			head = "&mut" if _tokens(tree, "MUT") else "&"
			return H.HTypeExpr(name=head, args=[self.build_type(_trees(tree)[0])], span=span)
		if kind == "ty_slice":
			return H.HTypeExpr(name="[]", args=[self.build_type(_trees(tree)[0])], span=span)
		if kind == "ty_unit":
			return H.HTypeExpr(name="()", span=span)
		if kind == "ty_tuple":
			return H.HTypeExpr(name="()", args=[self.build_type(t) for t in _trees(tree)], span=span)
		raise ParseError(f"unsupported type form '{kind}'", span=span)

	# Blocks and statements

	def build_block(self, tree: Tree) -> H.HBlock:
		items = [c for c in _trees(tree) if _name(c) != "empty_stmt"]
		statements: List[H.HStmt] = []
		tail: Optional[H.HExpr] = None
		for idx, item in enumerate(items):
			kind = _name(item)
			if kind == "let_stmt":
				statements.append(self.build_let(item))
				continue
			# expr_stmt: the expression plus an optional `;`.
			expr = self.build_expr(_trees(item)[0])
			has_semi = bool(_tokens(item, "SEMI"))
			if has_semi:
				statements.append(H.HExprStmt(expr=expr, span=self._span(item)))
			elif idx == len(items) - 1:
				tail = expr
			elif isinstance(expr, _BLOCK_LIKE):
				statements.append(H.HExprStmt(expr=expr, span=self._span(item)))
			else:
				raise ParseError("expected `;` after expression", span=expr.span)
		return H.HBlock(statements=statements, tail=tail, span=self._span(tree))

	def build_let(self, tree: Tree) -> H.HLet:
		parts = _trees(tree)
		pattern = self.build_pattern(parts[0])
		declared: Optional[H.HTypeExpr] = None
		value: Optional[H.HExpr] = None
		for part in parts[1:]:
			if _name(part) in _TYPE_NODES:
				declared = self.build_type(part)
			else:
				value = self.build_expr(part)
		return H.HLet(pattern=pattern, declared_type=declared, value=value, span=self._span(tree))

	# Expressions

	def build_expr(self, node: Tree | Token) -> H.HExpr:
		if not isinstance(node, Tree):
			raise TypeError(f"Unexpected node type: {type(node)}")
		kind = _name(node)
		span = self._span(node)

		if kind in {"or_expr", "and_expr", "cmp_expr", "sum", "product"}:
			return self._fold_binary(node)
		if kind == "neg":
			return H.HUnary(op=H.UnaryOp.NEG, expr=self.build_expr(_trees(node)[0]), span=span)
		if kind == "not_":
			return H.HUnary(op=H.UnaryOp.NOT, expr=self.build_expr(_trees(node)[0]), span=span)
		if kind == "deref":
			return H.HUnary(op=H.UnaryOp.DEREF, expr=self.build_expr(_trees(node)[0]), span=span)
		if kind == "borrow":
			op = H.UnaryOp.REF_MUT if _tokens(node, "MUT") else H.UnaryOp.REF
			return H.HUnary(op=op, expr=self.build_expr(_trees(node)[0]), span=span)
		if kind == "postfix":
			return self._build_postfix(node)
		if kind == "int_lit":
			return self._build_int(node.children[0], span)
		if kind == "float_lit":
			raw = node.children[0].value.replace("_", "")
			suffix_match = _FLOAT_SUFFIX_RE.search(raw)
			suffix = suffix_match.group(0) if suffix_match else None
			digits = raw[: suffix_match.start()] if suffix_match else raw
			return H.HLiteralFloat(value=float(digits), suffix=suffix, span=span)
		if kind == "string_lit":
			return H.HLiteralString(value=_decode_string_token(node.children[0]), span=span)
		if kind == "true_lit":
			return H.HLiteralBool(value=True, span=span)
		if kind == "false_lit":
			return H.HLiteralBool(value=False, span=span)
		if kind == "path":
			return H.HVar(name="::".join(t.value for t in _tokens(node, "NAME")), span=span)
		if kind == "macro_call":
			return self._build_macro(node)
		if kind == "array_lit":
			return H.HArrayLiteral(elements=self._build_args(node), span=span)
		if kind == "tuple_lit":
			first = self.build_expr(_trees(node)[0])
			return H.HTupleLiteral(elements=[first, *self._build_args(node)], span=span)
		if kind == "block_expr":
			return H.HBlockExpr(block=self.build_block(_trees(node)[0]), span=span)
		if kind == "if_expr":
			return self._build_if(node)
		if kind == "while_expr":
			cond, body = _trees(node)
			return H.HWhile(cond=self.build_expr(cond), body=self.build_block(body), span=span)
		if kind == "loop_expr":
			return H.HLoop(body=self.build_block(_trees(node)[0]), span=span)
		if kind == "for_expr":
			pat, iterable, body = _trees(node)
			return H.HFor(
				pattern=self.build_pattern(pat),
				iterable=self.build_expr(iterable),
				body=self.build_block(body),
				span=span,
			)
		if kind == "return_expr":
			parts = _trees(node)
			return H.HReturn(value=self.build_expr(parts[0]) if parts else None, span=span)
		if kind == "break_expr":
			return H.HBreak(span=span)
		if kind == "continue_expr":
			return H.HContinue(span=span)
		if kind == "closure":
			return self._build_closure(node)
		if kind in {"range_full", "range_from", "range_to", "range_all"}:
			return self._build_range(node, kind)
		raise ParseError(f"unsupported expression form '{kind}'", span=span)

	def _build_int(self, tok: Token, span: Span) -> H.HLiteralInt:
		raw = tok.value.replace("_", "")
		suffix_match = _INT_SUFFIX_RE.search(raw)
		suffix = suffix_match.group(0) if suffix_match else None
		digits = raw[: suffix_match.start()] if suffix_match else raw
		return H.HLiteralInt(value=int(digits), suffix=suffix, span=span)

	def _fold_binary(self, node: Tree) -> H.HExpr:
		"""Fold a flat `operand (OP operand)*` chain left-associatively."""
		children = node.children
		expr = self.build_expr(children[0])
		idx = 1
		while idx < len(children):
			op_tok = children[idx]
			rhs = self.build_expr(children[idx + 1])
			expr = H.HBinary(
				op=_BINARY_OPS[op_tok.value],
				left=expr,
				right=rhs,
				span=self._join(expr.span, rhs.span),
			)
			idx += 2
		return expr

	def _build_args(self, node: Tree) -> List[H.HExpr]:
		args_node = next((c for c in _trees(node) if _name(c) == "args"), None)
		if args_node is None:
			return []
		return [self.build_expr(a) for a in _trees(args_node)]

	def _build_postfix(self, node: Tree) -> H.HExpr:
		base, *suffixes = _trees(node)
		expr = self.build_expr(base)
		start = self._span(node)
		for suffix in suffixes:
			kind = _name(suffix)
			span = self._join(start, self._span(suffix))
			if kind == "method_suffix":
				name_tok = _tokens(suffix, "NAME")[0]
				expr = H.HMethodCall(
					receiver=expr,
					method_name=name_tok.value,
					args=self._build_args(suffix),
					name_span=self._span(name_tok),
					span=span,
				)
			elif kind == "field_suffix":
				expr = H.HField(subject=expr, name=_tokens(suffix, "NAME")[0].value, span=span)
			elif kind == "tuple_field_suffix":
				expr = H.HField(subject=expr, name=_tokens(suffix, "INT")[0].value, span=span)
			elif kind == "call_suffix":
				expr = H.HCall(fn=expr, args=self._build_args(suffix), span=span)
			elif kind == "index_suffix":
				expr = H.HIndex(subject=expr, index=self.build_expr(_trees(suffix)[0]), span=span)
			else:
				raise ParseError(f"unexpected postfix form '{kind}'", span=span)
		return expr

	def _build_macro(self, node: Tree) -> H.HMacroCall:
		name = _tokens(node, "NAME")[0].value
		call_site = self._span(node)
		ctxt = self.expansions.fresh(name, call_site)
		# Arguments are user text: they keep the caller's context.
		args = self._build_args(node)
		return H.HMacroCall(name=name, args=args, span=self._span(node, ctxt=ctxt))

	def _build_if(self, node: Tree) -> H.HIf:
		parts = _trees(node)
		cond = self.build_expr(parts[0])
		then_block = self.build_block(parts[1])
		else_expr: Optional[H.HExpr] = None
		if len(parts) > 2:
			other = parts[2]
			if _name(other) == "block":
				else_expr = H.HBlockExpr(block=self.build_block(other), span=self._span(other))
			else:
				else_expr = self._build_if(other)
		return H.HIf(cond=cond, then_block=then_block, else_expr=else_expr, span=self._span(node))

	def _build_closure(self, node: Tree) -> H.HLambda:
		parts = _trees(node)
		params: List[H.HParam] = []
		for p in parts[:-1]:
			sub = _trees(p)
			params.append(
				H.HParam(
					pattern=self.build_pattern(sub[0]),
					type_expr=self.build_type(sub[1]) if len(sub) > 1 else None,
					span=self._span(p),
				)
			)
		return H.HLambda(
			params=params,
			body=self.build_expr(parts[-1]),
			is_move=bool(_tokens(node, "MOVE")),
			span=self._span(node),
		)

	def _build_range(self, node: Tree, kind: str) -> H.HRange:
		bounds = [self.build_expr(t) for t in _trees(node)]
		span = self._span(node)
		if kind == "range_full":
			return H.HRange(start=bounds[0], end=bounds[1], span=span)
		if kind == "range_from":
			return H.HRange(start=bounds[0], span=span)
		if kind == "range_to":
			return H.HRange(end=bounds[0], span=span)
		return H.HRange(span=span)


def parse_source(
	source: str,
	*,
	file: Optional[str] = None,
	expansions: Optional[ExpansionTable] = None,
) -> H.HModule:
	"""
	Parse `source` into an HIR module (spans populated, ids not yet assigned).

	Raises `lark.UnexpectedInput` on syntax errors and `ParseError` on
	structural errors the grammar accepts (e.g. a missing `;`).
	"""
	tree = _PARSER.parse(source)
	builder = _HirBuilder(file, expansions if expansions is not None else ExpansionTable())
	return builder.build_module(tree)


__all__ = ["ParseError", "parse_source"]
