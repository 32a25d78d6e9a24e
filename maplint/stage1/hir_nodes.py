# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
High-level Intermediate Representation (HIR).

Pipeline placement:
  source --parser--> HIR (this file) --resolve--> binding ids --typeck--> types

The HIR is the tree the lint passes analyze. It is close to the surface
syntax (method calls keep their receiver and the span of the method name so
suggestions can rewrite it) but every node carries:
- `node_id`: a per-module arena index assigned by `assign_node_ids`,
- `span`: the source range, including its expansion context.

Guiding rules:
- Nodes are syntactic; binding resolution fills `binding_id` on `HVar` and
  `HPatBinding`, types live in side tables keyed by NodeId.
- Each node exclusively owns its children; passes never share or mutate
  nodes except for the id fields above.
- The node set is closed: walkers match exhaustively (see `hir_walk`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional

from maplint.core.span import Span

# Stable identity of a local binding: the NodeId of its introducing
# `HPatBinding`. Two references share a BindingId iff they resolve to the
# same introduction site, independent of spelling (shadowing safe).
BindingId = int
# Stable identifiers for HIR nodes (used by typed side tables).
NodeId = int


# Base node kinds

class HNode:
	"""Base class for all HIR nodes."""
	node_id: NodeId = 0


class HExpr(HNode):
	"""Base class for all HIR expressions."""
	pass


class HStmt(HNode):
	"""Base class for all HIR statements."""
	pass


class HPat(HNode):
	"""Base class for binding patterns."""
	pass


# Operator enums

class UnaryOp(Enum):
	"""Unary operators preserved in HIR."""
	NEG = auto()      # numeric negation: -x
	NOT = auto()      # logical not: !x
	REF = auto()      # shared borrow: &x
	REF_MUT = auto()  # mutable borrow: &mut x
	DEREF = auto()    # dereference: *x


class BinaryOp(Enum):
	"""Binary operators preserved in HIR."""
	ADD = auto()
	SUB = auto()
	MUL = auto()
	DIV = auto()
	MOD = auto()

	EQ = auto()
	NE = auto()
	LT = auto()
	LE = auto()
	GT = auto()
	GE = auto()

	AND = auto()  # logical and (&&)
	OR = auto()   # logical or (||)


# Types as written in source (resolved by the type checker)

@dataclass
class HTypeExpr:
	"""
	Surface type expression.

	`name` is the head (`Option`, `Vec`, `i32`, ...). Builtin shapes use
	reserved heads: `&` / `&mut` (one arg), `[]` (slice, one arg), `()` (unit).
	"""
	name: str
	args: List["HTypeExpr"] = field(default_factory=list)
	span: Span = field(default_factory=Span)


# Patterns

@dataclass
class HPatBinding(HPat):
	"""A binding introduction site (`x`, `mut x`)."""
	name: str
	mutable: bool = False
	binding_id: Optional[BindingId] = None
	span: Span = field(default_factory=Span)


@dataclass
class HPatWild(HPat):
	"""`_`: matches without binding."""
	span: Span = field(default_factory=Span)


@dataclass
class HPatTuple(HPat):
	elems: List[HPat] = field(default_factory=list)
	span: Span = field(default_factory=Span)


# Expressions

@dataclass
class HVar(HExpr):
	"""
	Path reference (`x`, `None`, `Vec::new`).

	`binding_id` is set by resolution when the path names a local binding;
	it stays None for non-locals (functions, constructors, qualified paths).
	"""
	name: str
	binding_id: Optional[BindingId] = None
	span: Span = field(default_factory=Span)


@dataclass
class HLiteralInt(HExpr):
	"""Integer literal; `suffix` keeps an explicit type suffix (`1u8` -> "u8")."""
	value: int
	suffix: Optional[str] = None
	span: Span = field(default_factory=Span)


@dataclass
class HLiteralFloat(HExpr):
	value: float
	suffix: Optional[str] = None
	span: Span = field(default_factory=Span)


@dataclass
class HLiteralString(HExpr):
	value: str
	span: Span = field(default_factory=Span)


@dataclass
class HLiteralBool(HExpr):
	value: bool
	span: Span = field(default_factory=Span)


@dataclass
class HCall(HExpr):
	fn: HExpr
	args: List[HExpr] = field(default_factory=list)
	span: Span = field(default_factory=Span)


@dataclass
class HMethodCall(HExpr):
	"""
	`receiver.method_name(args)`.

	`name_span` covers only the method-name segment; rewrites that rename the
	method target this span.
	"""
	receiver: HExpr
	method_name: str
	args: List[HExpr] = field(default_factory=list)
	name_span: Span = field(default_factory=Span)
	span: Span = field(default_factory=Span)


@dataclass
class HField(HExpr):
	"""Named (`a.b`) or positional (`a.0`) field access."""
	subject: HExpr
	name: str
	span: Span = field(default_factory=Span)


@dataclass
class HIndex(HExpr):
	subject: HExpr
	index: HExpr
	span: Span = field(default_factory=Span)


@dataclass
class HUnary(HExpr):
	op: UnaryOp
	expr: HExpr
	span: Span = field(default_factory=Span)


@dataclass
class HBinary(HExpr):
	op: BinaryOp
	left: HExpr
	right: HExpr
	span: Span = field(default_factory=Span)


@dataclass
class HRange(HExpr):
	"""`start..end` with either bound optional."""
	start: Optional[HExpr] = None
	end: Optional[HExpr] = None
	span: Span = field(default_factory=Span)


@dataclass
class HArrayLiteral(HExpr):
	elements: List[HExpr] = field(default_factory=list)
	span: Span = field(default_factory=Span)


@dataclass
class HTupleLiteral(HExpr):
	"""`(a, b)` or `(a,)`; a parenthesized expression without a comma is not a tuple."""

	elements: List[HExpr] = field(default_factory=list)
	span: Span = field(default_factory=Span)


@dataclass
class HLambda(HExpr):
	"""Closure `|params| body` (`move` closures set `is_move`)."""
	params: List["HParam"]
	body: HExpr
	is_move: bool = False
	span: Span = field(default_factory=Span)


@dataclass
class HMacroCall(HExpr):
	"""
	Macro invocation `name!(args)` / `name![args]`.

	The node itself is macro-generated: its span carries the invocation's
	expansion context. The arguments are user text and keep the caller's
	context.
	"""
	name: str
	args: List[HExpr] = field(default_factory=list)
	span: Span = field(default_factory=Span)


@dataclass
class HBlockExpr(HExpr):
	block: "HBlock"
	span: Span = field(default_factory=Span)


@dataclass
class HIf(HExpr):
	"""`if cond { .. } else ..`; `else_expr` is an HBlockExpr or a nested HIf."""
	cond: HExpr
	then_block: "HBlock"
	else_expr: Optional[HExpr] = None
	span: Span = field(default_factory=Span)


@dataclass
class HWhile(HExpr):
	cond: HExpr
	body: "HBlock"
	span: Span = field(default_factory=Span)


@dataclass
class HLoop(HExpr):
	body: "HBlock"
	span: Span = field(default_factory=Span)


@dataclass
class HFor(HExpr):
	pattern: HPat
	iterable: HExpr
	body: "HBlock"
	span: Span = field(default_factory=Span)


@dataclass
class HReturn(HExpr):
	value: Optional[HExpr] = None
	span: Span = field(default_factory=Span)


@dataclass
class HBreak(HExpr):
	span: Span = field(default_factory=Span)


@dataclass
class HContinue(HExpr):
	span: Span = field(default_factory=Span)


# Statements

@dataclass
class HBlock(HStmt):
	"""`{ statements; tail }`; `tail` is the block's value expression, if any."""
	statements: List[HStmt] = field(default_factory=list)
	tail: Optional[HExpr] = None
	span: Span = field(default_factory=Span)


@dataclass
class HExprStmt(HStmt):
	expr: HExpr
	span: Span = field(default_factory=Span)


@dataclass
class HLet(HStmt):
	pattern: HPat
	declared_type: Optional[HTypeExpr] = None
	value: Optional[HExpr] = None
	span: Span = field(default_factory=Span)


# Items

@dataclass
class HParam(HNode):
	"""Function or closure parameter; closure params may omit the type."""
	pattern: HPat
	type_expr: Optional[HTypeExpr] = None
	span: Span = field(default_factory=Span)


@dataclass
class HFunction(HNode):
	name: str
	params: List[HParam]
	body: HBlock
	ret_type: Optional[HTypeExpr] = None
	span: Span = field(default_factory=Span)


@dataclass
class HModule(HNode):
	functions: List[HFunction] = field(default_factory=list)
	file: Optional[str] = None
	span: Span = field(default_factory=Span)


__all__ = [
	"BindingId", "NodeId",
	"HNode", "HExpr", "HStmt", "HPat",
	"UnaryOp", "BinaryOp", "HTypeExpr",
	"HPatBinding", "HPatWild", "HPatTuple",
	"HVar", "HLiteralInt", "HLiteralFloat", "HLiteralString", "HLiteralBool",
	"HCall", "HMethodCall", "HField", "HIndex", "HUnary", "HBinary",
	"HRange", "HArrayLiteral", "HTupleLiteral", "HLambda", "HMacroCall", "HBlockExpr",
	"HIf", "HWhile", "HLoop", "HFor", "HReturn", "HBreak", "HContinue",
	"HBlock", "HExprStmt", "HLet",
	"HParam", "HFunction", "HModule",
]
