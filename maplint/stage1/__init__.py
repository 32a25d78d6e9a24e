# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Stage 1 package: HIR, NodeId assignment and binding resolution.

Pipeline placement:
  parser → stage1 (HIR + HirMap) → type_checker → lints

Public API:
  - HIR node classes (expressions, statements, patterns, items, operator enums)
  - build_hir_map: ids + resolution + parent index in one step
"""

from .hir_nodes import (
	BindingId,
	NodeId,
	HNode,
	HExpr,
	HStmt,
	HPat,
	UnaryOp,
	BinaryOp,
	HTypeExpr,
	HPatBinding,
	HPatWild,
	HPatTuple,
	HVar,
	HLiteralInt,
	HLiteralFloat,
	HLiteralString,
	HLiteralBool,
	HCall,
	HMethodCall,
	HField,
	HIndex,
	HUnary,
	HBinary,
	HRange,
	HArrayLiteral,
	HTupleLiteral,
	HLambda,
	HMacroCall,
	HBlockExpr,
	HIf,
	HWhile,
	HLoop,
	HFor,
	HReturn,
	HBreak,
	HContinue,
	HBlock,
	HExprStmt,
	HLet,
	HParam,
	HFunction,
	HModule,
)
from .resolve import HirMap, build_hir_map

__all__ = [
	"BindingId",
	"NodeId",
	"HNode",
	"HExpr",
	"HStmt",
	"HPat",
	"UnaryOp",
	"BinaryOp",
	"HTypeExpr",
	"HPatBinding",
	"HPatWild",
	"HPatTuple",
	"HVar",
	"HLiteralInt",
	"HLiteralFloat",
	"HLiteralString",
	"HLiteralBool",
	"HCall",
	"HMethodCall",
	"HField",
	"HIndex",
	"HUnary",
	"HBinary",
	"HRange",
	"HArrayLiteral",
	"HTupleLiteral",
	"HLambda",
	"HMacroCall",
	"HBlockExpr",
	"HIf",
	"HWhile",
	"HLoop",
	"HFor",
	"HReturn",
	"HBreak",
	"HContinue",
	"HBlock",
	"HExprStmt",
	"HLet",
	"HParam",
	"HFunction",
	"HModule",
	"HirMap",
	"build_hir_map",
]
