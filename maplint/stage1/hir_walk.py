# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Child iteration and pre-order walking over HIR.

`children` matches every node kind explicitly and yields children in source
order; an unknown node kind is a contract violation and raises TypeError.
"""

from __future__ import annotations

from typing import Callable, List

from maplint.stage1 import hir_nodes as H


def children(node: H.HNode) -> List[H.HNode]:
	"""Direct children of `node`, in source order."""
	# Leaves
	if isinstance(
		node,
		(
			H.HVar,
			H.HLiteralInt,
			H.HLiteralFloat,
			H.HLiteralString,
			H.HLiteralBool,
			H.HBreak,
			H.HContinue,
			H.HPatBinding,
			H.HPatWild,
		),
	):
		return []
	# Expressions
	if isinstance(node, H.HCall):
		return [node.fn, *node.args]
	if isinstance(node, H.HMethodCall):
		return [node.receiver, *node.args]
	if isinstance(node, H.HField):
		return [node.subject]
	if isinstance(node, H.HIndex):
		return [node.subject, node.index]
	if isinstance(node, H.HUnary):
		return [node.expr]
	if isinstance(node, H.HBinary):
		return [node.left, node.right]
	if isinstance(node, H.HRange):
		return [e for e in (node.start, node.end) if e is not None]
	if isinstance(node, H.HArrayLiteral):
		return list(node.elements)
	if isinstance(node, H.HTupleLiteral):
		return list(node.elements)
	if isinstance(node, H.HMacroCall):
		return list(node.args)
	if isinstance(node, H.HLambda):
		return [*node.params, node.body]
	if isinstance(node, H.HBlockExpr):
		return [node.block]
	if isinstance(node, H.HIf):
		out: List[H.HNode] = [node.cond, node.then_block]
		if node.else_expr is not None:
			out.append(node.else_expr)
		return out
	if isinstance(node, H.HWhile):
		return [node.cond, node.body]
	if isinstance(node, H.HLoop):
		return [node.body]
	if isinstance(node, H.HFor):
		return [node.pattern, node.iterable, node.body]
	if isinstance(node, H.HReturn):
		return [] if node.value is None else [node.value]
	# Statements
	if isinstance(node, H.HBlock):
		out = list(node.statements)
		if node.tail is not None:
			out.append(node.tail)
		return out
	if isinstance(node, H.HExprStmt):
		return [node.expr]
	if isinstance(node, H.HLet):
		out = [node.pattern]
		if node.value is not None:
			out.append(node.value)
		return out
	# Patterns / items
	if isinstance(node, H.HPatTuple):
		return list(node.elems)
	if isinstance(node, H.HParam):
		return [node.pattern]
	if isinstance(node, H.HFunction):
		return [*node.params, node.body]
	if isinstance(node, H.HModule):
		return list(node.functions)
	raise TypeError(f"unhandled HIR node kind: {type(node).__name__}")


def walk(node: H.HNode, visit: Callable[[H.HNode], bool]) -> bool:
	"""
	Pre-order walk. `visit` returns True to stop the whole traversal.

	Returns True iff the traversal was stopped. Uses an explicit stack, so
	long operator chains do not hit the interpreter recursion limit.
	"""
	stack: List[H.HNode] = [node]
	while stack:
		cur = stack.pop()
		if visit(cur):
			return True
		stack.extend(reversed(children(cur)))
	return False


def iter_nodes(root: H.HNode) -> List[H.HNode]:
	"""All nodes under `root` (inclusive) in pre-order."""
	out: List[H.HNode] = []

	def _collect(n: H.HNode) -> bool:
		out.append(n)
		return False

	walk(root, _collect)
	return out


__all__ = ["children", "walk", "iter_nodes"]
