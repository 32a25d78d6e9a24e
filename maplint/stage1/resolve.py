# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Binding resolution and the HIR map.

Resolution is lexical with shadowing:
  - function/closure params are visible in the whole body,
  - a `let` binding becomes visible *after* its initializer
    (`let x = x + 1;` reads the outer `x`),
  - `for` patterns are visible in the loop body only,
  - each block opens a scope.

Every `HPatBinding` receives `binding_id = node_id` (the arena index of the
introduction site) and every `HVar` that names a local receives the same id.
Paths that do not name a local (functions, `None`, `Vec::new`) keep
`binding_id = None`.

`HirMap` is the query interface later passes use: parent links,
reference -> introduction-site resolution and enclosing-body lookup.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from maplint.stage1 import hir_nodes as H
from maplint.stage1.hir_walk import children, walk
from maplint.stage1.node_ids import assign_node_ids


@dataclass
class HirMap:
	"""Read-only queries over a resolved module."""

	module: H.HModule
	nodes: Dict[H.NodeId, H.HNode] = field(default_factory=dict)
	parents: Dict[H.NodeId, H.NodeId] = field(default_factory=dict)
	binding_sites: Dict[H.BindingId, H.HPatBinding] = field(default_factory=dict)

	def parent(self, node: H.HNode) -> Optional[H.HNode]:
		pid = self.parents.get(node.node_id)
		return None if pid is None else self.nodes.get(pid)

	def binding_site(self, var: H.HVar) -> Optional[H.HPatBinding]:
		"""Resolve a path reference to its binding introduction (None for non-locals)."""
		if var.binding_id is None:
			return None
		return self.binding_sites.get(var.binding_id)

	def enclosing_body(self, node: H.HNode) -> Optional[H.HNode]:
		"""
		Innermost body owner containing `node`: a closure or a function.

		Closures own their own bodies, so an expression inside a closure is
		analyzed against that closure rather than the surrounding function.
		"""
		cur = self.parent(node)
		while cur is not None:
			if isinstance(cur, (H.HLambda, H.HFunction)):
				return cur
			cur = self.parent(cur)
		return None


class _Scopes:
	"""Stack of name -> BindingId maps."""

	def __init__(self) -> None:
		self._stack: List[Dict[str, H.BindingId]] = []

	def push(self) -> None:
		self._stack.append({})

	def pop(self) -> None:
		self._stack.pop()

	def bind(self, name: str, binding_id: H.BindingId) -> None:
		self._stack[-1][name] = binding_id

	def lookup(self, name: str) -> Optional[H.BindingId]:
		for scope in reversed(self._stack):
			if name in scope:
				return scope[name]
		return None


def _bind_pattern(pat: H.HPat, scopes: _Scopes, hir_map: HirMap) -> None:
	if isinstance(pat, H.HPatBinding):
		pat.binding_id = pat.node_id
		hir_map.binding_sites[pat.node_id] = pat
		scopes.bind(pat.name, pat.node_id)
	elif isinstance(pat, H.HPatTuple):
		for elem in pat.elems:
			_bind_pattern(elem, scopes, hir_map)
	elif isinstance(pat, H.HPatWild):
		pass
	else:
		raise TypeError(f"unhandled pattern kind: {type(pat).__name__}")


def _resolve_node(node: H.HNode, scopes: _Scopes, hir_map: HirMap) -> None:
	if isinstance(node, H.HVar):
		# Qualified paths never name locals.
		node.binding_id = None if "::" in node.name else scopes.lookup(node.name)
		return
	if isinstance(node, H.HFunction):
		scopes.push()
		for param in node.params:
			_bind_pattern(param.pattern, scopes, hir_map)
		_resolve_node(node.body, scopes, hir_map)
		scopes.pop()
		return
	if isinstance(node, H.HLambda):
		scopes.push()
		for param in node.params:
			_bind_pattern(param.pattern, scopes, hir_map)
		_resolve_node(node.body, scopes, hir_map)
		scopes.pop()
		return
	if isinstance(node, H.HBlock):
		scopes.push()
		for stmt in node.statements:
			if isinstance(stmt, H.HLet):
				if stmt.value is not None:
					_resolve_node(stmt.value, scopes, hir_map)
				_bind_pattern(stmt.pattern, scopes, hir_map)
			else:
				_resolve_node(stmt, scopes, hir_map)
		if node.tail is not None:
			_resolve_node(node.tail, scopes, hir_map)
		scopes.pop()
		return
	if isinstance(node, H.HFor):
		_resolve_node(node.iterable, scopes, hir_map)
		scopes.push()
		_bind_pattern(node.pattern, scopes, hir_map)
		_resolve_node(node.body, scopes, hir_map)
		scopes.pop()
		return
	if isinstance(node, H.HBinary):
		# Left-deep operator chains are unrolled to keep recursion shallow.
		spine: List[H.HBinary] = []
		cur: H.HExpr = node
		while isinstance(cur, H.HBinary):
			spine.append(cur)
			cur = cur.left
		_resolve_node(cur, scopes, hir_map)
		for bin_node in reversed(spine):
			_resolve_node(bin_node.right, scopes, hir_map)
		return
	for child in children(node):
		_resolve_node(child, scopes, hir_map)


def build_hir_map(module: H.HModule) -> HirMap:
	"""
	Assign NodeIds, resolve bindings and index parents for `module`.

	Deterministic: running it twice on the same tree yields identical ids.
	"""
	assign_node_ids(module)
	hir_map = HirMap(module=module)

	def _index(node: H.HNode) -> bool:
		hir_map.nodes[node.node_id] = node
		for child in children(node):
			hir_map.parents[child.node_id] = node.node_id
		return False

	walk(module, _index)
	scopes = _Scopes()
	for fn in module.functions:
		_resolve_node(fn, scopes, hir_map)
	return hir_map


__all__ = ["HirMap", "build_hir_map"]
