# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
NodeId assignment for HIR nodes.

This pass assigns stable, per-module NodeIds in pre-order so typed side
tables and binding identities can key off HIR nodes without relying on
Python object identity. The tree acts as an arena; NodeIds are its indices.
"""

from __future__ import annotations

from maplint.stage1 import hir_nodes as H
from maplint.stage1.hir_walk import walk


def assign_node_ids(root: H.HNode, *, start: int = 1) -> int:
	"""
	Assign NodeIds to all HIR nodes reachable from `root`.

	Returns the next available NodeId after traversal. Re-running the pass on
	an unchanged tree reproduces the same ids.
	"""
	next_id = start

	def _assign(node: H.HNode) -> bool:
		nonlocal next_id
		node.node_id = next_id
		next_id += 1
		return False

	walk(root, _assign)
	return next_id


__all__ = ["assign_node_ids"]
