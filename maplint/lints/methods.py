# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Method-call lint dispatch.

Recognizes call-chain shapes and hands their pieces to the lint that owns
them. Only the shape is checked here; type and safety checks belong to the
lint itself.
"""

from __future__ import annotations

from typing import Optional

from maplint.stage1 import hir_nodes as H

from . import map_unwrap_or
from .context import LintContext


def method_call(expr: H.HExpr, name: str, argc: int) -> Optional[H.HMethodCall]:
	"""Return `expr` if it is `<recv>.name(..)` with exactly `argc` arguments."""
	if isinstance(expr, H.HMethodCall) and expr.method_name == name and len(expr.args) == argc:
		return expr
	return None


def check_expr(cx: LintContext, expr: H.HExpr) -> None:
	unwrap_call = method_call(expr, "unwrap_or", 1)
	if unwrap_call is None:
		return
	map_call = method_call(unwrap_call.receiver, "map", 1)
	if map_call is not None and cx.config.is_enabled(map_unwrap_or.LINT_NAME):
		map_unwrap_or.check(
			cx,
			unwrap_call,
			recv=map_call.receiver,
			map_arg=map_call.args[0],
			unwrap_recv=map_call,
			unwrap_arg=unwrap_call.args[0],
			map_span=map_call.name_span,
		)


__all__ = ["method_call", "check_expr"]
