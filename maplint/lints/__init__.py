# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lint pass runner.

`run_lints` visits every expression of a resolved, typed module once and
lets the method-call dispatcher hand matching shapes to individual lints.
Each candidate is analyzed independently; the only shared state is the
sink diagnostics are reported to.
"""

from __future__ import annotations

from typing import Dict, Optional

from maplint.core.diagnostics import DiagnosticSink
from maplint.core.source_map import SourceMap
from maplint.core.types_core import TypeTable
from maplint.stage1 import hir_nodes as H
from maplint.stage1.hir_walk import walk
from maplint.stage1.resolve import HirMap
from maplint.type_checker import TypedModule

from . import map_unwrap_or, methods
from .context import LintConfig, LintContext, LintLevel

# Registered lints: name -> one-line description.
LINTS: Dict[str, str] = {
	map_unwrap_or.LINT_NAME: map_unwrap_or.DESCRIPTION,
}


def run_lints(
	hir_map: HirMap,
	typed: TypedModule,
	type_table: TypeTable,
	source_map: SourceMap,
	report: DiagnosticSink,
	config: Optional[LintConfig] = None,
) -> None:
	cx = LintContext(
		hir_map=hir_map,
		typed=typed,
		type_table=type_table,
		source_map=source_map,
		report=report,
		config=config or LintConfig(),
	)

	def _visit(node: H.HNode) -> bool:
		if isinstance(node, H.HExpr):
			methods.check_expr(cx, node)
		return False

	walk(hir_map.module, _visit)


__all__ = ["LINTS", "LintConfig", "LintContext", "LintLevel", "run_lints"]
