# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lint context: the host-side queries a lint may use and the sink it reports to.

Lints never print and never touch globals. Everything they need (types,
binding resolution, enclosing bodies, source snippets) is reached through
the context, and every finding goes through `span_lint`, which applies the
configured level and hands the diagnostic to the injected sink.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple

from maplint.core.diagnostics import Applicability, Diagnostic, DiagnosticSink, Suggestion
from maplint.core.source_map import SourceMap
from maplint.core.span import Span
from maplint.core.types_core import TypeId, TypeTable
from maplint.stage1 import hir_nodes as H
from maplint.stage1.resolve import HirMap
from maplint.type_checker import TypedModule


class LintLevel(Enum):
	ALLOW = "allow"
	WARN = "warn"
	DENY = "deny"


@dataclass
class LintConfig:
	"""Per-lint levels; lints not listed use `default_level`."""

	levels: Dict[str, LintLevel] = field(default_factory=dict)
	default_level: LintLevel = LintLevel.WARN

	def level_for(self, lint_name: str) -> LintLevel:
		return self.levels.get(lint_name, self.default_level)

	def is_enabled(self, lint_name: str) -> bool:
		return self.level_for(lint_name) is not LintLevel.ALLOW


@dataclass
class LintContext:
	"""Read-only view of one analyzed module plus the reporting sink."""

	hir_map: HirMap
	typed: TypedModule
	type_table: TypeTable
	source_map: SourceMap
	report: DiagnosticSink
	config: LintConfig = field(default_factory=LintConfig)

	def expr_ty(self, expr: H.HExpr) -> TypeId:
		"""Inferred type of `expr` (Unknown when the checker produced none)."""
		ty = self.typed.expr_types.get(expr.node_id)
		return ty if ty is not None else self.type_table.ensure_unknown()

	def is_option(self, ty: Optional[TypeId]) -> bool:
		return self.type_table.is_option(ty)

	def is_copy(self, ty: Optional[TypeId]) -> bool:
		return self.type_table.is_copy(ty)

	def enclosing_body(self, node: H.HNode) -> Optional[H.HNode]:
		return self.hir_map.enclosing_body(node)

	def snippet_with_applicability(
		self, span: Span, default: str, applicability: Applicability
	) -> Tuple[str, Applicability]:
		return self.source_map.snippet_with_applicability(span, default, applicability)

	def span_lint(
		self,
		lint_name: str,
		span: Span,
		message: str,
		suggestions: Iterable[Suggestion] = (),
	) -> None:
		"""Report a lint finding at the configured level (dropped when allowed)."""
		level = self.config.level_for(lint_name)
		if level is LintLevel.ALLOW:
			return
		self.report(
			Diagnostic(
				message=message,
				code=lint_name,
				phase="lint",
				severity="error" if level is LintLevel.DENY else "warning",
				span=span,
				suggestions=list(suggestions),
			)
		)


__all__ = ["LintLevel", "LintConfig", "LintContext"]
