# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source text lookup for spans.

Lints never re-print HIR; suggestions reuse the user's original text. The
SourceMap owns the text of every parsed file and hands out snippets, together
with an applicability tag that is downgraded when the snippet cannot be
trusted to round-trip (macro-generated or unknown text).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .diagnostics import Applicability
from .span import Span

# Label used when a span has no file attached.
ANON_FILE = "<input>"


@dataclass
class SourceMap:
	"""File name -> source text."""

	files: Dict[str, str] = field(default_factory=dict)

	def add_file(self, name: str | None, text: str) -> str:
		key = name or ANON_FILE
		self.files[key] = text
		return key

	def source_text(self, span: Span) -> Optional[str]:
		text = self.files.get(span.file or ANON_FILE)
		if text is None:
			return None
		if span.lo < 0 or span.hi > len(text) or span.lo > span.hi:
			return None
		return text[span.lo : span.hi]

	def snippet(self, span: Span, default: str = "..") -> str:
		"""Return the source text under `span`, or `default` when unavailable."""
		if span.is_dummy():
			return default
		text = self.source_text(span)
		return default if text is None else text

	def snippet_with_applicability(
		self, span: Span, default: str, applicability: Applicability
	) -> Tuple[str, Applicability]:
		"""
		Snippet lookup that also reports how far the result can be trusted.

		- text produced by a macro expansion downgrades to MaybeIncorrect,
		- unavailable text falls back to `default` and downgrades to HasPlaceholders.
		"""
		if span.from_expansion():
			applicability = applicability.downgrade(Applicability.MAYBE_INCORRECT)
		text = None if span.is_dummy() else self.source_text(span)
		if text is None:
			return default, applicability.downgrade(Applicability.HAS_PLACEHOLDERS)
		return text, applicability


__all__ = ["SourceMap", "ANON_FILE"]
