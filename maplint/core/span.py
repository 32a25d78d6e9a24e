# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source span representation used by HIR nodes, diagnostics and suggestions.

A Span carries best-effort file/line/column info for rendering plus the
character offsets (`lo`/`hi`) that suggestions are applied against. `ctxt`
tags the expansion context the text belongs to: `ROOT_CTXT` for literal
source text, a fresh id (allocated by `ExpansionTable`) for text produced by
a macro invocation.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Optional

# Expansion context id. 0 is reserved for literal (unexpanded) source text.
SyntaxContext = int
ROOT_CTXT: SyntaxContext = 0


@dataclass(frozen=True)
class Span:
	"""Represents a source span (file/line/column plus offsets and expansion context)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	lo: int = 0
	hi: int = 0
	ctxt: SyntaxContext = ROOT_CTXT

	def is_dummy(self) -> bool:
		"""True for the `Span()` sentinel that denotes an unknown location."""
		return self.lo == 0 and self.hi == 0 and self.line is None

	def from_expansion(self) -> bool:
		return self.ctxt != ROOT_CTXT

	def with_lo(self, lo: int) -> "Span":
		"""Return a copy starting at `lo` (line/column info is dropped for the start)."""
		return replace(self, lo=lo, line=None, column=None)

	def with_hi(self, hi: int) -> "Span":
		"""Return a copy ending at `hi` (line/column info is dropped for the end)."""
		return replace(self, hi=hi, end_line=None, end_column=None)

	def shrink_to_lo(self) -> "Span":
		"""Empty span positioned at the start of this one (used for insertions)."""
		return replace(self, hi=self.lo, end_line=self.line, end_column=self.column)

	def starts_before(self, other: "Span") -> bool:
		"""
		Strict source-order test: does this span start before `other` starts?

		This is the only temporal model the lint passes use; it is a syntactic
		approximation of "evaluated before".
		"""
		return self.lo < other.lo


@dataclass(frozen=True)
class ExpnData:
	"""What produced an expansion context: the macro name and its call site."""

	macro_name: str
	call_site: Span


@dataclass
class ExpansionTable:
	"""
	Allocates expansion contexts, one per macro invocation.

	Context ids are dense ints starting at 1; `ROOT_CTXT` is never allocated.
	"""

	_data: Dict[SyntaxContext, ExpnData] = field(default_factory=dict)
	_next: SyntaxContext = ROOT_CTXT + 1

	def fresh(self, macro_name: str, call_site: Span) -> SyntaxContext:
		ctxt = self._next
		self._next += 1
		self._data[ctxt] = ExpnData(macro_name=macro_name, call_site=call_site)
		return ctxt

	def expn_data(self, ctxt: SyntaxContext) -> Optional[ExpnData]:
		return self._data.get(ctxt)


__all__ = ["Span", "SyntaxContext", "ROOT_CTXT", "ExpnData", "ExpansionTable"]
