"""
Common diagnostic structure for parser/lint/driver passes.

A diagnostic is a message plus optional span/metadata. Lints can attach
structured suggestions (multi-part text edits) with an applicability tag that
tells the driver whether `--fix` may apply them without review.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from .span import Span


class Applicability(Enum):
	"""
	Confidence that a suggestion can be applied mechanically.

	Ordered from most to least confident; `downgrade` only ever moves down.
	"""

	MACHINE_APPLICABLE = "MachineApplicable"
	MAYBE_INCORRECT = "MaybeIncorrect"
	HAS_PLACEHOLDERS = "HasPlaceholders"
	UNSPECIFIED = "Unspecified"

	def downgrade(self, to: "Applicability") -> "Applicability":
		"""Return the less confident of `self` and `to`."""
		order = list(Applicability)
		return self if order.index(self) >= order.index(to) else to


@dataclass(frozen=True)
class SuggestionPart:
	"""Replace the text under `span` with `snippet` (empty span = insertion)."""

	span: Span
	snippet: str


@dataclass(frozen=True)
class Suggestion:
	"""A multi-part edit; all parts are applied together or not at all."""

	message: str
	parts: tuple[SuggestionPart, ...]
	applicability: Applicability = Applicability.MACHINE_APPLICABLE


@dataclass
class Diagnostic:
	"""Represents a diagnostic (error/warning/etc.)."""

	message: str
	code: str | None = None
	# Optional phase label ("parser", "lint", ...). The driver falls back to the
	# phase of the sink that collected the diagnostic when this is unset.
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Source location (Span() denotes unknown).
	notes: list[str] = field(default_factory=list)
	suggestions: list[Suggestion] = field(default_factory=list)

	def __post_init__(self) -> None:
		# Normalize missing spans to the sentinel Span() so downstream tooling
		# can rely on a structured object instead of None.
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()


# Injected reporting interface: passes call the sink once per diagnostic.
DiagnosticSink = Callable[[Diagnostic], None]


__all__ = ["Applicability", "SuggestionPart", "Suggestion", "Diagnostic", "DiagnosticSink"]
