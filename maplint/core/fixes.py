# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Apply suggestion edits to source text (`maplint --fix`).

Edits are offset-based (`Span.lo`/`Span.hi`). A suggestion is applied as a
whole: if any of its parts overlaps an edit already accepted, the entire
suggestion is skipped. Accepted edits are applied right-to-left so earlier
offsets stay valid.
"""

from __future__ import annotations

from typing import Iterable, List, Tuple

from .diagnostics import Applicability, Suggestion


def _overlaps(a: Tuple[int, int], b: Tuple[int, int]) -> bool:
	# Two insertions at the same offset are treated as conflicting; a
	# replacement touching an insertion point at its boundary is not.
	if a[0] == a[1] and b[0] == b[1]:
		return a[0] == b[0]
	return a[0] < b[1] and b[0] < a[1]


def apply_suggestions(
	text: str,
	suggestions: Iterable[Suggestion],
	*,
	only_machine_applicable: bool = True,
) -> Tuple[str, int]:
	"""
	Return `(new_text, applied_count)`.

	Suggestions are considered in source order of their first part; the first
	one wins when two overlap.
	"""
	candidates = [s for s in suggestions if s.parts]
	if only_machine_applicable:
		candidates = [s for s in candidates if s.applicability is Applicability.MACHINE_APPLICABLE]
	candidates.sort(key=lambda s: min(p.span.lo for p in s.parts))

	accepted: List[Tuple[int, int, str]] = []
	applied = 0
	for sugg in candidates:
		ranges = [(p.span.lo, p.span.hi) for p in sugg.parts]
		if any(_overlaps(r, (lo, hi)) for r in ranges for lo, hi, _ in accepted):
			continue
		if any(_overlaps(ranges[i], ranges[j]) for i in range(len(ranges)) for j in range(i + 1, len(ranges))):
			continue
		accepted.extend((p.span.lo, p.span.hi, p.snippet) for p in sugg.parts)
		applied += 1

	out = text
	for lo, hi, snippet in sorted(accepted, key=lambda e: (e[0], e[1]), reverse=True):
		out = out[:lo] + snippet + out[hi:]
	return out, applied


__all__ = ["apply_suggestions"]
