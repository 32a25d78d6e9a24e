# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Span ordering and expansion-context helpers."""

from maplint.core.span import ROOT_CTXT, ExpansionTable, Span


def test_starts_before_is_strict():
	a = Span(lo=4, hi=9)
	b = Span(lo=4, hi=6)
	assert not a.starts_before(b)
	assert not b.starts_before(a)
	assert Span(lo=3, hi=20).starts_before(b)


def test_starts_before_ignores_end_offsets():
	"""An enclosing span that starts earlier still counts as 'before'."""
	outer = Span(lo=0, hi=100)
	inner = Span(lo=10, hi=12)
	assert outer.starts_before(inner)
	assert not inner.starts_before(outer)


def test_offset_adjusters():
	span = Span(file="a.rs", line=1, column=5, end_line=1, end_column=20, lo=4, hi=19)
	tail = span.with_lo(12)
	assert (tail.lo, tail.hi) == (12, 19)
	assert tail.line is None and tail.end_line == 1
	empty = span.shrink_to_lo()
	assert (empty.lo, empty.hi) == (4, 4)
	assert empty.ctxt == span.ctxt
	head = span.with_hi(8)
	assert (head.lo, head.hi) == (4, 8)
	assert head.line == 1 and head.end_line is None


def test_dummy_span():
	assert Span().is_dummy()
	assert not Span(line=1, column=1).is_dummy()
	assert not Span(lo=0, hi=3).is_dummy()


def test_expansion_table_allocates_fresh_contexts():
	table = ExpansionTable()
	call_site = Span(lo=3, hi=10)
	first = table.fresh("vec", call_site)
	second = table.fresh("vec", call_site)
	assert ROOT_CTXT not in (first, second)
	assert first != second
	data = table.expn_data(first)
	assert data is not None and data.macro_name == "vec" and data.call_site == call_site
	assert table.expn_data(ROOT_CTXT) is None
	assert Span(ctxt=first).from_expansion()
	assert not Span().from_expansion()
