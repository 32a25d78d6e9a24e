"""
maplint parser: Rust-like source text to HIR.

`parse_source` is the raw entry point (raises on bad input);
`parse_source_to_hir` is what the driver uses: it records the text in the
SourceMap and converts syntax/structure errors into parser-phase diagnostics.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from maplint.core.diagnostics import Diagnostic
from maplint.core.source_map import SourceMap
from maplint.core.span import ExpansionTable, Span
from maplint.stage1 import hir_nodes as H

from .parser import ParseError, parse_source


def _describe_unexpected(err: UnexpectedInput) -> str:
	if isinstance(err, UnexpectedEOF):
		return "unexpected end of input"
	if isinstance(err, UnexpectedToken):
		if err.token.type == "$END":
			return "unexpected end of input"
		return f"unexpected token '{err.token.value}'"
	if isinstance(err, UnexpectedCharacters):
		return f"unexpected character '{err.char}'"
	return "syntax error"


def parse_source_to_hir(
	source: str,
	*,
	file: Optional[str] = None,
	source_map: Optional[SourceMap] = None,
	expansions: Optional[ExpansionTable] = None,
) -> Tuple[Optional[H.HModule], List[Diagnostic]]:
	"""
	Parse `source`, returning `(module, diagnostics)`.

	On failure the module is None and the diagnostics list holds exactly one
	parser-phase error.
	"""
	if source_map is not None:
		source_map.add_file(file, source)
	try:
		module = parse_source(source, file=file, expansions=expansions)
	except UnexpectedInput as err:
		line = getattr(err, "line", None)
		column = getattr(err, "column", None)
		span = Span(
			file=file,
			line=line if isinstance(line, int) and line > 0 else None,
			column=column if isinstance(column, int) and column > 0 else None,
		)
		return None, [Diagnostic(message=_describe_unexpected(err), phase="parser", severity="error", span=span)]
	except ParseError as err:
		return None, [Diagnostic(message=str(err), phase="parser", severity="error", span=err.span)]
	return module, []


__all__ = ["ParseError", "parse_source", "parse_source_to_hir"]
