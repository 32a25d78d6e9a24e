# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
maplint command-line driver.

Runs the pipeline parse -> resolve -> type check -> lints over each source
file, then renders the collected diagnostics either as human-readable lines on
stderr or as a JSON payload on stdout. With `--fix`, machine-applicable
suggestions are written back to the files.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from maplint.core.diagnostics import Diagnostic, Suggestion
from maplint.core.fixes import apply_suggestions
from maplint.core.source_map import SourceMap
from maplint.core.span import ExpansionTable
from maplint.core.types_core import TypeTable
from maplint.lints import LINTS, LintConfig, LintLevel, run_lints
from maplint.parser import parse_source_to_hir
from maplint.stage1 import build_hir_map
from maplint.type_checker import TypeChecker


def lint_source(
	source: str,
	*,
	file: Optional[str] = None,
	config: Optional[LintConfig] = None,
	source_map: Optional[SourceMap] = None,
) -> List[Diagnostic]:
	"""
	Lint one source text and return every diagnostic produced.

	Syntax errors yield a single parser-phase diagnostic and no lint results.
	"""
	source_map = source_map if source_map is not None else SourceMap()
	module, parse_diags = parse_source_to_hir(
		source, file=file, source_map=source_map, expansions=ExpansionTable()
	)
	if module is None:
		return parse_diags

	hir_map = build_hir_map(module)
	type_table = TypeTable()
	typed = TypeChecker(type_table).check_module(module)

	diagnostics: List[Diagnostic] = []
	run_lints(hir_map, typed, type_table, source_map, diagnostics.append, config)
	return diagnostics


def _suggestion_to_json(sugg: Suggestion) -> dict:
	return {
		"message": sugg.message,
		"applicability": sugg.applicability.value,
		"parts": [{"lo": p.span.lo, "hi": p.span.hi, "snippet": p.snippet} for p in sugg.parts],
	}


def _diag_to_json(diag: Diagnostic, phase: str, source: Path) -> dict:
	"""Render a Diagnostic to a structured JSON-friendly dict."""
	line = getattr(diag.span, "line", None) if diag.span is not None else None
	column = getattr(diag.span, "column", None) if diag.span is not None else None
	file = None
	if diag.span is not None:
		file = getattr(diag.span, "file", None)
	if file is None:
		file = str(source)
	phase = getattr(diag, "phase", None) or phase
	return {
		"phase": phase,
		"code": diag.code,
		"message": diag.message,
		"severity": diag.severity,
		"file": file,
		"line": line,
		"column": column,
		"notes": list(diag.notes),
		"suggestions": [_suggestion_to_json(s) for s in diag.suggestions],
	}


def _suggested_text(text: str, diag: Diagnostic, sugg: Suggestion) -> Optional[str]:
	"""The diagnostic's source region as it would read with `sugg` applied."""
	new_text, applied = apply_suggestions(text, [sugg], only_machine_applicable=False)
	if not applied or diag.span.is_dummy():
		return None
	delta = len(new_text) - len(text)
	return new_text[diag.span.lo : diag.span.hi + delta]


def _print_diag(diag: Diagnostic, source: Path, text: str) -> None:
	loc = f"{diag.span.line}:{diag.span.column}" if diag.span.line is not None else "?:?"
	code = f" [{diag.code}]" if diag.code else ""
	print(f"{source}:{loc}: {diag.severity}: {diag.message}{code}", file=sys.stderr)
	for note in diag.notes:
		print(f"  note: {note}", file=sys.stderr)
	for sugg in diag.suggestions:
		rendered = _suggested_text(text, diag, sugg)
		if rendered is None:
			print(f"  help: {sugg.message}", file=sys.stderr)
		else:
			print(f"  help: {sugg.message}: `{rendered}`", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
	"""
	Lint each source file for `map(..).unwrap_or(..)` chains on `Option`.

	Exit code is 1 when a file fails to parse or any error-severity diagnostic
	is emitted (e.g. with `--level deny`), otherwise 0.
	"""
	parser = argparse.ArgumentParser(prog="maplint", description="Suggest map_or/and_then for Option map().unwrap_or() chains")
	parser.add_argument("source", type=Path, nargs="+", help="Path(s) to source file(s)")
	parser.add_argument(
		"--json",
		action="store_true",
		help="Emit diagnostics as JSON on stdout instead of text on stderr",
	)
	parser.add_argument(
		"--fix",
		action="store_true",
		help="Apply machine-applicable suggestions in place",
	)
	parser.add_argument(
		"--level",
		choices=[level.value for level in LintLevel],
		default=LintLevel.WARN.value,
		help="Level for every registered lint (default: warn)",
	)
	args = parser.parse_args(argv)

	level = LintLevel(args.level)
	config = LintConfig(levels={name: level for name in LINTS}, default_level=level)

	exit_code = 0
	payload_diags: list[dict] = []
	fixes_applied = 0
	for source_path in args.source:
		try:
			text = source_path.read_text(encoding="utf-8")
		except (OSError, UnicodeDecodeError) as err:
			if isinstance(err, UnicodeDecodeError):
				msg = f"source file is not valid UTF-8: {err.reason} at byte {err.start}"
			else:
				msg = f"cannot read source file: {err.strerror or err}"
			exit_code = 1
			if args.json:
				payload_diags.append(
					{"phase": "driver", "message": msg, "severity": "error", "file": str(source_path), "line": None, "column": None}
				)
			else:
				print(f"{source_path}:?:?: error: {msg}", file=sys.stderr)
			continue

		try:
			diags = lint_source(text, file=str(source_path), config=config)
		except RecursionError:
			msg = "expression nesting too deep to analyze"
			exit_code = 1
			if args.json:
				payload_diags.append(
					{"phase": "driver", "message": msg, "severity": "error", "file": str(source_path), "line": None, "column": None}
				)
			else:
				print(f"{source_path}:?:?: error: {msg}", file=sys.stderr)
			continue
		if any(d.severity == "error" for d in diags):
			exit_code = 1

		if args.fix:
			new_text, applied = apply_suggestions(text, [s for d in diags for s in d.suggestions])
			if applied:
				source_path.write_text(new_text, encoding="utf-8")
				fixes_applied += applied

		if args.json:
			payload_diags.extend(_diag_to_json(d, "lint", source_path) for d in diags)
		else:
			for d in diags:
				_print_diag(d, source_path, text)

	if args.json:
		payload: dict = {"exit_code": exit_code, "diagnostics": payload_diags}
		if args.fix:
			payload["fixes_applied"] = fixes_applied
		print(json.dumps(payload))
	elif args.fix and fixes_applied:
		print(f"maplint: applied {fixes_applied} fix(es)", file=sys.stderr)
	return exit_code


if __name__ == "__main__":
	sys.exit(main())
