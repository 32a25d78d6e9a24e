# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""CLI behavior: text and JSON output, levels, exit codes and --fix."""

from __future__ import annotations

import json
from pathlib import Path

from maplint.driver import main

CHAIN_SRC = """fn f(opt: Option<i32>) -> i32 {
	opt.map(|v| v + 1).unwrap_or(0)
}
"""


def _write_file(path: Path, content: str) -> Path:
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(content)
	return path


def test_text_output_goes_to_stderr(tmp_path: Path, capsys) -> None:
	src = _write_file(tmp_path / "m.rs", CHAIN_SRC)
	exit_code = main([str(src)])
	captured = capsys.readouterr()
	assert exit_code == 0
	assert captured.out == ""
	assert f"{src}:2:2: warning: called `map(<f>).unwrap_or(<a>)` on an `Option` value." in captured.err
	assert "[map_unwrap_or]" in captured.err
	assert "help: use `map_or(<a>, <f>)` instead: `opt.map_or(0, |v| v + 1)`" in captured.err


def test_json_output(tmp_path: Path, capsys) -> None:
	src = _write_file(tmp_path / "m.rs", CHAIN_SRC)
	exit_code = main([str(src), "--json"])
	payload = json.loads(capsys.readouterr().out)
	assert exit_code == 0
	assert payload["exit_code"] == 0
	(diag,) = payload["diagnostics"]
	assert diag["phase"] == "lint"
	assert diag["code"] == "map_unwrap_or"
	assert diag["severity"] == "warning"
	assert diag["file"] == str(src)
	assert (diag["line"], diag["column"]) == (2, 2)
	(sugg,) = diag["suggestions"]
	assert sugg["applicability"] == "MachineApplicable"
	assert [p["snippet"] for p in sugg["parts"]] == ["map_or", "", "0, "]


def test_deny_level_fails(tmp_path: Path, capsys) -> None:
	src = _write_file(tmp_path / "m.rs", CHAIN_SRC)
	exit_code = main([str(src), "--json", "--level", "deny"])
	payload = json.loads(capsys.readouterr().out)
	assert exit_code == 1
	assert payload["exit_code"] == 1
	assert payload["diagnostics"][0]["severity"] == "error"


def test_allow_level_is_silent(tmp_path: Path, capsys) -> None:
	src = _write_file(tmp_path / "m.rs", CHAIN_SRC)
	assert main([str(src), "--level", "allow"]) == 0
	assert capsys.readouterr().err == ""


def test_parse_error_reports_parser_phase(tmp_path: Path, capsys) -> None:
	src = _write_file(tmp_path / "bad.rs", "fn f() { let = 1; }\n")
	exit_code = main([str(src), "--json"])
	payload = json.loads(capsys.readouterr().out)
	assert exit_code == 1
	assert payload["diagnostics"][0]["phase"] == "parser"
	assert payload["diagnostics"][0]["line"] == 1


def test_missing_file_is_an_error(tmp_path: Path, capsys) -> None:
	exit_code = main([str(tmp_path / "nope.rs")])
	assert exit_code == 1
	assert "cannot read source file" in capsys.readouterr().err


def test_fix_rewrites_files_in_place(tmp_path: Path, capsys) -> None:
	src = _write_file(tmp_path / "m.rs", CHAIN_SRC)
	exit_code = main([str(src), "--fix", "--json"])
	payload = json.loads(capsys.readouterr().out)
	assert exit_code == 0
	assert payload["fixes_applied"] == 1
	assert src.read_text() == CHAIN_SRC.replace("opt.map(|v| v + 1).unwrap_or(0)", "opt.map_or(0, |v| v + 1)")
	assert main([str(src), "--json"]) == 0
	assert json.loads(capsys.readouterr().out)["diagnostics"] == []


def test_fix_leaves_declined_chains_alone(tmp_path: Path, capsys) -> None:
	content = """fn f() -> Vec<i32> {
	let x = vec![1, 2];
	x.get(0..1).map(|s| s.to_vec()).unwrap_or(x)
}
"""
	src = _write_file(tmp_path / "m.rs", content)
	assert main([str(src), "--fix"]) == 0
	assert src.read_text() == content
	assert capsys.readouterr().err == ""


def test_multiple_sources(tmp_path: Path, capsys) -> None:
	a = _write_file(tmp_path / "a.rs", CHAIN_SRC)
	b = _write_file(tmp_path / "b.rs", "fn g() {}\n")
	exit_code = main([str(a), str(b), "--json"])
	payload = json.loads(capsys.readouterr().out)
	assert exit_code == 0
	assert [d["file"] for d in payload["diagnostics"]] == [str(a)]


def test_non_utf8_file_is_a_driver_error(tmp_path: Path, capsys) -> None:
	"""Undecodable bytes are reported per file; later files are still linted."""
	bad = tmp_path / "bad.rs"
	bad.write_bytes(b"fn f() {}\n// \xff\xfe\n")
	good = _write_file(tmp_path / "good.rs", CHAIN_SRC)
	exit_code = main([str(bad), str(good), "--json"])
	payload = json.loads(capsys.readouterr().out)
	assert exit_code == 1
	assert payload["exit_code"] == 1
	first, second = payload["diagnostics"]
	assert first["phase"] == "driver"
	assert first["file"] == str(bad)
	assert "not valid UTF-8" in first["message"]
	assert second["phase"] == "lint" and second["file"] == str(good)


def test_non_utf8_file_text_output(tmp_path: Path, capsys) -> None:
	bad = tmp_path / "bad.rs"
	bad.write_bytes(b"\xff")
	assert main([str(bad)]) == 1
	assert f"{bad}:?:?: error: source file is not valid UTF-8" in capsys.readouterr().err


def test_recursion_limit_becomes_a_driver_error(tmp_path: Path, capsys, monkeypatch) -> None:
	from maplint import driver

	def _too_deep(*_args, **_kwargs):
		raise RecursionError("maximum recursion depth exceeded")

	monkeypatch.setattr(driver, "lint_source", _too_deep)
	src = _write_file(tmp_path / "m.rs", CHAIN_SRC)
	exit_code = main([str(src), "--json"])
	payload = json.loads(capsys.readouterr().out)
	assert exit_code == 1
	(diag,) = payload["diagnostics"]
	assert diag["phase"] == "driver"
	assert diag["message"] == "expression nesting too deep to analyze"


def test_long_operator_chain_lints_cleanly(tmp_path: Path, capsys) -> None:
	terms = " + ".join(["v"] * 1000)
	content = f"""fn f(opt: Option<i32>) -> i32 {{
	opt.map(|v| {terms}).unwrap_or(0)
}}
"""
	src = _write_file(tmp_path / "m.rs", content)
	exit_code = main([str(src), "--json"])
	payload = json.loads(capsys.readouterr().out)
	assert exit_code == 0
	assert [d["phase"] for d in payload["diagnostics"]] == ["lint"]
