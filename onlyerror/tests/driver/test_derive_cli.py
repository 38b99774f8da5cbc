# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from onlyerror import derive_error, expand_derive
from onlyerror.derive import main as onlyerror_main

_GOOD = """
#[derive(Debug, onlyerror::Error)]
enum Error {
    /// First
    First,
    #[error("Second with {0}")]
    Second(usize),
    #[error("Third with {key} and {value:?}")]
    Third { key: String, value: Vec<usize> },
}
"""

_MISSING = "enum Error {\n    /// ok\n    First,\n    Second,\n}\n"


def _write_file(path: Path, text: str) -> None:
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(text, encoding="utf-8")


def test_expand_derive_success() -> None:
	expansion = expand_derive(_GOOD, file="good.rs")
	assert expansion.ok
	assert expansion.diagnostics == []
	assert expansion.definition is not None
	assert 'Self::Second(field_0) => ::std::write!(__formatter, "Second with {field_0}", field_0 = field_0),' in expansion.code
	assert "Self::Third { key, value, .. }" in expansion.code


def test_expand_derive_failure_substitutes_compile_error() -> None:
	expansion = expand_derive(_MISSING, file="bad.rs")
	assert not expansion.ok
	assert expansion.definition is None
	(diag,) = expansion.diagnostics
	assert diag.code == "missing-display-message"
	assert diag.phase == "derive"
	assert (diag.span.file, diag.span.line, diag.span.column) == ("bad.rs", 4, 5)
	assert expansion.code.startswith("::core::compile_error!(")
	assert "Second" in expansion.code
	assert "impl" not in expansion.code


def test_no_display_makes_missing_messages_legal() -> None:
	expansion = expand_derive("#[no_display]\n" + _MISSING)
	assert expansion.ok
	assert "Display" not in expansion.code


def test_derive_error_returns_text_only() -> None:
	assert derive_error(_GOOD) == expand_derive(_GOOD).code
	assert derive_error("enum E { A(#[from] X, Y) }").startswith("::core::compile_error!")


def test_cli_writes_output_file(tmp_path: Path) -> None:
	src = tmp_path / "error.rs"
	out = tmp_path / "out" / "impls.rs"
	_write_file(src, _GOOD)
	out.parent.mkdir()
	assert onlyerror_main([str(src), "-o", str(out)]) == 0
	text = out.read_text(encoding="utf-8")
	assert text.startswith("impl ::std::error::Error for Error {")
	assert "impl ::std::fmt::Display for Error {" in text


def test_cli_prints_code_to_stdout(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = tmp_path / "error.rs"
	_write_file(src, _GOOD)
	assert onlyerror_main([str(src), "--no-std"]) == 0
	captured = capsys.readouterr()
	assert "impl ::core::error::Error for Error {" in captured.out
	assert captured.err == ""


def test_cli_reads_stdin(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
	monkeypatch.setattr("sys.stdin", io.StringIO(_GOOD))
	assert onlyerror_main(["-"]) == 0
	assert "impl ::std::error::Error for Error" in capsys.readouterr().out


def test_cli_human_diagnostics(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = tmp_path / "bad.rs"
	_write_file(src, "enum Error {\n    /// a\n    A,\n    B,\n    C,\n}\n")
	out = tmp_path / "impls.rs"
	assert onlyerror_main([str(src), "-o", str(out)]) == 1
	captured = capsys.readouterr()
	assert f"{src}:4:5: error: variant `B` has no display message" in captured.err
	assert "note: variant `C` has no display message either" in captured.err
	assert not out.exists()


def test_cli_emit_compile_error(tmp_path: Path) -> None:
	src = tmp_path / "bad.rs"
	_write_file(src, "enum E { /// x\n A { #[source] a: X, #[source] b: Y } }")
	out = tmp_path / "impls.rs"
	assert onlyerror_main([str(src), "-o", str(out), "--emit-compile-error"]) == 1
	assert out.read_text(encoding="utf-8").startswith("::core::compile_error!(\"#[from] | #[source] can only be used once.")


def test_cli_json_failure(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = tmp_path / "bad.rs"
	_write_file(src, "enum E { /// x\n Pair(#[from] A, B) }")
	assert onlyerror_main([str(src), "--json"]) == 1
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == 1
	assert "code" not in payload
	(diag,) = payload["diagnostics"]
	assert diag["code"] == "conversion-arity"
	assert diag["phase"] == "derive"
	assert diag["severity"] == "error"
	assert diag["file"] == str(src)
	assert (diag["line"], diag["column"]) == (2, 2)


def test_cli_json_success_inlines_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = tmp_path / "good.rs"
	_write_file(src, _GOOD)
	assert onlyerror_main([str(src), "--json"]) == 0
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == 0
	assert payload["diagnostics"] == []
	assert payload["code"] == expand_derive(_GOOD).code


def test_cli_missing_source_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	assert onlyerror_main([str(tmp_path / "nope.rs"), "--json"]) == 1
	payload = json.loads(capsys.readouterr().out)
	assert payload["diagnostics"][0]["phase"] == "io"


def test_cli_config_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	cfg = tmp_path / "onlyerror.json"
	_write_file(
		cfg,
		json.dumps(
			{
				"format": "onlyerror-config",
				"version": 0,
				"no_std": True,
				"message_attributes": ["display"],
			}
		),
	)
	src = tmp_path / "error.rs"
	_write_file(src, 'enum E { #[display("shown")] A }')
	assert onlyerror_main([str(src), "--config", str(cfg)]) == 0
	out = capsys.readouterr().out
	assert "impl ::core::fmt::Display for E" in out
	assert '"shown"' in out


def test_cli_rejects_bad_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	cfg = tmp_path / "onlyerror.json"
	_write_file(cfg, json.dumps({"format": "onlyerror-config", "version": 0, "colour": "red"}))
	src = tmp_path / "error.rs"
	_write_file(src, _GOOD)
	assert onlyerror_main([str(src), "--config", str(cfg), "--json"]) == 1
	payload = json.loads(capsys.readouterr().out)
	(diag,) = payload["diagnostics"]
	assert diag["phase"] == "config"
	assert "unknown fields: colour" in diag["message"]


def test_cli_undecodable_source_is_an_io_diagnostic(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = tmp_path / "latin1.rs"
	src.write_bytes(b"enum E { /// caf\xe9\n A }")
	assert onlyerror_main([str(src), "--json"]) == 1
	payload = json.loads(capsys.readouterr().out)
	(diag,) = payload["diagnostics"]
	assert diag["phase"] == "io"
	assert diag["file"] == str(src)


def test_cli_unwritable_output_is_an_io_diagnostic(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = tmp_path / "error.rs"
	_write_file(src, _GOOD)
	out = tmp_path / "missing" / "o.rs"
	assert onlyerror_main([str(src), "-o", str(out), "--json"]) == 1
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == 1
	(diag,) = payload["diagnostics"]
	assert diag["phase"] == "io"
	assert diag["file"] == str(out)
	assert not out.exists()
