# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
onlyerror driver: Rust `enum` text in, `Error`/`Display`/`From` impls out.

Pipeline (single synchronous pass, no state kept between calls):

  tokenize -> TokenCursor -> field/attribute parsing -> TypeDefinition
           -> generate_impls -> text

On failure the first DeriveError becomes one Diagnostic and the output text
is a `compile_error!` invocation carrying its message, mirroring what a
derive macro splices back into the program.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from onlyerror.codegen import compile_error, generate_impls
from onlyerror.config import DeriveConfig, load_derive_config
from onlyerror.core.diagnostics import Diagnostic
from onlyerror.core.span import Span
from onlyerror.errors import DeriveError
from onlyerror.parser import TypeDefinition, parse_error_enum


@dataclass
class Expansion:
	"""Result of one derive invocation."""

	code: str
	diagnostics: List[Diagnostic] = field(default_factory=list)
	definition: Optional[TypeDefinition] = None

	@property
	def ok(self) -> bool:
		return not any(d.severity == "error" for d in self.diagnostics)


def expand_derive(source: str, *, file: Optional[str] = None, config: Optional[DeriveConfig] = None) -> Expansion:
	"""Run the whole derive over `source`; never raises for bad input."""
	config = config or DeriveConfig()
	try:
		defn = parse_error_enum(source, file=file, config=config)
		code = generate_impls(defn, config)
	except DeriveError as err:
		return Expansion(code=compile_error(err.message), diagnostics=[err.to_diagnostic()])
	return Expansion(code=code, definition=defn)


def derive_error(source: str, *, file: Optional[str] = None, config: Optional[DeriveConfig] = None) -> str:
	"""Generated impls, or the compile_error! text standing in for them."""
	return expand_derive(source, file=file, config=config).code


def _print_diagnostics(diagnostics: List[Diagnostic], *, as_json: bool, exit_code: int, code: Optional[str] = None) -> None:
	if as_json:
		payload: dict = {
			"exit_code": exit_code,
			"diagnostics": [d.to_dict() for d in diagnostics],
		}
		if code is not None:
			payload["code"] = code
		print(json.dumps(payload))
		return
	for diag in diagnostics:
		print(diag.format_human(), file=sys.stderr)


def _config_error(message: str, path: Optional[Path]) -> Diagnostic:
	return Diagnostic(
		message=message,
		code="config",
		phase="config",
		severity="error",
		span=Span(file=str(path) if path is not None else None),
	)


def _io_error(message: str, file: str) -> Diagnostic:
	return Diagnostic(message=message, code="io", phase="io", span=Span(file=file))


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(
		prog="onlyerror",
		description="Generate Error/Display/From impls for an annotated Rust error enum",
	)
	p.add_argument("source", type=str, help="Path to a Rust file holding one enum definition ('-' reads stdin)")
	p.add_argument("-o", "--output", type=Path, default=None, help="Write generated code here (default: stdout)")
	p.add_argument("--config", type=Path, default=None, help="Path to an onlyerror JSON config file")
	p.add_argument(
		"--no-std",
		dest="no_std",
		action="store_true",
		default=None,
		help="Emit ::core paths (core::error::Error) instead of ::std",
	)
	p.add_argument(
		"--emit-compile-error",
		action="store_true",
		help="On failure, still write the compile_error! substitute to the output",
	)
	p.add_argument(
		"--json",
		action="store_true",
		help="Emit diagnostics (and code) as JSON (phase/code/message/severity/file/line/column)",
	)
	return p


def main(argv: list[str] | None = None) -> int:
	"""
	CLI: read one enum definition, print or write the generated impls.

	Exit code is 0 on success and 1 on any diagnostic (including config
	errors). With --json, a single JSON object is printed to stdout.
	"""
	args = _build_parser().parse_args(argv)

	try:
		config = load_derive_config(args.config) if args.config is not None else DeriveConfig()
		if args.no_std is not None:
			config = config.with_overrides(no_std=args.no_std)
	except (OSError, ValueError) as err:
		_print_diagnostics([_config_error(str(err), args.config)], as_json=args.json, exit_code=1)
		return 1

	file_label = "<stdin>" if args.source == "-" else args.source
	try:
		if args.source == "-":
			source_text = sys.stdin.read()
		else:
			source_text = Path(args.source).read_text(encoding="utf-8")
	except (OSError, UnicodeDecodeError) as err:
		_print_diagnostics([_io_error(f"cannot read source: {err}", file_label)], as_json=args.json, exit_code=1)
		return 1

	expansion = expand_derive(source_text, file=file_label, config=config)
	exit_code = 0 if expansion.ok else 1

	if expansion.ok or args.emit_compile_error:
		if args.output is not None:
			try:
				args.output.write_text(expansion.code, encoding="utf-8")
			except OSError as err:
				_print_diagnostics([_io_error(f"cannot write output: {err}", str(args.output))], as_json=args.json, exit_code=1)
				return 1
		elif not args.json:
			sys.stdout.write(expansion.code)

	if args.json:
		inline_code = expansion.code if args.output is None and (expansion.ok or args.emit_compile_error) else None
		_print_diagnostics(expansion.diagnostics, as_json=True, exit_code=exit_code, code=inline_code)
	else:
		_print_diagnostics(expansion.diagnostics, as_json=False, exit_code=exit_code)
	return exit_code


__all__ = ["Expansion", "expand_derive", "derive_error", "main"]
