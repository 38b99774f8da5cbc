# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure reported by the derive pipeline.

A diagnostic is a message plus a span and optional notes. Parsing code raises
`DeriveError`; the driver turns the first one into a Diagnostic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a derive diagnostic (always an error today)."""

	message: str
	code: str | None = None
	# Pipeline stage that produced the diagnostic ("lex", "derive", "codegen",
	# "config").
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Source location (Span() denotes unknown).
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def format_human(self) -> str:
		"""Render as `file:line:column: severity: message`, one note per line."""
		lines = [f"{self.span.short()}: {self.severity}: {self.message}"]
		for note in self.notes:
			lines.append(f"  note: {note}")
		return "\n".join(lines)

	def to_dict(self) -> dict[str, Any]:
		return {
			"phase": self.phase,
			"code": self.code,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file,
			"line": self.span.line,
			"column": self.span.column,
			"notes": list(self.notes),
		}


__all__ = ["Diagnostic"]
