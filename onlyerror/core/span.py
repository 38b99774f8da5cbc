# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source span attached to tokens, model nodes and diagnostics.

Spans are best-effort: the lexer always fills line/column, while callers that
build spans by hand (e.g. for end-of-input) may leave parts unknown.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (file/line/column, 1-based, plus raw lexer token)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	raw: Any = None

	@classmethod
	def from_loc(cls, loc: Any, *, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from a lark token (or any object exposing
		line/column attributes).

		If `loc` is already a Span, it is returned unchanged.
		"""
		if loc is None:
			return cls(file=file)
		if isinstance(loc, cls):
			return loc
		return cls(
			file=file or getattr(loc, "file", None) or getattr(loc, "filename", None) or None,
			line=getattr(loc, "line", None),
			column=getattr(loc, "column", None),
			end_line=getattr(loc, "end_line", None),
			end_column=getattr(loc, "end_column", None),
			raw=loc,
		)

	def end(self) -> "Span":
		"""Zero-width span at the end of this one (used for end-of-input)."""
		line = self.end_line if self.end_line is not None else self.line
		column = self.end_column if self.end_column is not None else self.column
		return Span(file=self.file, line=line, column=column, end_line=line, end_column=column)

	def short(self) -> str:
		"""Format as `file:line:column`, with `?` for unknown parts."""
		f = self.file or "<input>"
		l = self.line if self.line is not None else "?"
		c = self.column if self.column is not None else "?"
		return f"{f}:{l}:{c}"


__all__ = ["Span"]
