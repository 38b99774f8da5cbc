# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Error taxonomy of the derive pipeline.

Every failure is a `DeriveError` carrying a span. Parsing is fail-fast: the
first error raised aborts the invocation and the driver reports it as a single
diagnostic in place of the generated code.
"""

from __future__ import annotations

from typing import Iterable, Optional

from onlyerror.core.diagnostics import Diagnostic
from onlyerror.core.span import Span


class DeriveError(ValueError):
	"""
	Base class for user-facing derive failures.

	This is a `ValueError` subclass so callers that only care about "bad input"
	can catch it generically, while the driver converts it into a structured
	diagnostic via `to_diagnostic`.
	"""

	code = "derive-error"
	phase = "derive"

	def __init__(self, message: str, *, span: Optional[Span] = None, notes: Iterable[str] = ()) -> None:
		super().__init__(message)
		self.message = message
		self.span = span if span is not None else Span()
		self.notes = list(notes)

	def to_diagnostic(self) -> Diagnostic:
		return Diagnostic(
			message=self.message,
			code=self.code,
			phase=self.phase,
			severity="error",
			span=self.span,
			notes=list(self.notes),
		)


class UnexpectedToken(DeriveError):
	"""Grammar violation; span is the offending token or end-of-input."""

	code = "unexpected-token"


class TrailingTokens(DeriveError):
	"""Input left over after the enum body."""

	code = "trailing-tokens"


class DuplicateCauseMarker(DeriveError):
	"""Second `#[from]`/`#[source]` marker within one variant."""

	code = "duplicate-cause-marker"

	def __init__(self, message: str, *, first_field: str, span: Optional[Span] = None) -> None:
		super().__init__(message, span=span)
		self.first_field = first_field


class ConversionArityError(DeriveError):
	"""`#[from]` on a variant with more than one field."""

	code = "conversion-arity"


class MissingDisplayMessage(DeriveError):
	"""Variant without message or doc comment while formatting is generated."""

	code = "missing-display-message"

	def __init__(self, message: str, *, variant: str, span: Optional[Span] = None, notes: Iterable[str] = ()) -> None:
		super().__init__(message, span=span, notes=notes)
		self.variant = variant


class DuplicateAttribute(DeriveError):
	"""An attribute that may appear once was repeated."""

	code = "duplicate-attribute"


class MisplacedAttribute(DeriveError):
	"""A type-level attribute used on a variant or field."""

	code = "misplaced-attribute"


class UnknownDisplayField(DeriveError):
	"""A display placeholder names no field of its variant."""

	code = "unknown-display-field"


class InvalidDisplayTemplate(DeriveError):
	"""Unbalanced braces in a display template."""

	code = "invalid-display-template"


class CodeAssemblyError(DeriveError):
	"""Generated text failed to re-lex; reported at the definition start."""

	code = "code-assembly"
	phase = "codegen"


__all__ = [
	"DeriveError",
	"UnexpectedToken",
	"TrailingTokens",
	"DuplicateCauseMarker",
	"ConversionArityError",
	"MissingDisplayMessage",
	"DuplicateAttribute",
	"MisplacedAttribute",
	"UnknownDisplayField",
	"InvalidDisplayTemplate",
	"CodeAssemblyError",
]
