# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Build a TypeDefinition from the token trees of one `enum` item.

Grammar (one token of lookahead throughout):

  item     := attrs visibility? `enum` IDENT `{` variant* `}`
  variant  := attrs IDENT ( `(` fields `)` | `{` fields `}` )? `,`?

Display templates come from the first message attribute (`#[error("...")]`)
or, failing that, the variant's doc comment lines. Tuple variants have their
positional placeholders rewritten to `field_i` so code generation can always
bind display arguments by name.

Validation order: grammar errors as parsing proceeds, then trailing input,
then (unless `#[no_display]`) missing messages over all variants, then
placeholder names against each variant's fields.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from onlyerror.config import DeriveConfig
from onlyerror.core.span import Span
from onlyerror.errors import (
	DuplicateAttribute,
	MisplacedAttribute,
	MissingDisplayMessage,
	TrailingTokens,
	UnexpectedToken,
	UnknownDisplayField,
)

from .cursor import Attribute, TokenCursor
from .fields import parse_variant_fields
from .lexer import BRACE, PARENTHESIS, Group, end_of_input_span, tokenize
from .model import NO_CAUSE, TypeDefinition, Variant, VariantKind
from .template import referenced_names, rewrite_positional


def _type_level_no_display(attrs: Sequence[Attribute], config: DeriveConfig) -> bool:
	seen: Optional[Attribute] = None
	for attr in attrs:
		if attr.name != config.no_display_attribute:
			continue
		if seen is not None:
			raise DuplicateAttribute(f"#[{attr.name}] may only be given once", span=attr.span)
		if not attr.is_bare:
			raise UnexpectedToken(f"#[{attr.name}] does not take arguments", span=attr.span)
		seen = attr
	return seen is not None


def _explicit_message(attrs: Sequence[Attribute], config: DeriveConfig) -> Optional[Tuple[str, Span]]:
	"""Decoded `#[error("...")]` text and the literal's span, if present."""
	found: Optional[Tuple[str, Span]] = None
	for attr in attrs:
		if attr.name not in config.message_attributes:
			continue
		if found is not None:
			raise DuplicateAttribute(
				f"a variant may carry only one display message (#[{attr.name}] repeated)",
				span=attr.span,
			)
		if attr.args is None or attr.args.delimiter != PARENTHESIS:
			raise UnexpectedToken(f"expected #[{attr.name}(\"...\")]", span=attr.span)
		inner = TokenCursor.from_group(attr.args)
		text, lit = inner.read_literal_string()
		inner.expect_end()
		found = (text, lit.span)
	return found


def _doc_template(attrs: Sequence[Attribute]) -> str:
	lines: List[str] = []
	for attr in attrs:
		if attr.name != "doc" or attr.doc is None:
			continue
		for line in attr.doc.splitlines():
			stripped = line.strip()
			if stripped:
				lines.append(stripped)
	# Joined with a space rather than concatenated; see DESIGN.md "Doc text".
	return " ".join(lines)


def build_variant(cursor: TokenCursor, *, config: DeriveConfig, no_display: bool) -> Variant:
	attrs = cursor.parse_attributes()
	name = cursor.read_ident()
	for attr in attrs:
		if attr.name == config.no_display_attribute:
			raise MisplacedAttribute(
				f"#[{attr.name}] is only allowed on the enum itself, not on variant `{name.text}`",
				span=attr.span,
			)

	kind = VariantKind.UNIT
	fields: dict[str, str] = {}
	cause = NO_CAUSE
	tree = cursor.peek()
	if isinstance(tree, Group) and tree.delimiter in (PARENTHESIS, BRACE):
		cursor.next()
		parsed = parse_variant_fields(tree, variant_name=name, config=config)
		kind, fields, cause = parsed.kind, parsed.fields, parsed.cause
	cursor.eat_punct(",")

	message = _explicit_message(attrs, config)
	if message is not None:
		template, template_span = message
		if kind is VariantKind.TUPLE:
			template = rewrite_positional(template, len(fields), span=template_span)
		display_fields = referenced_names(template, span=template_span)
	else:
		template = _doc_template(attrs)
		# Doc text is just documentation when formatting is suppressed.
		display_fields = () if no_display else referenced_names(template, span=name.span)

	return Variant(
		name=name.text,
		kind=kind,
		fields=fields,
		display_template=template,
		display_fields=display_fields,
		cause=cause,
		span=name.span,
	)


def _check_display_messages(variants: Sequence[Variant]) -> None:
	missing = [v for v in variants if not v.display_template]
	if not missing:
		return
	first = missing[0]
	raise MissingDisplayMessage(
		f"variant `{first.name}` has no display message; add a doc comment or #[error(\"...\")]",
		variant=first.name,
		span=first.span,
		notes=[f"variant `{v.name}` has no display message either" for v in missing[1:]],
	)


def _check_display_fields(variants: Sequence[Variant]) -> None:
	for v in variants:
		known = v.display_names()
		for name in v.display_fields:
			if name in known:
				continue
			if not name:
				msg = f"display message of variant `{v.name}` uses an implicit positional placeholder `{{}}`; name the field instead"
			else:
				msg = f"display message of variant `{v.name}` references unknown field `{name}`"
			raise UnknownDisplayField(msg, span=v.span)


def build_type_definition(cursor: TokenCursor, *, config: DeriveConfig) -> TypeDefinition:
	attrs = cursor.parse_attributes()
	no_display = _type_level_no_display(attrs, config)
	cursor.parse_visibility()
	enum_kw = cursor.expect_ident("enum")
	name = cursor.read_ident()
	body = cursor.expect_group(BRACE)

	content = TokenCursor.from_group(body)
	variants: List[Variant] = []
	while content.has_more():
		variants.append(build_variant(content, config=config, no_display=no_display))

	leftover = cursor.peek()
	if leftover is not None:
		raise TrailingTokens(f"unexpected {leftover.describe()} after enum body", span=leftover.span)

	if not no_display:
		_check_display_messages(variants)
		_check_display_fields(variants)

	return TypeDefinition(
		name=name.text,
		variants=tuple(variants),
		span=enum_kw.span,
		no_display=no_display,
	)


def parse_error_enum(source: str, *, file: Optional[str] = None, config: Optional[DeriveConfig] = None) -> TypeDefinition:
	"""
	Parse one `enum` item from Rust source text.

	Raises a DeriveError subclass on the first problem found.
	"""
	trees = tokenize(source, file=file)
	cursor = TokenCursor(trees, end_span=end_of_input_span(source, file=file))
	return build_type_definition(cursor, config=config or DeriveConfig())


__all__ = ["build_variant", "build_type_definition", "parse_error_enum"]
