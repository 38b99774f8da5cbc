# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Variant field lists and their cause markers.

Tuple variants: `( [attrs] Type, ... )`, keyed "0", "1", ...
Struct variants: `{ [attrs] name: Type, ... }`, keyed by field name.

Trailing commas are optional. Each field may carry `#[from]` (conversion
source) or `#[source]` (cause only); across the whole variant at most one
such marker may appear.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from onlyerror.config import DeriveConfig
from onlyerror.core.span import Span
from onlyerror.errors import (
	ConversionArityError,
	DuplicateCauseMarker,
	MisplacedAttribute,
	UnexpectedToken,
)

from .cursor import Attribute, TokenCursor, TypePath
from .lexer import BRACE, PARENTHESIS, Group, Ident
from .model import NO_CAUSE, CauseMarker, VariantKind


@dataclass(frozen=True)
class FieldDef:
	key: str
	ty: TypePath
	attrs: Tuple[Attribute, ...]
	# Field name for Struct fields, start of the type for Tuple fields.
	span: Span


@dataclass(frozen=True)
class ParsedFields:
	kind: VariantKind
	fields: Dict[str, str]
	cause: CauseMarker


def _reject_no_display(attrs: Sequence[Attribute], config: DeriveConfig) -> None:
	for attr in attrs:
		if attr.name == config.no_display_attribute:
			raise MisplacedAttribute(
				f"#[{attr.name}] is only allowed on the enum itself, not on a field",
				span=attr.span,
			)


def parse_tuple_fields(group: Group, *, config: DeriveConfig) -> List[FieldDef]:
	cursor = TokenCursor.from_group(group)
	out: List[FieldDef] = []
	while cursor.has_more():
		attrs = cursor.parse_attributes()
		_reject_no_display(attrs, config)
		ty = cursor.parse_type()
		out.append(FieldDef(key=str(len(out)), ty=ty, attrs=tuple(attrs), span=ty.span))
		cursor.eat_punct(",")
	return out


def parse_struct_fields(group: Group, *, config: DeriveConfig) -> List[FieldDef]:
	cursor = TokenCursor.from_group(group)
	out: List[FieldDef] = []
	seen: set[str] = set()
	while cursor.has_more():
		attrs = cursor.parse_attributes()
		_reject_no_display(attrs, config)
		name = cursor.read_ident()
		if name.text in seen:
			raise UnexpectedToken(f"field `{name.text}` is already declared", span=name.span)
		seen.add(name.text)
		cursor.expect_punct(":")
		ty = cursor.parse_type()
		out.append(FieldDef(key=name.text, ty=ty, attrs=tuple(attrs), span=name.span))
		cursor.eat_punct(",")
	return out


def resolve_cause_marker(fields: Sequence[FieldDef], *, variant_name: Ident, config: DeriveConfig) -> CauseMarker:
	"""
	Scan field attributes for `#[from]` / `#[source]`.

	Fields are visited in declaration order; a second marker anywhere in the
	variant (including a second marker on the same field) is a
	DuplicateCauseMarker naming the first marked field.
	"""
	marker = NO_CAUSE
	for fdef in fields:
		for attr in fdef.attrs:
			if attr.name not in config.cause_attributes:
				continue
			if marker.key is not None:
				raise DuplicateCauseMarker(
					f"#[{config.from_attribute}] | #[{config.source_attribute}] can only be used once. "
					f"Previously seen on field `{marker.key}`",
					first_field=marker.key,
					span=attr.span,
				)
			if not attr.is_bare:
				raise UnexpectedToken(f"#[{attr.name}] does not take arguments", span=attr.span)
			if attr.name == config.from_attribute:
				if len(fields) > 1:
					raise ConversionArityError(
						f"#[{config.from_attribute}] can only be used with a single field",
						span=variant_name.span,
					)
				marker = CauseMarker.conversion_source(fdef.key)
			else:
				marker = CauseMarker.source_only(fdef.key)
	return marker


def parse_variant_fields(group: Group, *, variant_name: Ident, config: DeriveConfig) -> ParsedFields:
	"""Parse a variant's field group into its kind, ordered field map and cause marker."""
	if group.delimiter == PARENTHESIS:
		kind = VariantKind.TUPLE
		defs = parse_tuple_fields(group, config=config)
	elif group.delimiter == BRACE:
		kind = VariantKind.STRUCT
		defs = parse_struct_fields(group, config=config)
	else:
		raise UnexpectedToken(f"unexpected delimiter `{group.delimiter}`", span=group.span)
	cause = resolve_cause_marker(defs, variant_name=variant_name, config=config)
	return ParsedFields(kind=kind, fields={d.key: d.ty.text for d in defs}, cause=cause)


__all__ = [
	"FieldDef",
	"ParsedFields",
	"parse_tuple_fields",
	"parse_struct_fields",
	"resolve_cause_marker",
	"parse_variant_fields",
]
