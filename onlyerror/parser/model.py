# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Parsed model of an error enum: its variants, their fields, display
templates and cause markers. Built once by the parser and read-only after.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional, Tuple

from onlyerror.core.span import Span

# Tuple fields are keyed "0", "1", ...; display templates and match patterns
# refer to them through this alias ("field_0", ...).
TUPLE_FIELD_PREFIX = "field_"


def tuple_alias(key: str) -> str:
	return f"{TUPLE_FIELD_PREFIX}{key}"


class VariantKind(Enum):
	UNIT = "unit"
	TUPLE = "tuple"
	STRUCT = "struct"


class CauseKind(Enum):
	NONE = "none"
	CONVERSION_SOURCE = "conversion_source"  # #[from]
	SOURCE_ONLY = "source_only"  # #[source]


@dataclass(frozen=True)
class CauseMarker:
	kind: CauseKind = CauseKind.NONE
	key: Optional[str] = None

	@classmethod
	def conversion_source(cls, key: str) -> "CauseMarker":
		return cls(CauseKind.CONVERSION_SOURCE, key)

	@classmethod
	def source_only(cls, key: str) -> "CauseMarker":
		return cls(CauseKind.SOURCE_ONLY, key)

	@property
	def is_present(self) -> bool:
		return self.kind is not CauseKind.NONE


NO_CAUSE = CauseMarker()


@dataclass(frozen=True)
class Variant:
	name: str
	kind: VariantKind
	# FieldKey -> rendered type path, in declaration order.
	fields: Mapping[str, str] = field(default_factory=dict)
	display_template: str = ""
	# Placeholder names in first-appearance order, de-duplicated.
	display_fields: Tuple[str, ...] = ()
	cause: CauseMarker = NO_CAUSE
	span: Span = field(default_factory=Span)

	def __post_init__(self) -> None:
		object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

	@property
	def display_referenced_fields(self) -> FrozenSet[str]:
		return frozenset(self.display_fields)

	def binding(self, key: str) -> str:
		"""Pattern binding name for a field key."""
		if self.kind is VariantKind.TUPLE:
			return tuple_alias(key)
		return key

	def display_names(self) -> FrozenSet[str]:
		"""Names a display placeholder may use for this variant."""
		return frozenset(self.binding(key) for key in self.fields)

	@property
	def conversion_type(self) -> Optional[str]:
		if self.cause.kind is CauseKind.CONVERSION_SOURCE and self.cause.key is not None:
			return self.fields[self.cause.key]
		return None


@dataclass(frozen=True)
class TypeDefinition:
	name: str
	variants: Tuple[Variant, ...]
	# Span of the `enum` keyword; generic failures are reported here.
	span: Span = field(default_factory=Span)
	no_display: bool = False

	def variant(self, name: str) -> Variant:
		for v in self.variants:
			if v.name == name:
				return v
		raise KeyError(name)


__all__ = [
	"TUPLE_FIELD_PREFIX",
	"tuple_alias",
	"VariantKind",
	"CauseKind",
	"CauseMarker",
	"NO_CAUSE",
	"Variant",
	"TypeDefinition",
]
