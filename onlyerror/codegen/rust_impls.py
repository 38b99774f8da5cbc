# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
TypeDefinition -> Rust impl text (textual emitter).

Emits, for the enum:
  - `impl Error`   : `source()` with one arm per variant carrying a cause,
  - `impl Display` : one arm per variant writing its template (skipped for
                     `#[no_display]` enums),
  - `impl From<T>` : one per `#[from]` variant.

Match patterns must mirror each variant's shape exactly:
  Unit   -> `Self::V`
  Tuple  -> `Self::V(field_0, _, field_2)` / `Self::V(..)`
  Struct -> `Self::V { key, value, .. }` / `Self::V { .. }`

The assembled text is re-lexed before it is returned; a failure there is a
CodeAssemblyError at the enum keyword.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Collection, List, Optional

from onlyerror.config import DeriveConfig
from onlyerror.errors import CodeAssemblyError
from onlyerror.parser.lexer import tokenize
from onlyerror.parser.model import CauseKind, TypeDefinition, Variant, VariantKind

_INDENT = "    "


@dataclass(frozen=True)
class RustPaths:
	"""Fully qualified paths for the std (or core) flavour of the output."""

	root: str

	@property
	def error_trait(self) -> str:
		return f"{self.root}::error::Error"

	@property
	def fmt(self) -> str:
		return f"{self.root}::fmt"

	@property
	def option(self) -> str:
		return f"{self.root}::option::Option"

	@property
	def from_trait(self) -> str:
		return f"{self.root}::convert::From"


STD_PATHS = RustPaths("::std")
CORE_PATHS = RustPaths("::core")


def paths_for(config: DeriveConfig) -> RustPaths:
	return CORE_PATHS if config.no_std else STD_PATHS


_RUST_ESCAPES = {
	"\\": "\\\\",
	'"': '\\"',
	"\n": "\\n",
	"\r": "\\r",
	"\t": "\\t",
	"\0": "\\0",
}


def rust_string_literal(text: str) -> str:
	"""Quote `text` as a Rust string literal."""
	out = ['"']
	for ch in text:
		if ch in _RUST_ESCAPES:
			out.append(_RUST_ESCAPES[ch])
		elif ord(ch) < 0x20 or ord(ch) == 0x7F:
			out.append(f"\\u{{{ord(ch):x}}}")
		else:
			out.append(ch)
	out.append('"')
	return "".join(out)


def compile_error(message: str) -> str:
	"""The text substituted for the impls when the derive fails."""
	return f"::core::compile_error!({rust_string_literal(message)});"


def variant_pattern(variant: Variant, bound: Collection[str]) -> str:
	"""
	Match pattern for `variant` binding exactly the names in `bound`
	(binding names: field name for Struct, `field_i` for Tuple).
	"""
	if variant.kind is VariantKind.UNIT:
		return f"Self::{variant.name}"
	if variant.kind is VariantKind.TUPLE:
		slots = [variant.binding(key) if variant.binding(key) in bound else "_" for key in variant.fields]
		if all(slot == "_" for slot in slots):
			return f"Self::{variant.name}(..)"
		return f"Self::{variant.name}({', '.join(slots)})"
	names = [key for key in variant.fields if key in bound]
	if not names:
		return f"Self::{variant.name} {{ .. }}"
	return f"Self::{variant.name} {{ {', '.join(names)}, .. }}"


def cause_arm(variant: Variant, paths: RustPaths) -> Optional[str]:
	key = variant.cause.key
	if not variant.cause.is_present or key is None:
		return None
	binding = variant.binding(key)
	return f"{variant_pattern(variant, {binding})} => {paths.option}::Some({binding}),"


def display_arm(variant: Variant, paths: RustPaths) -> str:
	args = "".join(f", {name} = {name}" for name in variant.display_fields)
	pattern = variant_pattern(variant, variant.display_referenced_fields)
	return f"{pattern} => {paths.root}::write!(__formatter, {rust_string_literal(variant.display_template)}{args}),"


def _match_block(arms: List[str], depth: int) -> List[str]:
	pad = _INDENT * depth
	if not arms:
		return [f"{pad}match *self {{}}"]
	lines = [f"{pad}match self {{"]
	lines.extend(f"{pad}{_INDENT}{arm}" for arm in arms)
	lines.append(f"{pad}}}")
	return lines


def error_impl(defn: TypeDefinition, paths: RustPaths) -> str:
	arms = [arm for arm in (cause_arm(v, paths) for v in defn.variants) if arm is not None]
	if defn.variants and len(arms) < len(defn.variants):
		arms.append(f"_ => {paths.option}::None,")
	lines = [
		f"impl {paths.error_trait} for {defn.name} {{",
		f"{_INDENT}fn source(&self) -> {paths.option}<&(dyn {paths.error_trait} + 'static)> {{",
		*_match_block(arms, 2),
		f"{_INDENT}}}",
		"}",
	]
	return "\n".join(lines)


def display_impl(defn: TypeDefinition, paths: RustPaths) -> Optional[str]:
	if defn.no_display:
		return None
	arms = [display_arm(v, paths) for v in defn.variants]
	lines = [
		f"impl {paths.fmt}::Display for {defn.name} {{",
		f"{_INDENT}fn fmt(&self, __formatter: &mut {paths.fmt}::Formatter<'_>) -> {paths.fmt}::Result {{",
		*_match_block(arms, 2),
		f"{_INDENT}}}",
		"}",
	]
	return "\n".join(lines)


def conversion_impl(defn: TypeDefinition, variant: Variant, paths: RustPaths) -> str:
	key = variant.cause.key
	from_ty = variant.conversion_type
	if variant.cause.kind is not CauseKind.CONVERSION_SOURCE or key is None or from_ty is None:
		raise ValueError(f"variant `{variant.name}` has no #[from] field")
	if variant.kind is VariantKind.TUPLE:
		body = f"Self::{variant.name}(value)"
	else:
		body = f"Self::{variant.name} {{ {key}: value }}"
	lines = [
		f"impl {paths.from_trait}<{from_ty}> for {defn.name} {{",
		f"{_INDENT}fn from(value: {from_ty}) -> Self {{",
		f"{_INDENT * 2}{body}",
		f"{_INDENT}}}",
		"}",
	]
	return "\n".join(lines)


def conversion_impls(defn: TypeDefinition, paths: RustPaths) -> List[str]:
	return [
		conversion_impl(defn, v, paths)
		for v in defn.variants
		if v.cause.kind is CauseKind.CONVERSION_SOURCE
	]


def generate_impls(defn: TypeDefinition, config: Optional[DeriveConfig] = None) -> str:
	"""Assemble all impls for `defn` and check the text re-lexes cleanly."""
	paths = paths_for(config or DeriveConfig())
	try:
		pieces = [error_impl(defn, paths)]
		display = display_impl(defn, paths)
		if display is not None:
			pieces.append(display)
		pieces.extend(conversion_impls(defn, paths))
		code = "\n\n".join(pieces) + "\n"
		tokenize(code, file="<generated>")
	except (ValueError, KeyError) as err:
		raise CodeAssemblyError(f"failed to assemble generated code: {err}", span=defn.span) from err
	return code


__all__ = [
	"RustPaths",
	"STD_PATHS",
	"CORE_PATHS",
	"paths_for",
	"rust_string_literal",
	"compile_error",
	"variant_pattern",
	"cause_arm",
	"display_arm",
	"error_impl",
	"display_impl",
	"conversion_impl",
	"conversion_impls",
	"generate_impls",
]
