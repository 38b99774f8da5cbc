# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from onlyerror.config import DeriveConfig
from onlyerror.errors import (
	DuplicateAttribute,
	InvalidDisplayTemplate,
	MisplacedAttribute,
	MissingDisplayMessage,
	TrailingTokens,
	UnexpectedToken,
	UnknownDisplayField,
)
from onlyerror.parser import CauseKind, VariantKind, parse_error_enum

_BASIC = """
/// All of my errors.
#[derive(Debug, Error)]
pub(crate) enum Error {
    /// I/O error with context.
    #[error("I/O error: {ctx}.")]
    IoContext {
        /// The error source.
        #[source]
        source: std::io::Error,

        /// Additional context.
        ctx: String,
    },

    /// Parse error.
    Parse(#[from] std::num::ParseFloatError),

    /// Plain
    Unit,
}
"""


def test_basic_enum_model() -> None:
	defn = parse_error_enum(_BASIC, file="basic.rs")
	assert defn.name == "Error"
	assert not defn.no_display
	assert (defn.span.line, defn.span.column) == (4, 12)
	assert [v.name for v in defn.variants] == ["IoContext", "Parse", "Unit"]

	io = defn.variant("IoContext")
	assert io.kind is VariantKind.STRUCT
	assert io.fields == {"source": "std::io::Error", "ctx": "String"}
	assert io.display_template == "I/O error: {ctx}."
	assert io.display_referenced_fields == {"ctx"}
	assert io.cause.kind is CauseKind.SOURCE_ONLY and io.cause.key == "source"

	parse = defn.variant("Parse")
	assert parse.kind is VariantKind.TUPLE
	assert parse.fields == {"0": "std::num::ParseFloatError"}
	assert parse.display_template == "Parse error."
	assert parse.cause.kind is CauseKind.CONVERSION_SOURCE
	assert parse.conversion_type == "std::num::ParseFloatError"

	unit = defn.variant("Unit")
	assert unit.kind is VariantKind.UNIT
	assert unit.fields == {}
	assert not unit.cause.is_present


def test_empty_enum() -> None:
	defn = parse_error_enum("enum Never {}")
	assert defn.variants == ()


def test_tuple_positional_placeholders_are_rewritten() -> None:
	defn = parse_error_enum('enum E { #[error("{0} then {1:?}")] Pair(u8, Vec<u8>) }')
	pair = defn.variant("Pair")
	assert pair.display_template == "{field_0} then {field_1:?}"
	assert pair.display_referenced_fields == {"field_0", "field_1"}
	assert pair.display_fields == ("field_0", "field_1")


def test_rewrite_leaves_escaped_braces_alone() -> None:
	defn = parse_error_enum('enum E { #[error("{{0}} is {0}, again {0:>4}")] One(u8) }')
	one = defn.variant("One")
	assert one.display_template == "{{0}} is {field_0}, again {field_0:>4}"
	assert one.display_fields == ("field_0",)


def test_struct_templates_are_not_rewritten() -> None:
	defn = parse_error_enum('enum E { #[error("{key} and {value:?}")] Kv { key: String, value: Vec<usize> } }')
	kv = defn.variant("Kv")
	assert kv.display_template == "{key} and {value:?}"
	assert kv.display_fields == ("key", "value")


def test_explicit_message_overrides_doc_comment() -> None:
	defn = parse_error_enum('enum E {\n    /// From docs\n    #[error("From attribute")]\n    A,\n}')
	assert defn.variant("A").display_template == "From attribute"


def test_message_alias_attribute() -> None:
	defn = parse_error_enum('enum E { #[message("aliased")] A }')
	assert defn.variant("A").display_template == "aliased"


def test_doc_lines_are_joined() -> None:
	defn = parse_error_enum("enum E {\n    /// First line\n    ///\n    ///   second line  \n    #[doc = \" third\"]\n    A,\n}")
	assert defn.variant("A").display_template == "First line second line third"


def test_missing_message_names_first_variant_and_notes_the_rest() -> None:
	src = "enum Error {\n    /// ok\n    First,\n    Second,\n    Third(u8),\n}"
	with pytest.raises(MissingDisplayMessage) as excinfo:
		parse_error_enum(src)
	err = excinfo.value
	assert err.variant == "Second"
	assert (err.span.line, err.span.column) == (4, 5)
	assert err.notes == ["variant `Third` has no display message either"]


def test_no_display_allows_missing_messages() -> None:
	src = "#[derive(Debug, Error)]\n#[no_display]\nenum Error {\n    First,\n    Second(usize),\n    Third { key: String },\n}"
	defn = parse_error_enum(src)
	assert defn.no_display
	assert [v.display_template for v in defn.variants] == ["", "", ""]


def test_no_display_ignores_braces_in_doc_comments() -> None:
	defn = parse_error_enum("#[no_display]\nenum E {\n    /// Returns `{` unbalanced\n    A,\n}")
	assert defn.variant("A").display_fields == ()


def test_no_display_still_rewrites_explicit_messages() -> None:
	defn = parse_error_enum('#[no_display] enum E { #[error("Second with {0}")] Second(usize) }')
	assert defn.variant("Second").display_template == "Second with {field_0}"


def test_no_display_twice_is_rejected() -> None:
	with pytest.raises(DuplicateAttribute):
		parse_error_enum("#[no_display]\n#[no_display]\nenum E { A }")


def test_no_display_on_variant_is_misplaced() -> None:
	with pytest.raises(MisplacedAttribute, match="only allowed on the enum"):
		parse_error_enum("enum E { #[no_display] A }")


def test_two_messages_on_one_variant() -> None:
	with pytest.raises(DuplicateAttribute):
		parse_error_enum('enum E { #[error("a")] #[message("b")] A }')


@pytest.mark.parametrize(
	"attr",
	['#[error]', '#[error = "x"]', '#[error(42)]', '#[error("x", y)]'],
)
def test_malformed_message_attribute(attr: str) -> None:
	with pytest.raises(UnexpectedToken):
		parse_error_enum(f"enum E {{ {attr} A }}")


def test_unknown_struct_field_in_template() -> None:
	with pytest.raises(UnknownDisplayField, match="unknown field `nope`"):
		parse_error_enum('enum E { #[error("{nope}")] A { a: u8 } }')


def test_out_of_range_positional_placeholder() -> None:
	with pytest.raises(UnknownDisplayField, match="unknown field `3`"):
		parse_error_enum('enum E { #[error("{3}")] A(u8) }')


def test_unit_variant_cannot_reference_fields() -> None:
	with pytest.raises(UnknownDisplayField):
		parse_error_enum("enum E {\n    /// Bad {thing}\n    A,\n}")


def test_implicit_positional_placeholder_is_rejected() -> None:
	with pytest.raises(UnknownDisplayField, match="implicit positional placeholder"):
		parse_error_enum('enum E { #[error("value {}")] A(u8) }')


def test_tuple_alias_is_accepted_directly() -> None:
	defn = parse_error_enum('enum E { #[error("got {field_1}")] A(u8, u16) }')
	assert defn.variant("A").display_fields == ("field_1",)


def test_unbalanced_template_braces() -> None:
	with pytest.raises(InvalidDisplayTemplate):
		parse_error_enum('enum E { #[error("oops {")] A }')
	with pytest.raises(InvalidDisplayTemplate):
		parse_error_enum('enum E { #[error("oops }")] A }')


def test_trailing_tokens_after_enum_body() -> None:
	with pytest.raises(TrailingTokens) as excinfo:
		parse_error_enum("enum E { /// a\n A }\nstruct")
	assert excinfo.value.span.line == 3


def test_generics_are_not_supported() -> None:
	with pytest.raises(UnexpectedToken, match="found `<`"):
		parse_error_enum("enum E<T> { /// a\n A(T) }")


def test_explicit_discriminant_is_rejected() -> None:
	with pytest.raises(UnexpectedToken):
		parse_error_enum("enum E { /// a\n A = 1, }")


def test_missing_enum_keyword() -> None:
	with pytest.raises(UnexpectedToken, match="expected `enum`"):
		parse_error_enum("pub struct E;")


def test_custom_message_attribute_config() -> None:
	config = DeriveConfig(message_attributes=("display",))
	defn = parse_error_enum('enum E { #[display("shown")] A }', config=config)
	assert defn.variant("A").display_template == "shown"
	with pytest.raises(MissingDisplayMessage):
		parse_error_enum('enum E { #[error("ignored")] A }', config=config)


def test_surrogate_escape_in_message_is_rejected() -> None:
	with pytest.raises(UnexpectedToken, match="invalid unicode escape"):
		parse_error_enum('enum E { #[error("x \\u{D800}")] A }')


def test_variant_fields_are_read_only() -> None:
	defn = parse_error_enum('enum E { #[error("{0}")] A(u8) }')
	with pytest.raises(TypeError):
		defn.variant("A").fields["1"] = "u16"  # type: ignore[index]
