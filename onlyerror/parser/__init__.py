"""
Front end of the derive: Rust tokens -> TypeDefinition.

  lexer    : lark-based tokenizer + token-tree folding
  cursor   : LL(1) TokenCursor (attributes, visibility, types)
  fields   : tuple/struct field lists and #[from]/#[source] resolution
  template : display template placeholder scanning/rewriting
  builder  : enum/variant assembly and display validation
  model    : TypeDefinition / Variant / CauseMarker
"""

from __future__ import annotations

from .builder import parse_error_enum
from .model import CauseKind, CauseMarker, TypeDefinition, Variant, VariantKind

__all__ = [
	"parse_error_enum",
	"CauseKind",
	"CauseMarker",
	"TypeDefinition",
	"Variant",
	"VariantKind",
]
