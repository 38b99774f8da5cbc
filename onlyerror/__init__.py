# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
onlyerror: derive-style generator for Rust error enums.

Given the text of one `enum` whose variants carry `#[error("...")]` messages
(or doc comments) and whose fields may carry `#[from]` / `#[source]`, emit the
`std::error::Error`, `Display` and `From` impls for it.

Stages:
  parser  : tokens -> TypeDefinition (validation included)
  codegen : TypeDefinition -> impl text
  derive  : driver + CLI
"""

from .config import DeriveConfig
from .derive import Expansion, derive_error, expand_derive

__all__ = ["DeriveConfig", "Expansion", "derive_error", "expand_derive"]
