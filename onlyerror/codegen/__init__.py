"""
Back end of the derive: TypeDefinition -> Rust impl text.

  rust_impls : Error / Display / From impl emitters
"""

from __future__ import annotations

from .rust_impls import compile_error, generate_impls

__all__ = ["compile_error", "generate_impls"]
