"""
onlyerror.core: shared span/diagnostic types used across the derive pipeline.

Modules:
  - span: Span (file/line/column of a token or model node)
  - diagnostics: Diagnostic record reported by the driver
"""

__all__ = [
	"span",
	"diagnostics",
]
