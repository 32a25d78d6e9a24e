"""
maplint.core: shared spans, diagnostics, source text and fix application.

Modules:
  - span: Span, expansion contexts
  - diagnostics: Diagnostic, Suggestion, Applicability
  - source_map: snippet extraction with applicability
  - fixes: apply suggestion edits to text
  - types_core: TypeTable, Copy and Option queries
"""

__all__ = [
	"span",
	"diagnostics",
	"source_map",
	"fixes",
	"types_core",
]
