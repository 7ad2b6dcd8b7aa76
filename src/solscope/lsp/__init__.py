"""
Editor integration for solscope.

Converts lint results into Language Server Protocol diagnostics so that an
editor extension or language server can publish them unchanged.
"""

from solscope.lsp.diagnostics import DiagnosticProvider, get_diagnostics_for_document

__all__ = [
    "DiagnosticProvider",
    "get_diagnostics_for_document",
]
