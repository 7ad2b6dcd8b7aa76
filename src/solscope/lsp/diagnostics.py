"""
Diagnostic generation for editors.

This module converts lint violations and structural errors into
LSP-compatible diagnostic messages for display in editors.
"""

from __future__ import annotations

from typing import Optional

from lsprotocol import types

from solscope.analysis.linter import AstInput, Linter
from solscope.analysis.rules import LintConfiguration, LintLevel, LintViolation
from solscope.utils.errors import SolScopeError, SourceLocation


class DiagnosticProvider:
    """
    Generates LSP diagnostics for one Solidity document.

    The provider runs the linter over the document's source and AST and
    maps every violation to a diagnostic. A malformed AST or invalid
    directive becomes a single error diagnostic at the top of the file.
    """

    def __init__(
        self,
        source: str,
        ast: AstInput,
        uri: str,
        config: Optional[LintConfiguration] = None,
    ) -> None:
        """
        Initialize the diagnostic provider.

        Args:
            source: The Solidity source code to analyze
            ast: Parsed AST for ``source``
            uri: The document URI for location information
            config: Optional lint configuration
        """
        self.source = source
        self.ast = ast
        self.uri = uri
        self.config = config
        self._diagnostics: list[types.Diagnostic] = []

    def get_diagnostics(self) -> list[types.Diagnostic]:
        """
        Get all diagnostics for the document.

        Returns:
            List of LSP diagnostic objects
        """
        self._diagnostics = []

        try:
            violations = Linter(self.config).lint(self.source, self.ast, self.uri)
        except SolScopeError as e:
            self._add_solscope_error(e)
            return self._diagnostics

        for violation in violations:
            self._add_lint_violation(violation)

        return self._diagnostics

    def _add_solscope_error(self, error: SolScopeError) -> None:
        """
        Add a structural error as an LSP diagnostic.

        Args:
            error: The error that aborted analysis
        """
        line = 0
        character = 0

        if error.location:
            line = max(0, error.location.line - 1)  # Convert to 0-indexed
            character = max(0, error.location.column)

        diagnostic = types.Diagnostic(
            range=types.Range(
                start=types.Position(line=line, character=character),
                end=types.Position(line=line, character=character + 1),
            ),
            message=error.message,
            severity=types.DiagnosticSeverity.Error,
            source="solscope",
        )

        self._diagnostics.append(diagnostic)

    def _add_lint_violation(self, violation: LintViolation) -> None:
        """
        Add a lint violation as an LSP diagnostic.

        Args:
            violation: The lint violation
        """
        # Map lint level to LSP severity
        severity_map = {
            LintLevel.ALLOW: None,  # Skip allowed rules
            LintLevel.WARN: types.DiagnosticSeverity.Warning,
            LintLevel.DENY: types.DiagnosticSeverity.Error,
        }

        severity = severity_map.get(violation.level)
        if severity is None:
            return  # Skip allowed rules

        start = _to_position(violation.location)
        end_location = violation.end_location or violation.location
        end = _to_position(end_location)
        # LSP ranges are end-exclusive, violation end locations are the last character
        if end_location is not None:
            end = types.Position(line=end.line, character=end.character + 1)

        message = violation.message
        if violation.suggestion:
            message = f"{message}\n\nhint: {violation.suggestion}"

        diagnostic = types.Diagnostic(
            range=types.Range(start=start, end=end),
            message=message,
            severity=severity,
            source="solscope",
            code=violation.rule.code,
            related_information=self._get_related_information(violation) or None,
        )

        self._diagnostics.append(diagnostic)

    def _get_related_information(
        self, violation: LintViolation
    ) -> list[types.DiagnosticRelatedInformation]:
        """Point at the declaration the violating identifier refers to."""
        related: list[types.DiagnosticRelatedInformation] = []
        for location in violation.related_locations:
            position = _to_position(location)
            related.append(
                types.DiagnosticRelatedInformation(
                    location=types.Location(
                        uri=self.uri,
                        range=types.Range(
                            start=position,
                            end=types.Position(
                                line=position.line, character=position.character + 1
                            ),
                        ),
                    ),
                    message="declared here",
                )
            )
        return related


def _to_position(location: Optional[SourceLocation]) -> types.Position:
    if location is None:
        return types.Position(line=0, character=0)
    return types.Position(line=max(0, location.line - 1), character=max(0, location.column))


def get_diagnostics_for_document(
    source: str,
    ast: AstInput,
    uri: str,
    config: Optional[LintConfiguration] = None,
) -> list[types.Diagnostic]:
    """
    Convenience function to get diagnostics for a document.

    Args:
        source: The Solidity source code
        ast: Parsed AST for ``source``
        uri: The document URI
        config: Optional lint configuration

    Returns:
        List of LSP diagnostics
    """
    provider = DiagnosticProvider(source, ast, uri, config)
    return provider.get_diagnostics()
