"""
Per-file analysis state.

Everything one file's analysis needs (position index, scope stack,
declaration registry, pending references, reported violations) lives on an
``AnalysisContext``. A new context is built for every file; nothing is kept
at module level.
"""

from __future__ import annotations

import logging
from typing import Optional

from solscope.analysis.ast_nodes import ASTNode, throw_if_invalid_node
from solscope.analysis.positions import SourcePositionIndex
from solscope.analysis.resolver import IdentifierReference, IdentifierResolver, Resolution
from solscope.analysis.rules import LintConfiguration, LintLevel, LintRule, LintViolation
from solscope.analysis.scope import DeclarationRegistry, ScopeStack
from solscope.utils.errors import SourceLocation

logger = logging.getLogger("solscope.context")


class AnalysisContext:
    """
    State threaded through every handler while one file is analyzed.

    Attributes:
        positions: Offset to line/column index over the file's text
        scopes: Open scope frames
        registry: Declarations registered so far
        resolver: Binds references to declarations
        config: Effective rule levels for this file
        violations: Violations reported so far
        resolutions: Every resolution performed, violating or not
    """

    def __init__(
        self,
        source: str,
        filename: Optional[str] = None,
        config: Optional[LintConfiguration] = None,
        resolver: Optional[IdentifierResolver] = None,
    ) -> None:
        self.positions = SourcePositionIndex(source, filename)
        self.scopes = ScopeStack()
        self.registry = DeclarationRegistry(self.scopes)
        self.resolver = resolver or IdentifierResolver()
        self.config = config or LintConfiguration()
        self.violations: list[LintViolation] = []
        self.resolutions: list[Resolution] = []
        self._pending: list[IdentifierReference] = []

    @property
    def source(self) -> str:
        return self.positions.text

    @property
    def filename(self) -> Optional[str]:
        return self.positions.filename

    # =========================================================================
    # References
    # =========================================================================

    def queue_reference(self, node: ASTNode) -> IdentifierReference:
        """Capture ``node`` against the scope chain that is open right now."""
        reference = IdentifierReference.capture(node, self.scopes)
        self._pending.append(reference)
        return reference

    @property
    def pending(self) -> tuple[IdentifierReference, ...]:
        return tuple(self._pending)

    def resolve_pending(self) -> list[Resolution]:
        """Resolve and clear every queued reference, in source order."""
        pending = sorted(self._pending, key=lambda ref: ref.start)
        self._pending.clear()
        results = [self.resolver.resolve(reference) for reference in pending]
        self.resolutions.extend(results)
        return results

    # =========================================================================
    # Reporting
    # =========================================================================

    def report(
        self,
        node: ASTNode,
        rule: LintRule,
        *format_args: object,
        related: Optional[list[SourceLocation]] = None,
    ) -> Optional[LintViolation]:
        """
        Record a violation at ``node`` if the rule is enabled.

        Returns:
            The recorded violation, or None when the rule is allowed
        """
        throw_if_invalid_node(node, "report")
        level = self.config.get_level(rule)
        if level == LintLevel.ALLOW:
            return None

        args = [str(arg) for arg in format_args]
        message = rule.message.format(*args) if args else rule.message
        suggestion = None
        if rule.suggestion:
            try:
                suggestion = rule.suggestion.format(*args)
            except (IndexError, KeyError):
                suggestion = rule.suggestion

        violation = LintViolation(
            rule=rule,
            location=self.positions.start_location(node),
            message=message,
            level=level,
            end_location=self.positions.end_location(node),
            suggestion=suggestion,
            related_locations=related or [],
        )
        self.violations.append(violation)
        logger.debug("report %s", violation)
        return violation


__all__ = ["AnalysisContext"]
