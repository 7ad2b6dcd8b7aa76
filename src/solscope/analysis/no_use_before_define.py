"""
Rule: no identifier may be used before its declaration is visible.

Handlers keep the scope stack in step with the walk, register declarations
as their nodes are entered and queue every identifier usage. Queued usages
are resolved when the program node exits, once every scope is complete.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from solscope.analysis.ast_nodes import ASTNode, NodeKind
from solscope.analysis.ast_utils import is_name_token
from solscope.analysis.context import AnalysisContext
from solscope.analysis.events import EventDispatcher
from solscope.analysis.resolver import Resolution, ResolutionOutcome
from solscope.analysis.rules import USE_BEFORE_DEFINE, USE_IN_OWN_INITIALIZER
from solscope.analysis.scope import DeclarationKind, FrameKind

logger = logging.getLogger("solscope.rules.no_use_before_define")

# Scope-introducing nodes that also declare their own name in the enclosing frame
_NAMED_SCOPES: dict[NodeKind, tuple[FrameKind, DeclarationKind]] = {
    NodeKind.CONTRACT: (FrameKind.CONTRACT, DeclarationKind.CONTRACT),
    NodeKind.INTERFACE: (FrameKind.CONTRACT, DeclarationKind.CONTRACT),
    NodeKind.LIBRARY: (FrameKind.LIBRARY, DeclarationKind.LIBRARY),
    NodeKind.FUNCTION: (FrameKind.FUNCTION, DeclarationKind.FUNCTION),
}

# Declarations that do not open a scope
_PLAIN_DECLARATIONS: dict[NodeKind, DeclarationKind] = {
    NodeKind.STATE_VARIABLE: DeclarationKind.STATE_VARIABLE,
    NodeKind.STRUCT: DeclarationKind.STRUCT,
    NodeKind.ENUM: DeclarationKind.ENUM,
}


def _declared_name(value: Any) -> Optional[str]:
    """A declaration name given either as a string or as an Identifier node."""
    if isinstance(value, ASTNode):
        value = value.get("name")
    if isinstance(value, str) and value:
        return value
    return None


def _parameter_nodes(value: Any) -> list[ASTNode]:
    """Parameters from a list of nodes or from a wrapper node with ``params``."""
    if isinstance(value, ASTNode):
        value = value.get("params")
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, ASTNode)]


class NoUseBeforeDefine:
    """
    Reports references to ordered declarations that precede them.

    Example:
        contract C {
            uint x = y;   // 'y' is used before its definition
            uint y = 1;
        }
    """

    rules = (USE_BEFORE_DEFINE, USE_IN_OWN_INITIALIZER)

    def __init__(self, context: AnalysisContext) -> None:
        self.context = context

    def register(self, dispatcher: EventDispatcher) -> None:
        """Subscribe every handler this rule needs."""
        dispatcher.subscribe(NodeKind.PROGRAM, self._enter_program, self._exit_program)
        for kind in _NAMED_SCOPES:
            dispatcher.subscribe(kind, self._enter_named_scope, self._exit_scope)
        dispatcher.subscribe(NodeKind.MODIFIER, self._enter_modifier, self._exit_scope)
        dispatcher.subscribe(NodeKind.BLOCK, self._enter_block, self._exit_scope)
        for kind in _PLAIN_DECLARATIONS:
            dispatcher.subscribe(kind, on_enter=self._declare_plain)
        dispatcher.subscribe(NodeKind.VARIABLE_DECLARATOR, on_enter=self._declare_variable)
        dispatcher.subscribe(
            NodeKind.DECLARATIVE_EXPRESSION, on_enter=self._declare_declarative_expression
        )
        dispatcher.subscribe(NodeKind.IDENTIFIER, on_enter=self._use_identifier)

    # =========================================================================
    # Scopes
    # =========================================================================

    def _enter_program(self, node: ASTNode) -> None:
        self.context.scopes.enter_scope(FrameKind.MODULE, node)

    def _exit_program(self, node: ASTNode) -> None:
        resolutions = self.context.resolve_pending()
        for resolution in resolutions:
            self._report(resolution)
        logger.debug(
            "resolved %d references, %d violations",
            len(resolutions),
            sum(1 for resolution in resolutions if resolution.is_violation),
        )
        self.context.scopes.exit_scope()

    def _enter_named_scope(self, node: ASTNode) -> None:
        frame_kind, declaration_kind = _NAMED_SCOPES[node.kind]
        name = _declared_name(node.get("name"))
        if name is not None:
            self.context.registry.declare(name, declaration_kind, node.start, node.end, node)
        self.context.scopes.enter_scope(frame_kind, node)
        if node.kind is NodeKind.FUNCTION:
            self._declare_parameters(node.get("params"))
            self._declare_parameters(node.get("returnParams"))

    def _enter_modifier(self, node: ASTNode) -> None:
        self.context.scopes.enter_scope(FrameKind.FUNCTION, node)
        self._declare_parameters(node.get("params"))

    def _enter_block(self, node: ASTNode) -> None:
        self.context.scopes.enter_scope(FrameKind.BLOCK, node)

    def _exit_scope(self, node: ASTNode) -> None:
        self.context.scopes.exit_scope()

    # =========================================================================
    # Declarations
    # =========================================================================

    def _declare_parameters(self, params: Any) -> None:
        for param in _parameter_nodes(params):
            name = _declared_name(param.get("id"))
            if name is not None:
                self.context.registry.declare(
                    name, DeclarationKind.VARIABLE, param.start, param.end, param
                )

    def _declare_plain(self, node: ASTNode) -> None:
        name = _declared_name(node.get("name"))
        if name is None:
            return
        kind = _PLAIN_DECLARATIONS[node.kind]
        self.context.registry.declare(name, kind, node.start, node.end, node)

    def _declare_variable(self, node: ASTNode) -> None:
        name = _declared_name(node.get("id"))
        if name is not None:
            self.context.registry.declare(
                name, DeclarationKind.VARIABLE, node.start, node.end, node
            )

    def _declare_declarative_expression(self, node: ASTNode) -> None:
        parent = node.parent
        # Struct members are fields, not bindings in scope
        if parent is not None and parent.kind is NodeKind.STRUCT:
            return
        name = _declared_name(node.get("name"))
        if name is None:
            return
        end = node.end
        # `uint x = init;` parses as an assignment whose left side declares x
        if (
            parent is not None
            and parent.kind is NodeKind.ASSIGNMENT_EXPRESSION
            and parent.get("left") is node
        ):
            end = max(end, parent.end)
        self.context.registry.declare(name, DeclarationKind.VARIABLE, node.start, end, node)

    # =========================================================================
    # Usages
    # =========================================================================

    def _use_identifier(self, node: ASTNode) -> None:
        if is_name_token(node):
            return
        self.context.queue_reference(node)

    def _report(self, resolution: Resolution) -> None:
        declaration = resolution.declaration
        if declaration is None or not resolution.is_violation:
            return

        reference = resolution.reference
        rule = (
            USE_BEFORE_DEFINE
            if resolution.outcome is ResolutionOutcome.USED_BEFORE_DEFINITION
            else USE_IN_OWN_INITIALIZER
        )
        related = [self.context.positions.location(declaration.start)]
        self.context.report(
            reference.node,
            rule,
            reference.name,
            reference.start,
            declaration.start,
            related=related,
        )


__all__ = ["NoUseBeforeDefine"]
