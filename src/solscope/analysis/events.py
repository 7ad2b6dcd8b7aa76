"""
Traversal engine: walks a node tree and dispatches enter/exit events.

Rules subscribe per NodeKind with separate enter and exit callbacks. The
walk is a single deterministic pre-order (enter) / post-order (exit)
visitation in source order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from solscope.analysis.ast_nodes import ASTNode, NodeKind, throw_if_invalid_node

logger = logging.getLogger("solscope.events")

NodeCallback = Callable[[ASTNode], None]


class Phase(Enum):
    """Which side of a node the walk is on."""

    ENTER = "enter"
    EXIT = "exit"


@dataclass(frozen=True, slots=True)
class Subscription:
    """Enter and exit callbacks registered for one node kind."""

    kind: NodeKind
    on_enter: Optional[NodeCallback] = None
    on_exit: Optional[NodeCallback] = None


class EventDispatcher:
    """
    Lookup table from NodeKind to subscriptions, plus the walk that drives it.

    Subscriptions fire in registration order on enter and in reverse
    registration order on exit, so paired enter/exit handlers nest.

    Example:
        dispatcher = EventDispatcher()
        dispatcher.subscribe(NodeKind.BLOCK, on_enter=push, on_exit=pop)
        dispatcher.walk(root)
    """

    def __init__(self) -> None:
        self._table: dict[NodeKind, list[Subscription]] = {}

    def subscribe(
        self,
        kind: NodeKind,
        on_enter: Optional[NodeCallback] = None,
        on_exit: Optional[NodeCallback] = None,
    ) -> Subscription:
        """Register callbacks for a node kind."""
        if not isinstance(kind, NodeKind):
            raise TypeError(f"subscribe() expects a NodeKind, got {kind!r}")
        subscription = Subscription(kind=kind, on_enter=on_enter, on_exit=on_exit)
        self._table.setdefault(kind, []).append(subscription)
        return subscription

    def subscribed_kinds(self) -> frozenset[NodeKind]:
        return frozenset(self._table)

    def dispatch(self, node: ASTNode, phase: Phase) -> None:
        """Fire the callbacks registered for ``node``'s kind and ``phase``."""
        kind = node.kind
        if kind is None:
            return
        subscriptions = self._table.get(kind)
        if not subscriptions:
            return
        if phase is Phase.ENTER:
            for subscription in subscriptions:
                if subscription.on_enter is not None:
                    subscription.on_enter(node)
        else:
            for subscription in reversed(subscriptions):
                if subscription.on_exit is not None:
                    subscription.on_exit(node)

    def walk(self, root: ASTNode) -> None:
        """
        Visit ``root`` and all its descendants.

        Raises:
            MalformedNodeError: If any visited node violates the node contract
        """
        throw_if_invalid_node(root, "walk")
        logger.debug("walking tree rooted at %r", root)
        stack: list[tuple[ASTNode, Phase]] = [(root, Phase.ENTER)]
        while stack:
            node, phase = stack.pop()
            if phase is Phase.EXIT:
                self.dispatch(node, Phase.EXIT)
                continue
            throw_if_invalid_node(node, "walk")
            self.dispatch(node, Phase.ENTER)
            stack.append((node, Phase.EXIT))
            for child in reversed(node.children()):
                stack.append((child, Phase.ENTER))


__all__ = ["Phase", "Subscription", "EventDispatcher", "NodeCallback"]
