"""
Identifier resolution against the scope model.

A reference remembers the scope chain that was open when the identifier was
visited. Frames are held by reference, so when the reference is resolved
later the frames have received every declaration of their scope, including
those that appear textually after the identifier. That is what lets an
inner declaration shadow an outer one even when the reference precedes it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from solscope.analysis.ast_nodes import ASTNode, throw_if_invalid_node
from solscope.analysis.hoisting import HoistClassifier
from solscope.analysis.scope import Declaration, ScopeFrame, ScopeStack
from solscope.utils.errors import MalformedNodeError

logger = logging.getLogger("solscope.resolver")


class ResolutionOutcome(Enum):
    UNRESOLVED = "unresolved"
    RESOLVED = "resolved"
    USED_BEFORE_DEFINITION = "used-before-definition"
    USED_IN_OWN_INITIALIZER = "used-in-own-initializer"

    @property
    def is_violation(self) -> bool:
        return self in (
            ResolutionOutcome.USED_BEFORE_DEFINITION,
            ResolutionOutcome.USED_IN_OWN_INITIALIZER,
        )


@dataclass(frozen=True, slots=True)
class IdentifierReference:
    """
    An identifier usage waiting to be resolved.

    Attributes:
        node: The Identifier node
        name: Referenced name
        start: Offset of the identifier
        chain: Frames open at the visit, innermost first
    """

    node: ASTNode
    name: str
    start: int
    chain: tuple[ScopeFrame, ...]

    @classmethod
    def capture(cls, node: ASTNode, scopes: ScopeStack) -> "IdentifierReference":
        """
        Build a reference for ``node`` from the current state of ``scopes``.

        Raises:
            MalformedNodeError: If ``node`` is invalid or carries no name
        """
        throw_if_invalid_node(node, "IdentifierReference.capture")
        name = node.get("name")
        if not isinstance(name, str) or not name:
            raise MalformedNodeError("IdentifierReference.capture", node)
        return cls(node=node, name=name, start=node.start, chain=scopes.chain())


@dataclass(frozen=True, slots=True)
class Resolution:
    """Result of resolving one reference."""

    reference: IdentifierReference
    outcome: ResolutionOutcome
    declaration: Optional[Declaration] = None

    @property
    def is_violation(self) -> bool:
        return self.outcome.is_violation


class IdentifierResolver:
    """
    Binds references to declarations and decides whether the use is legal.

    Resolution rules:
    1. The innermost frame of the chain that declares the name wins.
    2. Among several declarations in that frame the earliest one is used.
    3. Hoisted kinds are always legal.
    4. Ordered kinds are illegal before their start and inside their own extent.
    """

    def __init__(self, classifier: Optional[HoistClassifier] = None) -> None:
        self.classifier = classifier or HoistClassifier()

    def find_binding(self, reference: IdentifierReference) -> Optional[Declaration]:
        """The declaration the reference binds to, or None."""
        for frame in reference.chain:
            candidates = frame.lookup(reference.name)
            if candidates:
                return min(candidates, key=lambda decl: decl.start)
        return None

    def resolve(self, reference: IdentifierReference) -> Resolution:
        declaration = self.find_binding(reference)

        if declaration is None:
            outcome = ResolutionOutcome.UNRESOLVED
        elif self.classifier.is_hoisted(declaration.kind):
            outcome = ResolutionOutcome.RESOLVED
        elif reference.start < declaration.start:
            outcome = ResolutionOutcome.USED_BEFORE_DEFINITION
        elif declaration.contains(reference.start):
            outcome = ResolutionOutcome.USED_IN_OWN_INITIALIZER
        else:
            outcome = ResolutionOutcome.RESOLVED

        logger.debug("resolve %r at %d -> %s", reference.name, reference.start, outcome.value)
        return Resolution(reference=reference, outcome=outcome, declaration=declaration)


__all__ = [
    "ResolutionOutcome",
    "IdentifierReference",
    "Resolution",
    "IdentifierResolver",
]
