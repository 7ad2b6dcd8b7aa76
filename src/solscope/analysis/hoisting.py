"""
Hoisting policy: which declaration kinds are visible before their position.

Named entities (contracts, libraries, functions, structs, enums) are usable
anywhere in their enclosing scope, so forward references to them are fine.
Variables and state variables are ordered: using one before its
declaration is what the use-before-define rule reports.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from solscope.analysis.scope import DeclarationKind
from solscope.utils.errors import UnmappedDeclarationKindError

HOISTING_POLICY: Mapping[DeclarationKind, bool] = MappingProxyType({
    DeclarationKind.VARIABLE: False,
    DeclarationKind.STATE_VARIABLE: False,
    DeclarationKind.FUNCTION: True,
    DeclarationKind.STRUCT: True,
    DeclarationKind.ENUM: True,
    DeclarationKind.CONTRACT: True,
    DeclarationKind.LIBRARY: True,
})


class HoistClassifier:
    """Pure lookup over a fixed kind -> hoisted table."""

    def __init__(self, policy: Mapping[DeclarationKind, bool] = HOISTING_POLICY) -> None:
        self._policy = policy

    def is_hoisted(self, kind: DeclarationKind) -> bool:
        """
        Raises:
            UnmappedDeclarationKindError: If the policy has no entry for ``kind``
        """
        try:
            return self._policy[kind]
        except KeyError:
            raise UnmappedDeclarationKindError(kind) from None

    def is_ordered(self, kind: DeclarationKind) -> bool:
        return not self.is_hoisted(kind)


def is_hoisted(kind: DeclarationKind) -> bool:
    """Classify ``kind`` under the default policy."""
    return HoistClassifier().is_hoisted(kind)


__all__ = ["HOISTING_POLICY", "HoistClassifier", "is_hoisted"]
