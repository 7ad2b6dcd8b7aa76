"""
Helpers for exploring the node tree upwards.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from solscope.analysis.ast_nodes import ASTNode, throw_if_invalid_node
from solscope.utils.errors import InvalidCriteriaError


def get_parent(node: ASTNode) -> Optional[ASTNode]:
    """Return the parent of ``node`` (None for the root)."""
    throw_if_invalid_node(node, "get_parent")
    return node.parent


def find_parent(node: ASTNode, criteria: Mapping[str, Any]) -> Optional[ASTNode]:
    """
    Find the nearest ancestor of ``node`` matching ``criteria``.

    Only the ``type`` key is supported, e.g. ``{"type": "FunctionDeclaration"}``.

    Returns:
        The matching ancestor, or None once the root has been examined

    Raises:
        MalformedNodeError: If ``node`` or any ancestor is not a valid node
        InvalidCriteriaError: If ``criteria`` is not a mapping with a string type
    """
    throw_if_invalid_node(node, "find_parent")

    if not isinstance(criteria, Mapping):
        raise InvalidCriteriaError(f"{criteria!r} is not a mapping")

    wanted = criteria.get("type")
    if not isinstance(wanted, str):
        raise InvalidCriteriaError(
            'Only AST node "type" is supported for search criteria.'
        )

    current = node.parent
    # The root's parent is None, which ends the walk
    while current is not None:
        throw_if_invalid_node(current, "find_parent")
        if current.type == wanted:
            return current
        current = current.parent

    return None


def find_parent_by_type(node: ASTNode, node_type: str) -> Optional[ASTNode]:
    """Shorthand for ``find_parent(node, {"type": node_type})``."""
    return find_parent(node, {"type": node_type})


def is_name_token(node: ASTNode) -> bool:
    """
    True when an Identifier names the declaration it belongs to.

    Covers ``VariableDeclarator.id`` and the property side of a
    non-computed member access (``a.b``), neither of which refers to a
    binding in scope.
    """
    throw_if_invalid_node(node, "is_name_token")
    parent = node.parent
    if parent is None:
        return False
    if parent.type == "VariableDeclarator":
        return parent.get("id") is node
    if parent.type == "MemberExpression":
        return parent.get("property") is node and not parent.get("computed", False)
    return False


__all__ = ["get_parent", "find_parent", "find_parent_by_type", "is_name_token"]
