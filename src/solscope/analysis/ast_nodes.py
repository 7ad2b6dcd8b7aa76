"""
Abstract Syntax Tree (AST) node model for solscope.

solscope does not parse Solidity itself. It consumes the JSON tree emitted by
a solparse-style parser, where every node is an object carrying a ``type``
discriminator and ``start``/``end`` character offsets into the source text.
This module turns such JSON into ``ASTNode`` objects with ``parent``
back-references and rejects anything that does not honour that shape.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from solscope.utils.errors import AstLoadError, MalformedNodeError


class NodeKind(Enum):
    """
    Node types the analysis subscribes to.

    The values are the ``type`` strings used by the parser. Nodes of any
    other type are still walked, they just have no kind.
    """

    PROGRAM = "Program"
    CONTRACT = "ContractStatement"
    INTERFACE = "InterfaceStatement"
    LIBRARY = "LibraryStatement"
    FUNCTION = "FunctionDeclaration"
    MODIFIER = "ModifierDeclaration"
    BLOCK = "BlockStatement"
    STATE_VARIABLE = "StateVariableDeclaration"
    VARIABLE_DECLARATOR = "VariableDeclarator"
    DECLARATIVE_EXPRESSION = "DeclarativeExpression"
    STRUCT = "StructDeclaration"
    ENUM = "EnumDeclaration"
    INFORMAL_PARAMETER = "InformalParameter"
    ASSIGNMENT_EXPRESSION = "AssignmentExpression"
    MEMBER_EXPRESSION = "MemberExpression"
    IDENTIFIER = "Identifier"


_KINDS_BY_TYPE: dict[str, NodeKind] = {kind.value: kind for kind in NodeKind}

# Keys that belong to the node contract rather than to the node's fields
_RESERVED_KEYS = frozenset({"type", "start", "end", "parent"})


@dataclass(eq=False)
class ASTNode:
    """
    A single node of the parsed tree.

    Attributes:
        type: Parser type discriminator (e.g. "FunctionDeclaration")
        start: Offset of the first character of the node
        end: Offset one past the last character of the node
        parent: Enclosing node, None only for the root
        fields: Remaining attributes; nested nodes are ASTNode instances
    """

    type: str
    start: int
    end: int
    parent: Optional["ASTNode"] = None
    fields: dict[str, Any] = field(default_factory=dict)
    _children: tuple["ASTNode", ...] = field(default=(), repr=False)

    @property
    def kind(self) -> Optional[NodeKind]:
        """The NodeKind of this node, or None for types the analysis ignores."""
        return _KINDS_BY_TYPE.get(self.type)

    def get(self, name: str, default: Any = None) -> Any:
        """Return a field value by name."""
        return self.fields.get(name, default)

    def children(self) -> tuple["ASTNode", ...]:
        """Direct child nodes in source order."""
        return self._children

    def iter_descendants(self) -> Iterator["ASTNode"]:
        """Yield every descendant in pre-order."""
        stack = list(reversed(self._children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node._children))

    def __repr__(self) -> str:
        name = self.fields.get("name")
        label = f" {name!r}" if isinstance(name, str) else ""
        return f"<{self.type}{label} [{self.start}:{self.end}]>"


def is_ast_node(obj: Any) -> bool:
    """
    Check if the given object honours the AST node contract.

    A valid node has a non-empty string ``type``, integer offsets with
    ``0 <= start <= end`` and a parent that is either None or another node.
    """
    if not isinstance(obj, ASTNode):
        return False
    if not isinstance(obj.type, str) or not obj.type:
        return False
    if not _is_offset(obj.start) or not _is_offset(obj.end):
        return False
    if obj.start > obj.end:
        return False
    return obj.parent is None or isinstance(obj.parent, ASTNode)


def throw_if_invalid_node(node: Any, operation: str) -> None:
    """Raise MalformedNodeError naming ``operation`` if ``node`` is not a valid node."""
    if not is_ast_node(node):
        raise MalformedNodeError(operation, node)


def _is_offset(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _looks_like_node(value: Any) -> bool:
    return isinstance(value, Mapping) and "type" in value


def build_tree(raw: Mapping[str, Any]) -> ASTNode:
    """
    Convert a parser JSON object into an ASTNode tree.

    Every mapping carrying a ``type`` key is treated as a node and must
    satisfy the node contract; parents are attached on the way down and
    children are ordered by their start offset.

    Raises:
        MalformedNodeError: If the root or any nested node is malformed
    """
    root = _convert(raw, None)
    # Walk explicitly so very deep trees do not hit the recursion limit
    pending: list[tuple[ASTNode, Mapping[str, Any]]] = [(root, raw)]
    while pending:
        node, source = pending.pop()
        children: list[ASTNode] = []
        for key, value in source.items():
            if key in _RESERVED_KEYS:
                continue
            if _looks_like_node(value):
                child = _convert(value, node)
                node.fields[key] = child
                children.append(child)
                pending.append((child, value))
            elif isinstance(value, list):
                items: list[Any] = []
                for item in value:
                    if _looks_like_node(item):
                        child = _convert(item, node)
                        children.append(child)
                        pending.append((child, item))
                        items.append(child)
                    else:
                        items.append(item)
                node.fields[key] = items
            else:
                node.fields[key] = value
        children.sort(key=lambda child: (child.start, child.end))
        node._children = tuple(children)
    return root


def _convert(raw: Any, parent: Optional[ASTNode]) -> ASTNode:
    if not isinstance(raw, Mapping):
        raise MalformedNodeError("build_tree", raw)
    node_type = raw.get("type")
    start = raw.get("start")
    end = raw.get("end")
    if not isinstance(node_type, str) or not node_type:
        raise MalformedNodeError("build_tree", raw)
    if not _is_offset(start) or not _is_offset(end) or start > end:
        raise MalformedNodeError("build_tree", raw)
    return ASTNode(type=node_type, start=start, end=end, parent=parent)


def parse_ast_json(text: str) -> ASTNode:
    """Decode a JSON document and build the node tree from it."""
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise AstLoadError(f"AST is not valid JSON: {e.msg} (line {e.lineno})") from e
    return build_tree(raw)


def load_ast(path: Union[str, Path]) -> ASTNode:
    """
    Load an AST from a JSON file.

    Raises:
        AstLoadError: If the file cannot be read or is not JSON
        MalformedNodeError: If the decoded tree violates the node contract
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise AstLoadError(f"cannot read AST file {path}: {e.strerror}") from e
    return parse_ast_json(text)


__all__ = [
    "NodeKind",
    "ASTNode",
    "is_ast_node",
    "throw_if_invalid_node",
    "build_tree",
    "parse_ast_json",
    "load_ast",
]
