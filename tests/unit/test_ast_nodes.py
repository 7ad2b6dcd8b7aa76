"""
Unit tests for the AST node model and JSON loading.

Tests cover:
- Tree construction with parent links and ordered children
- The node contract (type string, ordered non-negative offsets)
- Loading ASTs from JSON text and files
"""

import json

import pytest

from solscope.analysis.ast_nodes import (
    ASTNode,
    NodeKind,
    build_tree,
    is_ast_node,
    load_ast,
    parse_ast_json,
    throw_if_invalid_node,
)
from solscope.utils.errors import AstLoadError, MalformedNodeError


RAW = {
    "type": "Program",
    "start": 0,
    "end": 30,
    "body": [
        {
            "type": "ContractStatement",
            "start": 0,
            "end": 30,
            "name": "C",
            "is": [],
            "body": [
                {"type": "Identifier", "start": 20, "end": 21, "name": "b"},
                {"type": "Identifier", "start": 13, "end": 14, "name": "a"},
            ],
        }
    ],
}


class TestBuildTree:
    """Tests for converting parser JSON into nodes."""

    def test_root(self):
        root = build_tree(RAW)
        assert root.type == "Program"
        assert root.kind is NodeKind.PROGRAM
        assert root.parent is None

    def test_parents_are_attached(self):
        root = build_tree(RAW)
        (contract,) = root.children()
        assert contract.parent is root
        for child in contract.children():
            assert child.parent is contract

    def test_children_sorted_by_start(self):
        contract = build_tree(RAW).children()[0]
        assert [child.get("name") for child in contract.children()] == ["a", "b"]

    def test_fields_keep_node_references(self):
        contract = build_tree(RAW).children()[0]
        assert contract.get("name") == "C"
        assert contract.get("is") == []
        assert all(isinstance(item, ASTNode) for item in contract.get("body"))
        # list order is preserved, only children() is sorted
        assert [item.get("name") for item in contract.get("body")] == ["b", "a"]

    def test_single_node_field_is_a_child(self):
        raw = {
            "type": "ReturnStatement",
            "start": 0,
            "end": 9,
            "argument": {"type": "Identifier", "start": 7, "end": 8, "name": "x"},
        }
        node = build_tree(raw)
        assert node.get("argument").parent is node
        assert node.children() == (node.get("argument"),)

    def test_unknown_type_has_no_kind(self):
        node = build_tree({"type": "PragmaStatement", "start": 0, "end": 5})
        assert node.kind is None

    def test_iter_descendants_in_preorder(self):
        root = build_tree(RAW)
        assert [node.type for node in root.iter_descendants()] == [
            "ContractStatement",
            "Identifier",
            "Identifier",
        ]

    def test_deep_tree_does_not_recurse(self):
        raw = {"type": "Identifier", "start": 0, "end": 1, "name": "x"}
        for _ in range(5000):
            raw = {"type": "UnaryExpression", "start": 0, "end": 1, "argument": raw}
        node = build_tree(raw)
        assert sum(1 for _ in node.iter_descendants()) == 5000


class TestNodeContract:
    """Tests for rejection of malformed nodes."""

    @pytest.mark.parametrize(
        "raw",
        [
            {"start": 0, "end": 1},
            {"type": "", "start": 0, "end": 1},
            {"type": 3, "start": 0, "end": 1},
            {"type": "Identifier", "start": -1, "end": 1},
            {"type": "Identifier", "start": 4, "end": 2},
            {"type": "Identifier", "start": "0", "end": 1},
            {"type": "Identifier", "start": True, "end": 1},
            {"type": "Identifier", "start": 0},
        ],
    )
    def test_malformed_root(self, raw):
        with pytest.raises(MalformedNodeError, match="build_tree"):
            build_tree(raw)

    def test_malformed_nested_node(self):
        raw = {
            "type": "Program",
            "start": 0,
            "end": 10,
            "body": [{"type": "Identifier", "start": 8, "end": 3}],
        }
        with pytest.raises(MalformedNodeError):
            build_tree(raw)

    def test_non_mapping_root(self):
        with pytest.raises(MalformedNodeError):
            build_tree(["Program"])

    def test_is_ast_node(self):
        assert is_ast_node(ASTNode("Identifier", 0, 1))
        assert not is_ast_node({"type": "Identifier", "start": 0, "end": 1})
        assert not is_ast_node(None)
        assert not is_ast_node(ASTNode("Identifier", 3, 1))

    def test_throw_if_invalid_node_names_operation(self):
        with pytest.raises(MalformedNodeError) as exc_info:
            throw_if_invalid_node(42, "get_line")
        assert str(exc_info.value) == "get_line(): 42 is not a valid AST node."
        assert exc_info.value.operation == "get_line"


class TestLoading:
    """Tests for reading ASTs from JSON."""

    def test_parse_ast_json(self):
        root = parse_ast_json(json.dumps(RAW))
        assert root.kind is NodeKind.PROGRAM

    def test_parse_invalid_json(self):
        with pytest.raises(AstLoadError, match="not valid JSON"):
            parse_ast_json("{not json")

    def test_load_ast_from_file(self, tmp_path):
        path = tmp_path / "C.sol.json"
        path.write_text(json.dumps(RAW), encoding="utf-8")
        root = load_ast(path)
        assert root.end == 30

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(AstLoadError, match="cannot read AST file"):
            load_ast(tmp_path / "missing.json")
