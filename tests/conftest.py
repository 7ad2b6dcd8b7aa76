"""
Pytest configuration and shared fixtures for solscope tests.

solscope consumes parser output, so tests build solparse-shaped AST
dictionaries by hand. ``AstFactory`` locates snippets in the source text to
compute offsets, which keeps every node honest about where it sits.
"""

import re
from typing import Any, Optional

import pytest

from solscope.analysis.context import AnalysisContext
from solscope.analysis.linter import Linter
from solscope.analysis.rules import LintConfiguration, LintViolation


class AstFactory:
    """
    Builds AST node dictionaries whose offsets point into ``source``.

    Snippets are located by occurrence: ``nth=2`` is the second match.
    Identifier-like snippets match whole words only.
    """

    def __init__(self, source: str) -> None:
        self.source = source

    def span(self, text: str, nth: int = 1) -> tuple[int, int]:
        """(start, end) of the nth occurrence of ``text``."""
        if re.fullmatch(r"\w+", text):
            pattern = re.compile(rf"\b{re.escape(text)}\b")
        else:
            pattern = re.compile(re.escape(text))
        matches = list(pattern.finditer(self.source))
        if len(matches) < nth:
            raise AssertionError(f"{text!r} occurs {len(matches)} time(s), wanted #{nth}")
        match = matches[nth - 1]
        return match.start(), match.end()

    def offset(self, text: str, nth: int = 1) -> int:
        return self.span(text, nth)[0]

    def word_at(self, name: str, start: int) -> int:
        """Offset of the first whole-word ``name`` at or after ``start``."""
        match = re.compile(rf"\b{re.escape(name)}\b").search(self.source, start)
        if match is None:
            raise AssertionError(f"{name!r} not found after offset {start}")
        return match.start()

    def type_name(self, text: str, nth: int = 1) -> dict:
        """The leading type keyword of a declaration snippet, as a Type node."""
        start, _ = self.span(text, nth)
        keyword = re.match(r"\w+", self.source[start:])
        end = start + (keyword.end() if keyword else 0)
        return {"type": "Type", "start": start, "end": end, "literal": self.source[start:end]}

    def node(self, node_type: str, text: str, nth: int = 1, **fields: Any) -> dict:
        """A node covering the nth occurrence of ``text``."""
        start, end = self.span(text, nth)
        return {"type": node_type, "start": start, "end": end, **fields}

    def program(self, *body: dict) -> dict:
        return {"type": "Program", "start": 0, "end": len(self.source), "body": list(body)}

    def ident(self, name: str, nth: int = 1) -> dict:
        return self.node("Identifier", name, nth, name=name)

    def literal(self, text: str, nth: int = 1) -> dict:
        return self.node("Literal", text, nth, value=text)

    def block(self, text: str, *body: dict, nth: int = 1) -> dict:
        return self.node("BlockStatement", text, nth, body=list(body))

    def contract(self, name: str, text: str, *body: dict, nth: int = 1) -> dict:
        return self.node("ContractStatement", text, nth, name=name, body=list(body))

    def state_var(self, name: str, text: str, value: Optional[dict] = None, nth: int = 1) -> dict:
        return self.node(
            "StateVariableDeclaration",
            text,
            nth,
            name=name,
            literal=self.type_name(text, nth),
            value=value,
        )

    def function(
        self,
        name: Optional[str],
        text: str,
        body: dict,
        params: Optional[list[dict]] = None,
        nth: int = 1,
    ) -> dict:
        return self.node(
            "FunctionDeclaration",
            text,
            nth,
            name=name,
            params=params,
            modifiers=None,
            returnParams=None,
            body=body,
        )

    def param(self, name: str, text: str, nth: int = 1) -> dict:
        return self.node("InformalParameter", text, nth, id=name, literal=None)

    def local(self, name: str, text: str, init: Optional[dict] = None, nth: int = 1) -> dict:
        """``uint name = init;`` as solparse shapes it: an assignment to a DeclarativeExpression."""
        start, end = self.span(text, nth)
        declarative = {
            "type": "DeclarativeExpression",
            "start": start,
            "end": self.word_at(name, start) + len(name),
            "name": name,
            "literal": None,
        }
        if init is None:
            return {"type": "ExpressionStatement", "start": start, "end": end,
                    "expression": declarative}
        assignment = {
            "type": "AssignmentExpression",
            "start": start,
            "end": init["end"],
            "operator": "=",
            "left": declarative,
            "right": init,
        }
        return {"type": "ExpressionStatement", "start": start, "end": end,
                "expression": assignment}

    def var(self, name: str, text: str, init: Optional[dict] = None, nth: int = 1) -> dict:
        """``var name = init;`` as a VariableDeclaration with one declarator."""
        start, end = self.span(text, nth)
        id_start = self.word_at(name, start)
        declarator = {
            "type": "VariableDeclarator",
            "start": id_start,
            "end": init["end"] if init else id_start + len(name),
            "id": {"type": "Identifier", "start": id_start, "end": id_start + len(name),
                   "name": name},
            "init": init,
        }
        return {"type": "VariableDeclaration", "start": start, "end": end,
                "declarations": [declarator]}

    def statement(self, expression: dict) -> dict:
        return {"type": "ExpressionStatement", "start": expression["start"],
                "end": expression["end"], "expression": expression}

    def assign(self, left: dict, right: dict) -> dict:
        return {"type": "AssignmentExpression", "start": left["start"], "end": right["end"],
                "operator": "=", "left": left, "right": right}

    def call(self, callee: dict, text: str, *arguments: dict, nth: int = 1) -> dict:
        return self.node("CallExpression", text, nth, callee=callee, arguments=list(arguments))


@pytest.fixture
def ast_factory():
    """Factory fixture for building AST dictionaries over a source string."""

    def _create(source: str) -> AstFactory:
        return AstFactory(source)

    return _create


@pytest.fixture
def lint():
    """Fixture to lint source against a hand-built AST."""

    def _lint(
        source: str, ast: dict, config: Optional[LintConfiguration] = None
    ) -> list[LintViolation]:
        return Linter(config).lint(source, ast, "test.sol")

    return _lint


@pytest.fixture
def analyze():
    """Fixture returning the finished analysis context for inspection."""

    def _analyze(
        source: str, ast: dict, config: Optional[LintConfiguration] = None
    ) -> AnalysisContext:
        return Linter(config).analyze(source, ast, "test.sol")

    return _analyze
