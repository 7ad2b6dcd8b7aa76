"""
solscope Linter - declaration-before-use analysis for Solidity ASTs.

The linter takes the source text of a file together with the JSON AST a
solparse-style parser produced for it, walks the tree once and returns the
violations found. Each call works on a fresh ``AnalysisContext``, so state
never leaks from one file into the next.

Example:
    linter = Linter()
    violations = linter.lint(source, ast)
    for v in violations:
        print(f"{v.location}: [{v.rule.code}] {v.message}")
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional, Union

from solscope.analysis.ast_nodes import ASTNode, NodeKind, build_tree, load_ast
from solscope.analysis.context import AnalysisContext
from solscope.analysis.events import EventDispatcher
from solscope.analysis.no_use_before_define import NoUseBeforeDefine
from solscope.analysis.rules import LintConfiguration, LintViolation
from solscope.utils.errors import AstLoadError, MalformedNodeError

logger = logging.getLogger("solscope.linter")

AstInput = Union[ASTNode, Mapping[str, Any]]


class Linter:
    """
    Runs the declaration-before-use rule over one file at a time.

    Source directives (``// solscope: allow(rule)``) are applied on top of
    the linter's configuration for the file that contains them only.
    """

    def __init__(self, config: Optional[LintConfiguration] = None) -> None:
        """
        Initialize the linter.

        Args:
            config: Optional lint configuration for customizing rule levels
        """
        self.config = config or LintConfiguration()

    def analyze(
        self,
        source: str,
        ast: AstInput,
        filename: Optional[str] = None,
    ) -> AnalysisContext:
        """
        Analyze one file and return the finished context.

        Args:
            source: Text the AST offsets refer to
            ast: Root ``Program`` node, or its raw JSON mapping
            filename: Name used in reported locations

        Raises:
            MalformedNodeError: If the tree violates the node contract
            ConfigurationError: If the source holds an invalid directive
        """
        root = ast if isinstance(ast, ASTNode) else build_tree(ast)
        if root.kind is not NodeKind.PROGRAM:
            raise MalformedNodeError("lint", root)
        if root.end > len(source):
            raise MalformedNodeError("lint", root)

        config = self.config.with_source_directives(source)
        context = AnalysisContext(source, filename=filename, config=config)
        dispatcher = EventDispatcher()
        NoUseBeforeDefine(context).register(dispatcher)

        logger.debug("linting %s", filename or "<source>")
        dispatcher.walk(root)
        context.violations.sort(key=lambda v: v.offset)
        logger.debug(
            "%s: %d violation(s)", filename or "<source>", len(context.violations)
        )
        return context

    def lint(
        self,
        source: str,
        ast: AstInput,
        filename: Optional[str] = None,
    ) -> list[LintViolation]:
        """
        Run all lint checks on a file.

        Returns:
            List of lint violations found, in source order
        """
        return self.analyze(source, ast, filename).violations


# =============================================================================
# Utility Functions
# =============================================================================


def lint_source(
    source: str,
    ast: AstInput,
    config: Optional[LintConfiguration] = None,
    filename: Optional[str] = None,
) -> list[LintViolation]:
    """
    Lint source text against its already-parsed AST.

    Args:
        source: Solidity source code string
        ast: Root node or raw JSON mapping for ``source``
        config: Optional lint configuration
        filename: Optional name for reported locations

    Returns:
        List of lint violations found
    """
    return Linter(config).lint(source, ast, filename)


def lint_file(
    source_path: Union[str, Path],
    ast_path: Optional[Union[str, Path]] = None,
    config: Optional[LintConfiguration] = None,
) -> list[LintViolation]:
    """
    Lint a source file, reading its AST from ``ast_path``.

    The AST defaults to ``<source_path>.json`` next to the source.

    Raises:
        AstLoadError: If either file cannot be read or the AST is not JSON
        MalformedNodeError: If the AST violates the node contract
    """
    source_path = Path(source_path)
    ast_path = Path(ast_path) if ast_path is not None else default_ast_path(source_path)
    try:
        source = source_path.read_text(encoding="utf-8")
    except OSError as e:
        raise AstLoadError(f"cannot read source file {source_path}: {e.strerror}") from e
    return Linter(config).lint(source, load_ast(ast_path), str(source_path))


def default_ast_path(source_path: Union[str, Path]) -> Path:
    """``Token.sol`` -> ``Token.sol.json``."""
    source_path = Path(source_path)
    return source_path.with_name(source_path.name + ".json")


__all__ = [
    "Linter",
    "lint_source",
    "lint_file",
    "default_ast_path",
]
