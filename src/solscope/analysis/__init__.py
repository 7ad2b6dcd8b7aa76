"""
solscope Analysis Package.

This package contains the declaration-before-use analysis:
- ast_nodes: Node model built from a parser's JSON AST
- positions: Offset to line/column mapping
- ast_utils: Ancestor lookup helpers
- events: Enter/exit event dispatch over the tree
- scope: Scope frames, scope stack and declaration registry
- hoisting: Which declaration kinds are visible before their position
- resolver: Binds identifier usages to declarations
- rules: Lint rules, violations and configuration
- linter: Per-file driver tying everything together
"""

from __future__ import annotations

from solscope.analysis.ast_nodes import (
    ASTNode,
    NodeKind,
    build_tree,
    is_ast_node,
    load_ast,
    parse_ast_json,
)
from solscope.analysis.ast_utils import find_parent, find_parent_by_type, get_parent
from solscope.analysis.context import AnalysisContext
from solscope.analysis.events import EventDispatcher, Phase
from solscope.analysis.hoisting import HOISTING_POLICY, HoistClassifier
from solscope.analysis.linter import Linter, default_ast_path, lint_file, lint_source
from solscope.analysis.positions import SourcePositionIndex
from solscope.analysis.resolver import (
    IdentifierReference,
    IdentifierResolver,
    Resolution,
    ResolutionOutcome,
)
from solscope.analysis.rules import (
    ALL_RULES,
    RULES_BY_NAME,
    USE_BEFORE_DEFINE,
    USE_IN_OWN_INITIALIZER,
    LintCategory,
    LintConfiguration,
    LintLevel,
    LintRule,
    LintViolation,
)
from solscope.analysis.scope import (
    Declaration,
    DeclarationKind,
    DeclarationRegistry,
    FrameKind,
    ScopeFrame,
    ScopeStack,
)

__all__ = [
    # AST
    "ASTNode",
    "NodeKind",
    "build_tree",
    "is_ast_node",
    "load_ast",
    "parse_ast_json",
    "get_parent",
    "find_parent",
    "find_parent_by_type",
    "SourcePositionIndex",
    # Traversal
    "EventDispatcher",
    "Phase",
    # Scope model
    "FrameKind",
    "DeclarationKind",
    "Declaration",
    "ScopeFrame",
    "ScopeStack",
    "DeclarationRegistry",
    "HOISTING_POLICY",
    "HoistClassifier",
    "IdentifierReference",
    "IdentifierResolver",
    "Resolution",
    "ResolutionOutcome",
    "AnalysisContext",
    # Rules
    "LintLevel",
    "LintCategory",
    "LintRule",
    "LintViolation",
    "LintConfiguration",
    "USE_BEFORE_DEFINE",
    "USE_IN_OWN_INITIALIZER",
    "ALL_RULES",
    "RULES_BY_NAME",
    # Linter
    "Linter",
    "lint_source",
    "lint_file",
    "default_ast_path",
]
