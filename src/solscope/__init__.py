"""
solscope - use-before-define analysis for Solidity.

solscope reads the JSON AST a solparse-style parser produced for a Solidity
file, tracks lexical scopes while walking it and reports identifiers that
are used before the variable or state variable they refer to is declared.
"""

from solscope.analysis.linter import Linter, lint_file, lint_source
from solscope.analysis.rules import LintConfiguration, LintLevel, LintViolation

__version__ = "0.1.0"
__all__ = [
    "Linter",
    "lint_source",
    "lint_file",
    "LintConfiguration",
    "LintLevel",
    "LintViolation",
]
