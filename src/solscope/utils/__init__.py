"""
solscope Utilities Package.

Error types and source locations shared by the analysis and its front ends.
"""

from solscope.utils.errors import (
    AstLoadError,
    ConfigurationError,
    InternalConsistencyError,
    InvalidCriteriaError,
    MalformedNodeError,
    ScopeUnderflowError,
    SolScopeError,
    SourceLocation,
    UnmappedDeclarationKindError,
)

__all__ = [
    "SolScopeError",
    "MalformedNodeError",
    "InvalidCriteriaError",
    "AstLoadError",
    "ConfigurationError",
    "InternalConsistencyError",
    "ScopeUnderflowError",
    "UnmappedDeclarationKindError",
    "SourceLocation",
]
