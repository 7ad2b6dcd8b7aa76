"""
Lexical scope model: scope frames, the scope stack and the declaration registry.

The stack mirrors the traversal's nesting (module -> contract/library ->
function -> block). Declarations are registered into whichever frame is on
top of the stack when their declarative node is entered.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from solscope.analysis.ast_nodes import ASTNode
from solscope.utils.errors import ScopeUnderflowError

logger = logging.getLogger("solscope.scope")


class FrameKind(Enum):
    """Kinds of lexical scope."""

    MODULE = "module"
    CONTRACT = "contract"
    LIBRARY = "library"
    FUNCTION = "function"
    BLOCK = "block"


class DeclarationKind(Enum):
    """Kinds of named entity a declaration introduces."""

    VARIABLE = "Variable"
    STATE_VARIABLE = "StateVariable"
    FUNCTION = "Function"
    STRUCT = "Struct"
    ENUM = "Enum"
    CONTRACT = "Contract"
    LIBRARY = "Library"


@dataclass(frozen=True, slots=True)
class Declaration:
    """
    A named binding registered in a scope frame.

    Attributes:
        name: Declared identifier
        kind: What the declaration introduces
        frame: Frame the declaration lives in (back-reference)
        start: Offset where the declaration begins
        end: Offset one past the end of the declaration, initializer included
        node: The declarative node, when there is one
    """

    name: str
    kind: DeclarationKind
    frame: "ScopeFrame" = field(compare=False, repr=False)
    start: int
    end: int
    node: Optional[ASTNode] = field(default=None, compare=False, repr=False)

    def contains(self, offset: int) -> bool:
        """True if ``offset`` falls inside the declaration's own extent."""
        return self.start <= offset < self.end


@dataclass(eq=False)
class ScopeFrame:
    """
    One level of lexical scope.

    The declaration map only grows while the frame is open.
    """

    index: int
    kind: FrameKind
    node: Optional[ASTNode] = None
    _bindings: dict[str, list[Declaration]] = field(default_factory=dict, repr=False)
    _order: list[Declaration] = field(default_factory=list, repr=False)

    def add(self, declaration: Declaration) -> None:
        self._bindings.setdefault(declaration.name, []).append(declaration)
        self._order.append(declaration)

    def lookup(self, name: str) -> tuple[Declaration, ...]:
        """All declarations of ``name`` in this frame, in registration order."""
        return tuple(self._bindings.get(name, ()))

    def __contains__(self, name: object) -> bool:
        return name in self._bindings

    def __len__(self) -> int:
        return len(self._order)

    def names(self) -> list[str]:
        return list(self._bindings)

    def iter_declarations(self) -> Iterator[Declaration]:
        return iter(tuple(self._order))

    def __repr__(self) -> str:
        return f"<ScopeFrame #{self.index} {self.kind.value} ({len(self._order)} decls)>"


class ScopeStack:
    """
    Stack of open scope frames for one file's traversal.

    Every ``enter_scope`` must be matched by exactly one ``exit_scope``.
    Exiting discards the frame from the stack, so its declarations stop
    being visible to references made afterwards.
    """

    def __init__(self) -> None:
        self._frames: list[ScopeFrame] = []
        self._next_index = 0

    def enter_scope(self, kind: FrameKind, node: Optional[ASTNode] = None) -> ScopeFrame:
        """Push a new empty frame."""
        frame = ScopeFrame(index=self._next_index, kind=kind, node=node)
        self._next_index += 1
        self._frames.append(frame)
        logger.debug("enter %r at depth %d", frame, len(self._frames))
        return frame

    def exit_scope(self) -> ScopeFrame:
        """
        Pop and return the top frame.

        Raises:
            ScopeUnderflowError: If no frame is open
        """
        if not self._frames:
            raise ScopeUnderflowError("exit_scope() called with no open scope")
        frame = self._frames.pop()
        logger.debug("exit %r", frame)
        return frame

    def current_frame(self) -> ScopeFrame:
        """
        The innermost open frame.

        Raises:
            ScopeUnderflowError: If no frame is open
        """
        if not self._frames:
            raise ScopeUnderflowError("current_frame() called with no open scope")
        return self._frames[-1]

    def chain(self) -> tuple[ScopeFrame, ...]:
        """Open frames from innermost to outermost."""
        return tuple(reversed(self._frames))

    @property
    def depth(self) -> int:
        return len(self._frames)

    def is_empty(self) -> bool:
        return not self._frames

    def reset(self) -> None:
        """Drop every frame and restart creation indices."""
        self._frames.clear()
        self._next_index = 0


class DeclarationRegistry:
    """
    Records declarations into the current frame of a scope stack.

    The registry never rejects a redeclaration; overloads and duplicates
    simply accumulate in the frame.
    """

    def __init__(self, scopes: ScopeStack) -> None:
        self._scopes = scopes
        self._declarations: list[Declaration] = []

    def declare(
        self,
        name: str,
        kind: DeclarationKind,
        start: int,
        end: int,
        node: Optional[ASTNode] = None,
    ) -> Declaration:
        """
        Register a declaration in the current frame.

        Raises:
            ScopeUnderflowError: If no frame is open
            ValueError: If the name is empty or the extent is inverted
        """
        if not isinstance(name, str) or not name:
            raise ValueError(f"declaration name must be a non-empty string, got {name!r}")
        if not isinstance(kind, DeclarationKind):
            raise TypeError(f"declare() expects a DeclarationKind, got {kind!r}")
        if start > end:
            raise ValueError(f"declaration extent [{start}, {end}) is inverted")

        frame = self._scopes.current_frame()
        declaration = Declaration(
            name=name, kind=kind, frame=frame, start=start, end=end, node=node
        )
        frame.add(declaration)
        self._declarations.append(declaration)
        logger.debug("declare %s %r in %r at [%d, %d)", kind.value, name, frame, start, end)
        return declaration

    def declarations(self, frame: ScopeFrame) -> Iterator[Declaration]:
        """Declarations of one frame in registration order."""
        return frame.iter_declarations()

    def all(self) -> tuple[Declaration, ...]:
        """Every declaration registered since the last reset."""
        return tuple(self._declarations)

    def reset(self) -> None:
        self._declarations.clear()


__all__ = [
    "FrameKind",
    "DeclarationKind",
    "Declaration",
    "ScopeFrame",
    "ScopeStack",
    "DeclarationRegistry",
]
