"""
Unit tests for scope frames, the scope stack and the declaration registry.
"""

import pytest

from solscope.analysis.scope import (
    DeclarationKind,
    DeclarationRegistry,
    FrameKind,
    ScopeStack,
)
from solscope.utils.errors import InternalConsistencyError, ScopeUnderflowError


@pytest.fixture
def scopes():
    return ScopeStack()


@pytest.fixture
def registry(scopes):
    return DeclarationRegistry(scopes)


class TestScopeStack:
    """Tests for pushing and popping frames."""

    def test_enter_and_exit(self, scopes):
        module = scopes.enter_scope(FrameKind.MODULE)
        function = scopes.enter_scope(FrameKind.FUNCTION)
        assert scopes.depth == 2
        assert scopes.current_frame() is function
        assert scopes.exit_scope() is function
        assert scopes.current_frame() is module

    def test_chain_is_innermost_first(self, scopes):
        module = scopes.enter_scope(FrameKind.MODULE)
        contract = scopes.enter_scope(FrameKind.CONTRACT)
        block = scopes.enter_scope(FrameKind.BLOCK)
        assert scopes.chain() == (block, contract, module)

    def test_frame_indices_increase(self, scopes):
        first = scopes.enter_scope(FrameKind.MODULE)
        scopes.exit_scope()
        second = scopes.enter_scope(FrameKind.MODULE)
        assert second.index == first.index + 1

    def test_exit_empty_stack(self, scopes):
        with pytest.raises(ScopeUnderflowError):
            scopes.exit_scope()

    def test_current_frame_of_empty_stack(self, scopes):
        with pytest.raises(InternalConsistencyError):
            scopes.current_frame()

    def test_reset(self, scopes):
        scopes.enter_scope(FrameKind.MODULE)
        scopes.reset()
        assert scopes.is_empty()
        assert scopes.enter_scope(FrameKind.MODULE).index == 0


class TestDeclarationRegistry:
    """Tests for registering declarations."""

    def test_declare_into_current_frame(self, scopes, registry):
        module = scopes.enter_scope(FrameKind.MODULE)
        function = scopes.enter_scope(FrameKind.FUNCTION)
        declaration = registry.declare("a", DeclarationKind.VARIABLE, 10, 20)
        assert declaration.frame is function
        assert "a" in function
        assert "a" not in module

    def test_redeclaration_accumulates(self, scopes, registry):
        frame = scopes.enter_scope(FrameKind.CONTRACT)
        registry.declare("f", DeclarationKind.FUNCTION, 30, 40)
        registry.declare("f", DeclarationKind.FUNCTION, 10, 20)
        assert [d.start for d in frame.lookup("f")] == [30, 10]
        assert len(frame) == 2
        assert frame.names() == ["f"]

    def test_declarations_in_registration_order(self, scopes, registry):
        frame = scopes.enter_scope(FrameKind.BLOCK)
        registry.declare("b", DeclarationKind.VARIABLE, 5, 6)
        registry.declare("a", DeclarationKind.VARIABLE, 1, 2)
        assert [d.name for d in registry.declarations(frame)] == ["b", "a"]
        assert [d.name for d in registry.all()] == ["b", "a"]

    def test_declare_without_scope(self, registry):
        with pytest.raises(ScopeUnderflowError):
            registry.declare("a", DeclarationKind.VARIABLE, 0, 1)

    def test_empty_name_rejected(self, scopes, registry):
        scopes.enter_scope(FrameKind.MODULE)
        with pytest.raises(ValueError):
            registry.declare("", DeclarationKind.VARIABLE, 0, 1)

    def test_inverted_extent_rejected(self, scopes, registry):
        scopes.enter_scope(FrameKind.MODULE)
        with pytest.raises(ValueError):
            registry.declare("a", DeclarationKind.VARIABLE, 5, 1)

    def test_kind_must_be_declaration_kind(self, scopes, registry):
        scopes.enter_scope(FrameKind.MODULE)
        with pytest.raises(TypeError):
            registry.declare("a", "Variable", 0, 1)

    def test_declaration_extent(self, scopes, registry):
        scopes.enter_scope(FrameKind.MODULE)
        declaration = registry.declare("x", DeclarationKind.STATE_VARIABLE, 10, 20)
        assert declaration.contains(10)
        assert declaration.contains(19)
        assert not declaration.contains(20)
        assert not declaration.contains(9)

    def test_frame_survives_exit_for_held_references(self, scopes, registry):
        """A popped frame keeps its declarations for references that captured it."""
        scopes.enter_scope(FrameKind.MODULE)
        block = scopes.enter_scope(FrameKind.BLOCK)
        registry.declare("a", DeclarationKind.VARIABLE, 3, 4)
        scopes.exit_scope()
        assert block.lookup("a")
        assert scopes.chain()[0] is not block
