"""
Unit tests for hoisting classification and identifier resolution.
"""

import pytest

from solscope.analysis.ast_nodes import ASTNode
from solscope.analysis.hoisting import HOISTING_POLICY, HoistClassifier, is_hoisted
from solscope.analysis.resolver import (
    IdentifierReference,
    IdentifierResolver,
    ResolutionOutcome,
)
from solscope.analysis.scope import DeclarationKind, DeclarationRegistry, FrameKind, ScopeStack
from solscope.utils.errors import MalformedNodeError, UnmappedDeclarationKindError


class TestHoisting:
    """Tests for the hoisting policy."""

    @pytest.mark.parametrize(
        "kind",
        [
            DeclarationKind.FUNCTION,
            DeclarationKind.STRUCT,
            DeclarationKind.ENUM,
            DeclarationKind.CONTRACT,
            DeclarationKind.LIBRARY,
        ],
    )
    def test_hoisted_kinds(self, kind):
        assert is_hoisted(kind)

    @pytest.mark.parametrize("kind", [DeclarationKind.VARIABLE, DeclarationKind.STATE_VARIABLE])
    def test_ordered_kinds(self, kind):
        assert not is_hoisted(kind)
        assert HoistClassifier().is_ordered(kind)

    def test_every_kind_is_mapped(self):
        assert set(HOISTING_POLICY) == set(DeclarationKind)

    def test_policy_is_read_only(self):
        with pytest.raises(TypeError):
            HOISTING_POLICY[DeclarationKind.VARIABLE] = True

    def test_unmapped_kind(self):
        classifier = HoistClassifier({DeclarationKind.VARIABLE: False})
        with pytest.raises(UnmappedDeclarationKindError):
            classifier.is_hoisted(DeclarationKind.FUNCTION)


@pytest.fixture
def scopes():
    stack = ScopeStack()
    stack.enter_scope(FrameKind.MODULE)
    return stack


@pytest.fixture
def registry(scopes):
    return DeclarationRegistry(scopes)


def reference(scopes, name, start):
    node = ASTNode("Identifier", start, start + len(name), fields={"name": name})
    return IdentifierReference.capture(node, scopes)


class TestResolver:
    """Tests for binding references to declarations."""

    def test_unresolved(self, scopes):
        resolution = IdentifierResolver().resolve(reference(scopes, "x", 5))
        assert resolution.outcome is ResolutionOutcome.UNRESOLVED
        assert resolution.declaration is None
        assert not resolution.is_violation

    def test_ordered_use_after_declaration(self, scopes, registry):
        registry.declare("x", DeclarationKind.VARIABLE, 0, 10)
        resolution = IdentifierResolver().resolve(reference(scopes, "x", 20))
        assert resolution.outcome is ResolutionOutcome.RESOLVED

    def test_ordered_use_before_declaration(self, scopes, registry):
        registry.declare("x", DeclarationKind.STATE_VARIABLE, 30, 40)
        resolution = IdentifierResolver().resolve(reference(scopes, "x", 20))
        assert resolution.outcome is ResolutionOutcome.USED_BEFORE_DEFINITION
        assert resolution.is_violation

    def test_ordered_use_in_own_initializer(self, scopes, registry):
        registry.declare("x", DeclarationKind.VARIABLE, 10, 30)
        resolution = IdentifierResolver().resolve(reference(scopes, "x", 20))
        assert resolution.outcome is ResolutionOutcome.USED_IN_OWN_INITIALIZER

    def test_use_at_declaration_end_is_resolved(self, scopes, registry):
        registry.declare("x", DeclarationKind.VARIABLE, 10, 30)
        resolution = IdentifierResolver().resolve(reference(scopes, "x", 30))
        assert resolution.outcome is ResolutionOutcome.RESOLVED

    def test_hoisted_use_before_declaration(self, scopes, registry):
        registry.declare("f", DeclarationKind.FUNCTION, 30, 40)
        resolution = IdentifierResolver().resolve(reference(scopes, "f", 20))
        assert resolution.outcome is ResolutionOutcome.RESOLVED

    def test_innermost_frame_wins(self, scopes, registry):
        """Shadowing: outer x at 5, inner x at 50, use at 40 binds the inner one."""
        registry.declare("x", DeclarationKind.STATE_VARIABLE, 5, 10)
        scopes.enter_scope(FrameKind.FUNCTION)
        ref = reference(scopes, "x", 40)
        inner = registry.declare("x", DeclarationKind.VARIABLE, 50, 60)
        resolution = IdentifierResolver().resolve(ref)
        assert resolution.declaration is inner
        assert resolution.outcome is ResolutionOutcome.USED_BEFORE_DEFINITION

    def test_earliest_declaration_in_frame_wins(self, scopes, registry):
        registry.declare("f", DeclarationKind.FUNCTION, 50, 60)
        first = registry.declare("f", DeclarationKind.FUNCTION, 10, 20)
        resolution = IdentifierResolver().resolve(reference(scopes, "f", 30))
        assert resolution.declaration is first

    def test_closed_frame_is_not_in_later_chain(self, scopes, registry):
        scopes.enter_scope(FrameKind.BLOCK)
        registry.declare("a", DeclarationKind.VARIABLE, 2, 8)
        scopes.exit_scope()
        resolution = IdentifierResolver().resolve(reference(scopes, "a", 20))
        assert resolution.outcome is ResolutionOutcome.UNRESOLVED

    def test_custom_classifier(self, scopes, registry):
        registry.declare("f", DeclarationKind.FUNCTION, 30, 40)
        classifier = HoistClassifier({**HOISTING_POLICY, DeclarationKind.FUNCTION: False})
        resolution = IdentifierResolver(classifier).resolve(reference(scopes, "f", 20))
        assert resolution.outcome is ResolutionOutcome.USED_BEFORE_DEFINITION

    def test_capture_requires_name(self, scopes):
        with pytest.raises(MalformedNodeError):
            IdentifierReference.capture(ASTNode("Identifier", 0, 1), scopes)

    def test_capture_requires_node(self, scopes):
        with pytest.raises(MalformedNodeError):
            IdentifierReference.capture({"type": "Identifier", "name": "x"}, scopes)
