"""Tests for root and child scopes."""

import gc

import pytest

from tinydi import (
    LockMode,
    Registry,
    Scope,
    ServiceKey,
    TinyDIScopeClosedError,
    create_child_scope,
    create_root_scope,
)
from tests.services import IC, C


class TestScopeCreation:
    def test_root_scope_points_to_itself(self, root_scope: Scope) -> None:
        assert root_scope.is_root
        assert root_scope.root is root_scope
        assert root_scope.singletons is root_scope.instances

    def test_child_shares_registry_and_singletons(
        self,
        registry: Registry,
        root_scope: Scope,
    ) -> None:
        child = create_child_scope(root_scope)

        assert not child.is_root
        assert child.root is root_scope
        assert child.registry is registry
        assert child.resolver is root_scope.resolver
        assert child.singletons is root_scope.singletons
        assert child.instances is not root_scope.instances
        assert len(child.instances) == 0

    def test_grandchild_attaches_to_ultimate_root(self, root_scope: Scope) -> None:
        child = root_scope.create_scope()
        grandchild = child.create_scope()

        assert grandchild.root is root_scope
        assert grandchild.singletons is root_scope.singletons
        assert grandchild.instances is not child.instances

    def test_child_inherits_lock_mode(self, registry: Registry) -> None:
        root = create_root_scope(registry, lock_mode=LockMode.NONE)

        assert root.create_scope().instances.lock_mode is LockMode.NONE

    def test_root_reference_is_weak(self, registry: Registry) -> None:
        registry.register(IC, C)
        root = create_root_scope(registry)
        child = root.create_scope()

        del root
        gc.collect()

        assert child.root is None
        assert isinstance(child.resolve(IC), C)

    def test_repr(self, root_scope: Scope) -> None:
        assert "root" in repr(root_scope)
        assert "child" in repr(root_scope.create_scope())


class TestScopeClose:
    def test_closing_child_discards_only_its_cache(
        self,
        registry: Registry,
        root_scope: Scope,
    ) -> None:
        class Session:
            pass

        registry.add_singleton(IC, C)
        registry.add_scoped(Session)
        s1 = root_scope.create_scope()
        s2 = root_scope.create_scope()
        singleton = s1.resolve(IC)
        s1.resolve(Session)
        sibling_session = s2.resolve(Session)

        s1.close()

        assert s1.closed
        assert len(s1.instances) == 0
        assert root_scope.singletons.get(ServiceKey(value=IC)) is singleton
        assert s2.resolve(Session) is sibling_session

    def test_resolving_in_closed_scope_raises(self, registry: Registry, root_scope: Scope) -> None:
        registry.register(IC, C)
        child = root_scope.create_scope()
        child.close()

        with pytest.raises(TinyDIScopeClosedError):
            child.resolve(IC)

    def test_creating_child_of_closed_scope_raises(self, root_scope: Scope) -> None:
        root_scope.close()

        with pytest.raises(TinyDIScopeClosedError):
            root_scope.create_scope()

    def test_close_is_idempotent(self, root_scope: Scope) -> None:
        child = root_scope.create_scope()

        child.close()
        child.close()

        assert child.closed

    def test_context_manager_closes_scope(self, registry: Registry, root_scope: Scope) -> None:
        registry.add_scoped(IC, C)

        with root_scope.create_scope() as scope:
            first = scope.resolve(IC)
            assert scope.resolve(IC) is first

        assert scope.closed
        assert len(scope.instances) == 0

    def test_closing_root_discards_singletons(self, registry: Registry, root_scope: Scope) -> None:
        registry.add_singleton(IC, C)
        root_scope.resolve(IC)

        root_scope.close()

        assert len(root_scope.singletons) == 0

    def test_closing_root_closes_its_children(self, registry: Registry, root_scope: Scope) -> None:
        registry.add_singleton(IC, C)
        child = root_scope.create_scope()
        grandchild = child.create_scope()
        child.resolve(IC)

        root_scope.close()

        assert child.closed
        assert grandchild.closed
        for scope in (child, grandchild):
            with pytest.raises(TinyDIScopeClosedError):
                scope.resolve(IC)
            with pytest.raises(TinyDIScopeClosedError):
                scope.create_scope()
        assert len(root_scope.singletons) == 0

    def test_closing_child_leaves_root_open(self, registry: Registry, root_scope: Scope) -> None:
        registry.add_singleton(IC, C)
        child = root_scope.create_scope()
        child.close()

        assert not root_scope.closed
        assert isinstance(root_scope.resolve(IC), C)
