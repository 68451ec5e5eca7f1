"""Tests for the Container facade."""

import logging

import pytest

from tinydi import (
    Container,
    Lifetime,
    LockMode,
    Registry,
    TinyDIUnregisteredServiceError,
)
from tests.services import IB, IC, A, B, C


class TestRegistration:
    def test_register_uses_default_lifetime(self) -> None:
        container = Container(default_lifetime=Lifetime.SINGLETON)
        container.register(IC, C)

        binding = container.registry.lookup(IC)
        assert binding is not None
        assert binding.lifetime is Lifetime.SINGLETON
        assert container.resolve(IC) is container.resolve(IC)

    def test_explicit_lifetime_overrides_default(self) -> None:
        container = Container(default_lifetime=Lifetime.SINGLETON)
        container.register(IC, C, lifetime=Lifetime.TRANSIENT)

        assert container.resolve(IC) is not container.resolve(IC)

    def test_first_registration_wins(self, container: Container) -> None:
        assert container.add_transient(IB, B) is True
        assert container.add_singleton(IB, C) is False

        binding = container.registry.lookup(IB)
        assert binding is not None
        assert binding.implementation.value is B
        assert binding.lifetime is Lifetime.TRANSIENT

    def test_shared_registry(self) -> None:
        registry = Registry()
        registry.add_transient(IC, C)

        first = Container(registry=registry)
        second = Container(registry=registry)

        assert first.registry is second.registry
        assert isinstance(second.resolve(IC), C)

    def test_ignored_registration_is_logged(
        self,
        container: Container,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        container.add_transient(IC, C)

        with caplog.at_level(logging.DEBUG, logger="tinydi.registry"):
            container.add_singleton(IC, B)

        assert "Ignoring registration of IC" in caplog.text


class TestResolution:
    def test_resolves_full_graph(self, container: Container) -> None:
        container.add_transient(A)
        container.add_transient(IB, B)
        container.add_singleton(IC, C)

        a1 = container.resolve(A)
        a2 = container.resolve(A)

        assert a1 is not a2
        assert a1.b is not a2.b
        assert a1.b.c is a2.b.c

    def test_unregistered(self, container: Container) -> None:
        with pytest.raises(TinyDIUnregisteredServiceError):
            container.resolve(A)

    def test_scoped_lifetimes_through_scopes(self, container: Container) -> None:
        container.add_transient(A)
        container.add_transient(IB, B)
        container.add_scoped(IC, C)

        with container.create_scope() as scope1, container.create_scope() as scope2:
            c1 = scope1.resolve(IC)
            b1 = scope1.resolve(IB)
            a1 = scope1.resolve(A)
            c2 = scope2.resolve(IC)
            a2 = scope2.resolve(A)

        assert b1.c is c1
        assert a1.b.c is c1
        assert a2.b.c is c2
        assert c1 is not c2

    def test_root_scope_is_exposed(self, container: Container) -> None:
        container.add_singleton(IC, C)

        instance = container.resolve(IC)

        assert container.root_scope.is_root
        assert container.create_scope().root is container.root_scope
        assert container.root_scope.resolve(IC) is instance
        assert container.resolver is container.root_scope.resolver

    def test_lock_mode_none(self) -> None:
        container = Container(lock_mode=LockMode.NONE)
        container.add_singleton(IC, C)

        assert container.root_scope.singletons.lock_mode is LockMode.NONE
        assert container.resolve(IC) is container.resolve(IC)

    def test_close_discards_singletons(self, container: Container) -> None:
        container.add_singleton(IC, C)
        container.resolve(IC)

        container.close()

        assert container.root_scope.closed
        assert len(container.root_scope.singletons) == 0
