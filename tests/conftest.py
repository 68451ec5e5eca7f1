"""Shared pytest fixtures for tinydi tests."""

import pytest

from tinydi import Container, Registry, Scope, create_root_scope


@pytest.fixture()
def registry() -> Registry:
    """Empty registry."""
    return Registry()


@pytest.fixture()
def root_scope(registry: Registry) -> Scope:
    """Root scope over the ``registry`` fixture."""
    return create_root_scope(registry)


@pytest.fixture()
def container() -> Container:
    """Container with default settings."""
    return Container()
