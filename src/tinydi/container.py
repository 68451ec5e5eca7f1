from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, TypeVar, overload

from tinydi.defaults import DEFAULT_LIFETIME, DEFAULT_LOCK_MODE
from tinydi.lock_mode import LockMode
from tinydi.registry import Registry
from tinydi.resolver import Resolver
from tinydi.scope import Scope, create_root_scope
from tinydi.types import Lifetime

T = TypeVar("T")


class Container:
    """Dependency injection container for registering and resolving services.

    Bundles one ``Registry``, one ``Resolver`` and the root ``Scope`` built from
    them. Register every binding first, then resolve from the container (root
    scope) or from child scopes created with ``create_scope``.

    Examples:
        .. code-block:: python

            container = Container()
            container.add_transient(Handler)
            container.add_scoped(Session)
            container.add_singleton(Settings)

            with container.create_scope() as scope:
                handler = scope.resolve(Handler)

    """

    __slots__ = ("_default_lifetime", "_registry", "_resolver", "_root_scope")

    def __init__(
        self,
        *,
        default_lifetime: Lifetime = DEFAULT_LIFETIME,
        lock_mode: LockMode = DEFAULT_LOCK_MODE,
        registry: Registry | None = None,
    ) -> None:
        """Create a container.

        Args:
            default_lifetime: Lifetime used by ``register`` when none is given.
            lock_mode: Locking strategy for singleton and scoped cache population.
            registry: Existing registry to share. A new one is created if omitted.

        """
        self._default_lifetime = default_lifetime
        self._registry = registry if registry is not None else Registry()
        self._resolver = Resolver()
        self._root_scope = create_root_scope(
            self._registry,
            resolver=self._resolver,
            lock_mode=lock_mode,
        )

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def resolver(self) -> Resolver:
        return self._resolver

    @property
    def root_scope(self) -> Scope:
        return self._root_scope

    def register(
        self,
        key: Any,
        implementation: Any | None = None,
        *,
        lifetime: Lifetime | None = None,
        factory: Callable[..., Any] | None = None,
        dependencies: Iterable[Any] | None = None,
    ) -> bool:
        """Register a binding, keeping any existing binding for ``key``.

        See ``Registry.register``. ``lifetime`` defaults to the container's
        ``default_lifetime``.
        """
        return self._registry.register(
            key,
            implementation,
            lifetime=self._default_lifetime if lifetime is None else lifetime,
            factory=factory,
            dependencies=dependencies,
        )

    def add_transient(self, key: Any, implementation: Any | None = None) -> bool:
        return self._registry.add_transient(key, implementation)

    def add_singleton(self, key: Any, implementation: Any | None = None) -> bool:
        return self._registry.add_singleton(key, implementation)

    def add_scoped(self, key: Any, implementation: Any | None = None) -> bool:
        return self._registry.add_scoped(key, implementation)

    @overload
    def resolve(self, key: type[T]) -> T: ...

    @overload
    def resolve(self, key: Any) -> Any: ...

    def resolve(self, key: Any) -> Any:
        """Resolve ``key`` in the root scope."""
        return self._resolver.resolve(self._root_scope, key)

    def create_scope(self) -> Scope:
        """Create a child scope of the root scope."""
        return self._root_scope.create_scope()

    def close(self) -> None:
        """Close the root scope, discarding all cached singletons."""
        self._root_scope.close()
