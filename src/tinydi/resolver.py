from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar, overload

from tinydi.dependencies import DependenciesExtractor, Dependency
from tinydi.exceptions import (
    TinyDICircularDependencyError,
    TinyDIError,
    TinyDIInstantiationError,
    TinyDIUnregisteredServiceError,
)
from tinydi.service_key import ServiceKey
from tinydi.types import Lifetime

if TYPE_CHECKING:
    from tinydi.cache import InstanceCache
    from tinydi.registry import Binding
    from tinydi.scope import Scope

T = TypeVar("T")

logger = logging.getLogger(__name__)


class Resolver:
    """Build fully wired object graphs for a scope.

    Resolution is synchronous and recursive. Each call threads the resolution
    path (keys currently under construction on this call stack) through the
    recursion, so dependency cycles fail fast instead of exhausting the stack.
    A failure at any depth aborts the whole call; instances that were fully
    built and cached before the failure stay cached.
    """

    __slots__ = ("_dependencies_extractor",)

    def __init__(self, dependencies_extractor: DependenciesExtractor | None = None) -> None:
        self._dependencies_extractor = dependencies_extractor or DependenciesExtractor()

    @overload
    def resolve(self, scope: Scope, key: type[T]) -> T: ...

    @overload
    def resolve(self, scope: Scope, key: Any) -> Any: ...

    def resolve(self, scope: Scope, key: Any) -> Any:
        """Resolve ``key`` in ``scope`` and return one instance.

        Singleton bindings are cached in the root's singleton store and scoped
        bindings in ``scope``'s own cache, both under the requested key.
        Transient bindings are never cached.

        Args:
            scope: The scope providing the registry and lifetime caches.
            key: The service key to resolve.

        Raises:
            TinyDIUnregisteredServiceError: If ``key`` or any dependency has no binding.
            TinyDIAmbiguousConstructorError: If an implementation has several
                dependency-bearing constructors.
            TinyDICircularDependencyError: If the dependency graph contains a cycle.
            TinyDIInstantiationError: If a constructor or factory raises.
            TinyDIScopeClosedError: If ``scope`` was closed.

        """
        scope.ensure_open()
        return self._resolve(scope, ServiceKey.from_value(key), ())

    def _resolve(self, scope: Scope, service_key: ServiceKey, path: tuple[ServiceKey, ...]) -> Any:
        if service_key in path:
            cycle = [*path[path.index(service_key) :], service_key]
            raise TinyDICircularDependencyError(service_key, cycle)

        binding = scope.registry.lookup(service_key)
        if binding is None:
            raise TinyDIUnregisteredServiceError(service_key)

        cache: InstanceCache
        if binding.lifetime is Lifetime.TRANSIENT:
            return self._construct(scope, service_key, binding, path)
        if binding.lifetime is Lifetime.SINGLETON:
            cache = scope.singletons
        elif binding.lifetime is Lifetime.SCOPED:
            cache = scope.instances
        else:  # pragma: no cover - Lifetime is validated at registration
            msg = f"Unsupported lifetime: {binding.lifetime!r}"
            raise TypeError(msg)

        return cache.get_or_create(
            service_key,
            lambda: self._construct(scope, service_key, binding, path),
        )

    def _construct(
        self,
        scope: Scope,
        service_key: ServiceKey,
        binding: Binding,
        path: tuple[ServiceKey, ...],
    ) -> Any:
        constructor = self._dependencies_extractor.get_constructor(service_key, binding)

        child_path = (*path, service_key)
        resolved: list[tuple[Dependency, Any]] = []
        for dependency in constructor.dependencies:
            if dependency.has_default and dependency.service_key not in scope.registry:
                continue
            resolved.append(
                (dependency, self._resolve(scope, dependency.service_key, child_path)),
            )

        try:
            instance = constructor(resolved)
        except TinyDIError:
            raise
        except Exception as e:
            raise TinyDIInstantiationError(service_key, constructor.factory, e) from e

        logger.debug(
            "Constructed %s for %s (%s)",
            type(instance).__qualname__,
            service_key,
            binding.lifetime.value,
        )
        return instance
