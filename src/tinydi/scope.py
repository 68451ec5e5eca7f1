from __future__ import annotations

import itertools
import logging
import weakref
from types import TracebackType
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar, overload

from tinydi.cache import InstanceCache
from tinydi.defaults import DEFAULT_LOCK_MODE
from tinydi.exceptions import TinyDIScopeClosedError
from tinydi.lock_mode import LockMode
from tinydi.resolver import Resolver

if TYPE_CHECKING:
    from typing_extensions import Self

    from tinydi.registry import Registry

T = TypeVar("T")

logger = logging.getLogger(__name__)


class Scope:
    """A resolution context.

    Every scope shares one registry and the singleton store of its root, and
    owns a cache for ``Lifetime.SCOPED`` instances. Scopes form a flat
    two-level hierarchy: a child always points at the ultimate root, so
    singleton lookups take exactly one hop.

    Create scopes with ``create_root_scope`` and ``create_child_scope`` (or
    ``Scope.create_scope``) rather than instantiating this class directly.
    """

    # Class-level counter for readable scope ids
    _scope_counter: ClassVar[itertools.count[int]] = itertools.count()

    __slots__ = (
        "__weakref__",
        "_closed",
        "_id",
        "_instances",
        "_registry",
        "_resolver",
        "_root_ref",
        "_singletons",
    )

    def __init__(
        self,
        *,
        registry: Registry,
        resolver: Resolver,
        lock_mode: LockMode,
        parent: Scope | None = None,
    ) -> None:
        self._id = next(self._scope_counter)
        self._registry = registry
        self._resolver = resolver
        self._closed = False
        self._instances = InstanceCache(lock_mode)

        if parent is None:
            self._root_ref: weakref.ref[Scope] = weakref.ref(self)
            self._singletons = self._instances
        else:
            # Flatten: attach to the parent's root, never to the parent itself
            self._root_ref = parent._root_ref
            self._singletons = parent._singletons

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def resolver(self) -> Resolver:
        return self._resolver

    @property
    def root(self) -> Scope | None:
        """The root scope, or None if it has been garbage collected."""
        return self._root_ref()

    @property
    def is_root(self) -> bool:
        return self._singletons is self._instances

    @property
    def closed(self) -> bool:
        """True once this scope or its root has been closed."""
        return self._closed or self._singletons.closed

    @property
    def singletons(self) -> InstanceCache:
        """The singleton store of the root, shared by every scope of that root."""
        return self._singletons

    @property
    def instances(self) -> InstanceCache:
        """This scope's own cache of ``Lifetime.SCOPED`` instances."""
        return self._instances

    @overload
    def resolve(self, key: type[T]) -> T: ...

    @overload
    def resolve(self, key: Any) -> Any: ...

    def resolve(self, key: Any) -> Any:
        """Resolve ``key`` in this scope. See ``Resolver.resolve``."""
        return self._resolver.resolve(self, key)

    def create_scope(self) -> Scope:
        """Create a child scope attached to this scope's root."""
        return create_child_scope(self)

    def ensure_open(self) -> None:
        """Raise ``TinyDIScopeClosedError`` if this scope or its root was closed."""
        if self.closed:
            raise TinyDIScopeClosedError(self)

    def close(self) -> None:
        """Discard this scope's cache.

        Closing a child leaves the singleton store and sibling scopes untouched.
        Closing the root also discards the singleton store, after which every
        child of that root refuses to resolve.
        """
        if self._closed:
            return
        self._closed = True
        self._instances.close()
        logger.debug("Closed %r", self)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        kind = "root" if self.is_root else "child"
        return f"Scope(id={self._id}, {kind})"


def create_root_scope(
    registry: Registry,
    *,
    resolver: Resolver | None = None,
    lock_mode: LockMode = DEFAULT_LOCK_MODE,
) -> Scope:
    """Create a root scope whose cache doubles as the singleton store.

    Args:
        registry: Registry shared by the root and all of its children.
        resolver: Resolver used by ``Scope.resolve``. A new one is created if omitted.
        lock_mode: Locking strategy for cache population, inherited by children.

    """
    scope = Scope(
        registry=registry,
        resolver=resolver if resolver is not None else Resolver(),
        lock_mode=lock_mode,
    )
    logger.debug("Created %r", scope)
    return scope


def create_child_scope(scope: Scope) -> Scope:
    """Create a scope sharing the registry and singleton store of ``scope``'s root.

    The new scope starts with an empty cache for ``Lifetime.SCOPED`` bindings.
    Passing a child scope attaches the new scope to that child's root.
    """
    scope.ensure_open()
    child = Scope(
        registry=scope.registry,
        resolver=scope.resolver,
        lock_mode=scope.singletons.lock_mode,
        parent=scope,
    )
    logger.debug("Created %r", child)
    return child
