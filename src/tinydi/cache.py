from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from contextlib import nullcontext
from typing import Any

from tinydi.lock_mode import LockMode
from tinydi.service_key import ServiceKey

_MISSING: Any = object()


class InstanceCache:
    """Store already constructed instances of one scope.

    A root scope's cache doubles as the singleton store shared by every child of
    that root. ``get_or_create`` is a compute-if-absent: with ``LockMode.THREAD``
    at most one thread runs the factory for a key, and every caller receives the
    instance that ended up in the cache. A closed cache stores nothing further.
    """

    __slots__ = ("_closed", "_instances", "_key_locks", "_key_locks_lock", "_lock_mode")

    def __init__(self, lock_mode: LockMode = LockMode.THREAD) -> None:
        self._lock_mode = lock_mode
        self._closed = False
        self._instances: dict[ServiceKey, Any] = {}
        # Per-service-key locks for cache population
        self._key_locks: dict[ServiceKey, threading.Lock] = {}
        self._key_locks_lock = threading.Lock()

    @property
    def lock_mode(self) -> LockMode:
        return self._lock_mode

    @property
    def closed(self) -> bool:
        return self._closed

    def get(self, key: ServiceKey, default: Any = None) -> Any:
        """Return the cached instance for ``key`` or ``default``."""
        return self._instances.get(key, default)

    def get_or_create(self, key: ServiceKey, factory: Callable[[], Any]) -> Any:
        """Return the cached instance for ``key``, building it with ``factory`` on a miss.

        Nothing is stored if ``factory`` raises or the cache was closed meanwhile.
        """
        instance = self._instances.get(key, _MISSING)
        if instance is not _MISSING:
            return instance

        with self._guard(key):
            # Double-check: another thread may have stored it while we waited
            instance = self._instances.get(key, _MISSING)
            if instance is not _MISSING:
                return instance
            instance = factory()
            if not self._closed:
                self._instances[key] = instance
            return instance

    def clear(self) -> None:
        """Drop every cached instance.

        Key locks are kept: a thread may still be constructing under one.
        """
        self._instances.clear()

    def close(self) -> None:
        """Drop every cached instance and stop storing new ones."""
        self._closed = True
        self.clear()

    def __contains__(self, key: ServiceKey) -> bool:
        return key in self._instances

    def __len__(self) -> int:
        return len(self._instances)

    def __iter__(self) -> Iterator[ServiceKey]:
        return iter(list(self._instances))

    def _guard(self, key: ServiceKey) -> Any:
        if self._lock_mode is LockMode.NONE:
            return nullcontext()
        return self._get_key_lock(key)

    def _get_key_lock(self, key: ServiceKey) -> threading.Lock:
        """Get or create the lock guarding population of ``key``.

        Uses double-checked locking to minimize lock contention.
        """
        lock = self._key_locks.get(key)
        if lock is None:
            with self._key_locks_lock:
                lock = self._key_locks.get(key)
                if lock is None:
                    lock = threading.Lock()
                    self._key_locks[key] = lock
        return lock
