from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from tinydi.defaults import DEFAULT_LIFETIME
from tinydi.exceptions import TinyDIInvalidRegistrationError
from tinydi.service_key import ServiceKey
from tinydi.types import Lifetime

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Binding:
    """Record which implementation satisfies a service key and under what lifetime."""

    service_key: ServiceKey
    """The key the binding was registered under."""
    implementation: ServiceKey
    """The concrete type (or factory) that produces instances."""
    lifetime: Lifetime
    """Instance reuse policy."""
    factory: Callable[..., Any] | None = None
    """Optional construction function captured at registration time."""
    dependencies: tuple[ServiceKey, ...] | None = None
    """Explicit ordered dependency keys for ``factory``; inferred when ``None``."""

    @property
    def is_self_bound(self) -> bool:
        """True if the key is registered as its own implementation."""
        return self.factory is None and self.implementation == self.service_key


class Registry:
    """Map service keys to bindings.

    The first registration of a key wins: registering an already present key is
    a no-op. Registration is safe from several threads; lookups are plain dict
    reads and never block.
    """

    def __init__(self) -> None:
        self._bindings: dict[ServiceKey, Binding] = {}
        self._lock = threading.Lock()

    def register(
        self,
        key: Any,
        implementation: Any | None = None,
        *,
        lifetime: Lifetime = DEFAULT_LIFETIME,
        factory: Callable[..., Any] | None = None,
        dependencies: Iterable[Any] | None = None,
    ) -> bool:
        """Register a binding for ``key`` unless one already exists.

        Args:
            key: The service key, usually an interface or concrete class.
            implementation: Concrete class used to build instances. Defaults to
                ``key`` itself (self-registration) when no ``factory`` is given.
            lifetime: Instance reuse policy.
            factory: Optional callable producing the instance. Its dependencies are
                inferred from its signature unless ``dependencies`` is given.
            dependencies: Explicit ordered dependency keys passed positionally to
                ``factory``.

        Returns:
            True if the binding was inserted, False if an existing binding was kept.

        Raises:
            TinyDIInvalidRegistrationError: If the arguments are inconsistent.

        """
        binding = self._make_binding(
            key=key,
            implementation=implementation,
            lifetime=lifetime,
            factory=factory,
            dependencies=dependencies,
        )

        with self._lock:
            existing = self._bindings.get(binding.service_key)
            if existing is None:
                self._bindings[binding.service_key] = binding

        if existing is not None:
            logger.debug(
                "Ignoring registration of %s: already bound to %s (%s)",
                binding.service_key,
                existing.implementation,
                existing.lifetime.value,
            )
            return False

        logger.debug(
            "Registered %s -> %s (%s)",
            binding.service_key,
            binding.implementation,
            binding.lifetime.value,
        )
        return True

    def add_transient(self, key: Any, implementation: Any | None = None) -> bool:
        """Register ``key`` with ``Lifetime.TRANSIENT``."""
        return self.register(key, implementation, lifetime=Lifetime.TRANSIENT)

    def add_singleton(self, key: Any, implementation: Any | None = None) -> bool:
        """Register ``key`` with ``Lifetime.SINGLETON``."""
        return self.register(key, implementation, lifetime=Lifetime.SINGLETON)

    def add_scoped(self, key: Any, implementation: Any | None = None) -> bool:
        """Register ``key`` with ``Lifetime.SCOPED``."""
        return self.register(key, implementation, lifetime=Lifetime.SCOPED)

    def lookup(self, key: Any) -> Binding | None:
        """Return the binding for ``key``, or None if it is not registered."""
        return self._bindings.get(ServiceKey.from_value(key))

    def bindings(self) -> list[Binding]:
        """Return a snapshot of all bindings in registration order."""
        with self._lock:
            return list(self._bindings.values())

    def __contains__(self, key: Any) -> bool:
        return ServiceKey.from_value(key) in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def _make_binding(
        self,
        *,
        key: Any,
        implementation: Any | None,
        lifetime: Lifetime,
        factory: Callable[..., Any] | None,
        dependencies: Iterable[Any] | None,
    ) -> Binding:
        if not isinstance(lifetime, Lifetime):
            msg = f"lifetime must be a Lifetime, got {lifetime!r}"
            raise TinyDIInvalidRegistrationError(msg)

        if implementation is not None and factory is not None:
            msg = "Provide either `implementation` or `factory`, not both."
            raise TinyDIInvalidRegistrationError(msg)

        if factory is not None and not callable(factory):
            msg = f"factory must be callable, got {factory!r}"
            raise TinyDIInvalidRegistrationError(msg)

        if dependencies is not None and factory is None:
            msg = "`dependencies` can only be given together with `factory`."
            raise TinyDIInvalidRegistrationError(msg)

        service_key = ServiceKey.from_value(key)
        if factory is None:
            concrete = service_key.value if implementation is None else implementation
            if not isinstance(concrete, type):
                msg = f"Implementation of {service_key} must be a class, got {concrete!r}"
                raise TinyDIInvalidRegistrationError(msg)
            implementation_key = ServiceKey.from_value(concrete)
        else:
            implementation_key = service_key

        return Binding(
            service_key=service_key,
            implementation=implementation_key,
            lifetime=lifetime,
            factory=factory,
            dependencies=(
                None
                if dependencies is None
                else tuple(ServiceKey.from_value(dependency) for dependency in dependencies)
            ),
        )
