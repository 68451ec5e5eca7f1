from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class ServiceKey:
    """Identify a service in the registry and in every lifetime cache.

    The wrapped ``value`` is usually a class (an abstract interface or a concrete
    implementation), but any hashable object works, e.g. a string token.
    """

    value: Any

    @classmethod
    def from_value(cls, value: Any) -> ServiceKey:
        """Wrap a raw key, passing existing ``ServiceKey`` instances through unchanged."""
        if isinstance(value, ServiceKey):
            return value
        return cls(value=value)

    @property
    def name(self) -> str:
        """Human readable name used in error messages and logs."""
        qualname = getattr(self.value, "__qualname__", None)
        if isinstance(qualname, str):
            return qualname
        return repr(self.value)

    def __str__(self) -> str:
        return self.name
