from tinydi.lock_mode import LockMode
from tinydi.types import Lifetime

DEFAULT_LIFETIME = Lifetime.TRANSIENT
"""Lifetime used by ``register`` when the caller does not pass one."""

DEFAULT_LOCK_MODE = LockMode.THREAD
"""Locking strategy used by new root scopes."""
