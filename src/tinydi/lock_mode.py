from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Select locking behavior for cached instance population.

    Pass it to ``Container(lock_mode=...)`` or ``create_root_scope(..., lock_mode=...)``.
    Child scopes inherit the mode of their root.
    """

    THREAD = "thread"
    """Guard singleton and scoped construction with a per-key ``threading.Lock``."""

    NONE = "none"
    """Disable locking around cache population. Only safe for single-threaded use."""
