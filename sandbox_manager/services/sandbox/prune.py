# SPDX-FileCopyrightText: 2025 WeCode, Inc.
#
# SPDX-License-Identifier: Apache-2.0

"""Prune policy and rate limiting for background sandbox cleanup."""

import threading

from sandbox_manager.config.sandbox_config import SandboxPruneSettings
from sandbox_manager.models.sandbox import RegistryEntry

HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS


def should_prune_sandbox_entry(
    settings: SandboxPruneSettings, now_ms: int, entry: RegistryEntry
) -> bool:
    """Decide whether an entry is stale.

    An entry is pruned when it has been idle longer than ``idle_hours`` or
    exists longer than ``max_age_days``. A zero threshold disables its rule;
    a timestamp exactly on the threshold is kept.
    """
    if settings.disabled:
        return False

    idle_ms = now_ms - entry.last_used_at_ms
    age_ms = now_ms - entry.created_at_ms
    return (settings.idle_hours > 0 and idle_ms > settings.idle_hours * HOUR_MS) or (
        settings.max_age_days > 0 and age_ms > settings.max_age_days * DAY_MS
    )


class PruneGate:
    """At most one prune pass per window, across every trigger site.

    ``try_acquire`` is a check-and-set under a lock: the first caller in a
    window records the timestamp before any work starts, later callers in the
    same window are refused rather than queued.
    """

    def __init__(self, min_interval_ms: int):
        self.min_interval_ms = min_interval_ms
        self._last_prune_at_ms = 0
        self._lock = threading.Lock()

    @property
    def last_prune_at_ms(self) -> int:
        return self._last_prune_at_ms

    def try_acquire(self, now_ms: int) -> bool:
        with self._lock:
            if now_ms - self._last_prune_at_ms < self.min_interval_ms:
                return False
            self._last_prune_at_ms = now_ms
            return True

    def reset(self) -> None:
        with self._lock:
            self._last_prune_at_ms = 0
