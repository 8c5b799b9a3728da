# SPDX-FileCopyrightText: 2025 WeCode, Inc.
#
# SPDX-License-Identifier: Apache-2.0

"""Sandbox scheduler for periodic background tasks.

Runs the rate-limited prune trigger on an interval. The trigger is also safe
to call from anywhere else (e.g. whenever a sandbox is used); the shared
PruneGate keeps the passes at most one per window.

Uses APScheduler for task scheduling.
"""

from typing import TYPE_CHECKING, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from sandbox_manager.common.config import get_config
from sandbox_manager.common.logger import setup_logger

if TYPE_CHECKING:
    from sandbox_manager.services.sandbox.manager import SandboxLifecycleManager

logger = setup_logger(__name__)


class SandboxScheduler:
    """Scheduler for sandbox background tasks.

    Manages one periodic job:
    - Sandbox prune: runs every ``prune.check_interval`` seconds (default 5 min)
    """

    def __init__(
        self,
        sandbox_manager: "SandboxLifecycleManager",
        interval_seconds: Optional[int] = None,
    ):
        """Initialize the scheduler.

        Args:
            sandbox_manager: SandboxLifecycleManager instance for task execution
            interval_seconds: Prune check interval, defaults to config
        """
        self._sandbox_manager = sandbox_manager
        self._interval_seconds = interval_seconds or get_config().prune.check_interval
        self._scheduler: Optional[AsyncIOScheduler] = None

    async def start(self) -> None:
        """Start the scheduler with configured jobs."""
        if self._scheduler is not None and self._scheduler.running:
            logger.warning("[SandboxScheduler] Scheduler is already running")
            return

        self._scheduler = AsyncIOScheduler(
            job_defaults={
                "coalesce": True,  # Combine missed executions into one
                "max_instances": 1,  # Only one instance of each job at a time
                "misfire_grace_time": 30,
            }
        )

        self._scheduler.add_job(
            self._sandbox_manager.maybe_prune_sandboxes,
            IntervalTrigger(seconds=self._interval_seconds),
            id="sandbox_prune",
            name="Sandbox Prune",
            replace_existing=True,
        )

        self._scheduler.start()
        logger.info(
            f"[SandboxScheduler] Started with jobs: "
            f"sandbox_prune (every {self._interval_seconds}s)"
        )

    async def stop(self) -> None:
        """Stop the scheduler."""
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("[SandboxScheduler] Stopped")

    @property
    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self._scheduler is not None and self._scheduler.running
