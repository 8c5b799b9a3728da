# SPDX-FileCopyrightText: 2025 WeCode, Inc.
#
# SPDX-License-Identifier: Apache-2.0

"""Merge registry entries with what the container runtime reports."""

import asyncio
from typing import Callable, List, Optional

from sandbox_manager.common.logger import setup_logger
from sandbox_manager.models.sandbox import (
    MISSING_CONTAINER,
    RegistryEntry,
    SandboxContainerInfo,
)
from sandbox_manager.runtimes.base import ContainerRuntime
from sandbox_manager.utils.session_key import resolve_sandbox_agent_id

logger = setup_logger(__name__)


class SandboxReconciler:
    """Build the reconciled view of registry entries.

    Entries are reconciled concurrently up to ``max_concurrency`` runtime
    queries at a time. Each entry is isolated: a failure while reconciling
    one container degrades that container's view and never aborts the batch.
    """

    def __init__(
        self,
        runtime: ContainerRuntime,
        resolve_configured_image: Callable[[Optional[str]], str],
        max_concurrency: int = 8,
    ):
        self._runtime = runtime
        self._resolve_configured_image = resolve_configured_image
        self._max_concurrency = max(1, max_concurrency)

    async def reconcile(self, entries: List[RegistryEntry]) -> List[SandboxContainerInfo]:
        """Reconcile entries, preserving their order."""
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def bounded(entry: RegistryEntry) -> SandboxContainerInfo:
            async with semaphore:
                return await self.reconcile_entry(entry)

        return list(await asyncio.gather(*(bounded(entry) for entry in entries)))

    async def reconcile_entry(self, entry: RegistryEntry) -> SandboxContainerInfo:
        try:
            return await self._reconcile(entry)
        except Exception as e:
            logger.warning(
                f"[SandboxReconciler] Failed to reconcile {entry.container_name}: {e}"
            )
            return SandboxContainerInfo.from_entry(
                entry,
                image=entry.image,
                running=False,
                image_match=self._image_matches(entry, entry.image),
            )

    async def _reconcile(self, entry: RegistryEntry) -> SandboxContainerInfo:
        state_result = await self._runtime.container_state(entry.container_name)
        state = state_result.value if state_result.is_ok else MISSING_CONTAINER
        if not state_result.is_ok:
            logger.debug(
                f"[SandboxReconciler] State unknown for {entry.container_name}: "
                f"{state_result.error}"
            )

        image = entry.image
        if state.exists:
            image_result = await self._runtime.inspect_image(entry.container_name)
            if image_result.is_ok:
                image = image_result.value

        return SandboxContainerInfo.from_entry(
            entry,
            image=image,
            running=state.exists and state.running,
            image_match=self._image_matches(entry, image),
        )

    def _image_matches(self, entry: RegistryEntry, image: str) -> bool:
        try:
            agent_id = resolve_sandbox_agent_id(entry.session_key)
            return image == self._resolve_configured_image(agent_id)
        except Exception as e:
            logger.warning(
                f"[SandboxReconciler] Cannot resolve configured image for "
                f"{entry.container_name}: {e}"
            )
            return False
