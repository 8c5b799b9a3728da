# SPDX-FileCopyrightText: 2025 WeCode, Inc.
#
# SPDX-License-Identifier: Apache-2.0

"""SandboxLifecycleManager service for sandbox container lifecycle management.

This service handles:
- Listing registry entries reconciled against the container runtime
- Rate-limited background pruning of idle or aged-out containers
- Resuming stopped containers before use
- Operator-driven selection and sequential removal of containers
"""

from typing import TYPE_CHECKING, Callable, List, Optional

from sandbox_manager.common.config import get_config
from sandbox_manager.common.exceptions import RuntimeOperationError
from sandbox_manager.common.logger import setup_logger
from sandbox_manager.config.sandbox_config import (
    SandboxConfigResolver,
    SandboxPruneSettings,
    get_sandbox_config_resolver,
)
from sandbox_manager.models.sandbox import (
    RecreateResult,
    RecreateSelection,
    RegistryEntry,
    RuntimeResult,
    SandboxContainerInfo,
    now_ms,
)
from sandbox_manager.runtimes.base import ContainerRuntime
from sandbox_manager.runtimes.dispatcher import RuntimeDispatcher
from sandbox_manager.services.sandbox.prune import PruneGate, should_prune_sandbox_entry
from sandbox_manager.services.sandbox.reconciler import SandboxReconciler
from sandbox_manager.services.sandbox.repository import (
    SandboxRegistryRepository,
    get_sandbox_registry,
)

if TYPE_CHECKING:
    from sandbox_manager.services.sandbox.scheduler import SandboxScheduler

logger = setup_logger(__name__)


class SandboxLifecycleManager:
    """Manager for sandbox container lifecycle.

    Composes the registry store, the runtime adapter, the reconciler and the
    prune policy. Failures local to one container are contained at that
    container; only the operator-facing removal reports them to the caller.
    """

    def __init__(
        self,
        registry: SandboxRegistryRepository,
        runtime: ContainerRuntime,
        config_resolver: SandboxConfigResolver,
        prune_gate: Optional[PruneGate] = None,
        max_concurrency: Optional[int] = None,
        clock: Callable[[], int] = now_ms,
    ):
        """Initialize the SandboxLifecycleManager.

        Args:
            registry: Registry store
            runtime: Container runtime adapter
            config_resolver: Resolver for per-agent sandbox settings
            prune_gate: Shared prune rate limiter, a new one if omitted
            max_concurrency: Cap on concurrent runtime queries while listing
            clock: Returns the current time in epoch ms
        """
        config = get_config()
        self._registry = registry
        self._runtime = runtime
        self._config_resolver = config_resolver
        self._prune_gate = prune_gate or PruneGate(
            config.prune.min_interval_seconds * 1000
        )
        self._reconciler = SandboxReconciler(
            runtime,
            config_resolver.resolve_configured_image,
            max_concurrency=(
                max_concurrency
                if max_concurrency is not None
                else config.runtime.max_concurrent_queries
            ),
        )
        self._clock = clock
        self._scheduler: Optional["SandboxScheduler"] = None

    @property
    def prune_gate(self) -> PruneGate:
        return self._prune_gate

    @property
    def config_resolver(self) -> SandboxConfigResolver:
        return self._config_resolver

    # =========================================================================
    # Listing
    # =========================================================================

    async def list_containers(self) -> List[SandboxContainerInfo]:
        """List registered containers with their live runtime state.

        Listing is informational: if the registry cannot be read the result
        is empty rather than an error.
        """
        try:
            entries = self._registry.read()
        except Exception as e:
            logger.warning(f"[SandboxLifecycleManager] Failed to read registry: {e}")
            return []

        return await self._reconciler.reconcile(entries)

    # =========================================================================
    # Registration (called by provisioning code)
    # =========================================================================

    def register_container(
        self,
        container_name: str,
        image: str,
        session_key: str,
        at_ms: Optional[int] = None,
    ) -> RegistryEntry:
        """Record a newly provisioned container."""
        timestamp = at_ms if at_ms is not None else self._clock()
        entry = self._registry.upsert(
            RegistryEntry(
                container_name=container_name,
                image=image,
                session_key=session_key,
                created_at_ms=timestamp,
                last_used_at_ms=timestamp,
            )
        )
        logger.info(
            f"[SandboxLifecycleManager] Registered container {container_name} "
            f"for session {session_key}"
        )
        return entry

    def touch_container(self, container_name: str, at_ms: Optional[int] = None) -> bool:
        """Bump the last-use time of a registered container."""
        return self._registry.touch(
            container_name, at_ms if at_ms is not None else self._clock()
        )

    # =========================================================================
    # Pruning
    # =========================================================================

    def list_prunable_entries(
        self, settings: SandboxPruneSettings, at_ms: Optional[int] = None
    ) -> List[RegistryEntry]:
        """Registry entries the prune policy would evict right now."""
        if settings.disabled:
            return []

        now = at_ms if at_ms is not None else self._clock()
        return [
            entry
            for entry in self._registry.read()
            if should_prune_sandbox_entry(settings, now, entry)
        ]

    async def prune_sandboxes(
        self, settings: SandboxPruneSettings, at_ms: Optional[int] = None
    ) -> List[str]:
        """Remove every stale container from the runtime and the registry.

        The registry entry is dropped even if the runtime removal fails, so the
        registry never keeps pointing at a container that may already be gone.
        Disabled thresholds return before the registry is read.

        Returns:
            Names of the pruned containers
        """
        pruned = []
        for entry in self.list_prunable_entries(settings, at_ms):
            try:
                result = await self._runtime.remove(entry.container_name)
                if not result.is_gone:
                    logger.warning(
                        f"[SandboxLifecycleManager] Failed to remove container "
                        f"{entry.container_name}: {result.error}"
                    )
            except Exception as e:
                logger.warning(
                    f"[SandboxLifecycleManager] Error removing container "
                    f"{entry.container_name}: {e}"
                )
            finally:
                self._registry.remove(entry.container_name)

            pruned.append(entry.container_name)
            logger.info(
                f"[SandboxLifecycleManager] Pruned container {entry.container_name}"
            )

        return pruned

    async def maybe_prune_sandboxes(
        self,
        agent_id: Optional[str] = None,
        settings: Optional[SandboxPruneSettings] = None,
    ) -> bool:
        """Run a prune pass unless one started within the rate-limit window.

        Never raises: pruning is maintenance and must not disturb the caller.

        Args:
            agent_id: Agent whose prune thresholds apply to this pass
            settings: Explicit thresholds, overriding the agent's config

        Returns:
            True if a pass was started, False if rate-limited
        """
        now = self._clock()
        if not self._prune_gate.try_acquire(now):
            return False

        try:
            if settings is None:
                settings = self._config_resolver.resolve_prune_thresholds(agent_id)
            await self.prune_sandboxes(settings, now)
        except Exception as e:
            logger.error(f"[SandboxLifecycleManager] Sandbox prune failed: {e}")
        return True

    async def ensure_container_running(self, container_name: str) -> bool:
        """Start the container if it exists but is stopped.

        A missing container is left alone; creating it is the caller's job.

        Returns:
            True if a start was issued

        Raises:
            RuntimeOperationError: If the state is unknown or the start failed
        """
        state_result = await self._runtime.container_state(container_name)
        if not state_result.is_ok:
            raise RuntimeOperationError(
                container_name,
                f"Cannot determine state of {container_name}: {state_result.error}",
            )

        state = state_result.value
        if not state.exists or state.running:
            return False

        start_result = await self._runtime.start(container_name)
        if not start_result.is_ok:
            raise RuntimeOperationError(
                container_name,
                f"Failed to start {container_name}: {start_result.error}",
            )
        logger.info(f"[SandboxLifecycleManager] Resumed container {container_name}")
        return True

    # =========================================================================
    # Operator removal
    # =========================================================================

    async def remove_container(self, container_name: str) -> RuntimeResult[None]:
        """Remove a container from the runtime, then from the registry.

        An already-missing container counts as removed. On a transient runtime
        failure the registry entry is kept so the removal can be retried.

        Raises:
            RuntimeOperationError: If the runtime could not remove the container
            RegistryUnavailableError: If the registry entry could not be removed
        """
        result = await self._runtime.remove(container_name)
        if not result.is_gone:
            raise RuntimeOperationError(
                container_name, result.error or f"Failed to remove {container_name}"
            )

        self._registry.remove(container_name)
        return result

    async def select_containers(
        self, selection: RecreateSelection
    ) -> List[SandboxContainerInfo]:
        """Containers targeted by a recreate run, in listing order."""
        selection.validate()
        containers = await self.list_containers()
        return [c for c in containers if selection.matches(c.session_key)]

    async def remove_containers(
        self,
        containers: List[SandboxContainerInfo],
        on_removed: Optional[Callable[[str], None]] = None,
        on_failed: Optional[Callable[[str, str], None]] = None,
    ) -> RecreateResult:
        """Remove containers one at a time.

        A failure is recorded and reported for its container and the batch
        carries on; completed removals are never rolled back.
        """
        result = RecreateResult()
        for container in containers:
            name = container.container_name
            try:
                await self.remove_container(name)
            except Exception as e:
                error = getattr(e, "message", None) or str(e)
                result.fail_count += 1
                result.failures.append((name, error))
                logger.warning(
                    f"[SandboxLifecycleManager] Failed to remove {name}: {error}"
                )
                if on_failed:
                    on_failed(name, error)
                continue

            result.success_count += 1
            if on_removed:
                on_removed(name)

        return result

    # =========================================================================
    # Scheduled Tasks (delegated to SandboxScheduler)
    # =========================================================================

    async def start_scheduler(self) -> None:
        """Start the background prune scheduler."""
        if self._scheduler is not None and self._scheduler.is_running:
            logger.warning("[SandboxLifecycleManager] Scheduler is already running")
            return

        # Import here to avoid circular imports
        from sandbox_manager.services.sandbox.scheduler import SandboxScheduler

        self._scheduler = SandboxScheduler(self)
        await self._scheduler.start()

    async def stop_scheduler(self) -> None:
        """Stop the background prune scheduler."""
        if self._scheduler is not None:
            await self._scheduler.stop()
            self._scheduler = None


def build_sandbox_manager(
    config_path: Optional[str] = None, runtime_mode: Optional[str] = None
) -> SandboxLifecycleManager:
    """Wire a manager from configuration.

    Args:
        config_path: Sandbox YAML config, defaults to the configured path
        runtime_mode: Runtime adapter mode, defaults to the configured mode
    """
    config = get_config()
    resolver = (
        SandboxConfigResolver.from_file(config_path)
        if config_path
        else get_sandbox_config_resolver()
    )
    runtime = RuntimeDispatcher.get_runtime(runtime_mode or config.runtime.mode)
    return SandboxLifecycleManager(
        registry=get_sandbox_registry(),
        runtime=runtime,
        config_resolver=resolver,
    )
