# SPDX-FileCopyrightText: 2025 WeCode, Inc.
#
# SPDX-License-Identifier: Apache-2.0

import sys
from pathlib import Path
from typing import Dict, List, Optional, Set

# Add project root to Python path to allow imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

import pytest

from sandbox_manager.config.sandbox_config import SandboxConfigResolver
from sandbox_manager.models.sandbox import ContainerState, RegistryEntry, RuntimeResult
from sandbox_manager.runtimes.base import ContainerRuntime

HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS
BASE_TIME_MS = 1_704_067_200_000  # 2024-01-01T00:00:00Z

DEFAULT_IMAGE = "sandbox-agent:bookworm-slim"
CODER_IMAGE = "sandbox-coder:latest"


# =============================================================================
# In-memory collaborators
# =============================================================================


class FakeRegistry:
    """Registry store keeping entries in insertion order."""

    def __init__(self, entries: Optional[List[RegistryEntry]] = None):
        self.entries: Dict[str, RegistryEntry] = {}
        for entry in entries or []:
            self.entries[entry.container_name] = entry
        self.read_calls = 0
        self.removed: List[str] = []
        self.fail_reads = False

    def read(self) -> List[RegistryEntry]:
        self.read_calls += 1
        if self.fail_reads:
            from sandbox_manager.common.exceptions import RegistryUnavailableError

            raise RegistryUnavailableError("registry offline")
        return list(self.entries.values())

    def get(self, container_name: str) -> Optional[RegistryEntry]:
        return self.entries.get(container_name)

    def upsert(self, entry: RegistryEntry) -> RegistryEntry:
        self.entries[entry.container_name] = entry
        return entry

    def touch(self, container_name: str, last_used_at_ms: int) -> bool:
        entry = self.entries.get(container_name)
        if entry is None:
            return False
        entry.last_used_at_ms = last_used_at_ms
        return True

    def remove(self, container_name: str) -> None:
        self.removed.append(container_name)
        self.entries.pop(container_name, None)


class FakeRuntime(ContainerRuntime):
    """Container runtime holding containers in a dict.

    ``containers`` maps name -> {"image": str, "running": bool}.
    """

    def __init__(self, containers: Optional[Dict[str, dict]] = None):
        self.containers: Dict[str, dict] = dict(containers or {})
        self.state_failures: Set[str] = set()
        self.inspect_failures: Set[str] = set()
        self.remove_failures: Set[str] = set()
        self.start_failures: Set[str] = set()
        self.calls: List[tuple] = []

    async def container_state(self, container_name: str) -> RuntimeResult[ContainerState]:
        self.calls.append(("state", container_name))
        if container_name in self.state_failures:
            return RuntimeResult.failure("daemon unavailable")
        container = self.containers.get(container_name)
        if container is None:
            return RuntimeResult.ok(ContainerState(exists=False, running=False))
        return RuntimeResult.ok(ContainerState(exists=True, running=container["running"]))

    async def inspect_image(self, container_name: str) -> RuntimeResult[str]:
        self.calls.append(("inspect", container_name))
        if container_name in self.inspect_failures:
            return RuntimeResult.failure("inspect timed out")
        container = self.containers.get(container_name)
        if container is None:
            return RuntimeResult.not_found()
        return RuntimeResult.ok(container["image"])

    async def remove(self, container_name: str) -> RuntimeResult[None]:
        self.calls.append(("remove", container_name))
        if container_name in self.remove_failures:
            return RuntimeResult.failure("daemon unavailable")
        if self.containers.pop(container_name, None) is None:
            return RuntimeResult.not_found()
        return RuntimeResult.ok()

    async def start(self, container_name: str) -> RuntimeResult[None]:
        self.calls.append(("start", container_name))
        if container_name in self.start_failures:
            return RuntimeResult.failure("cannot start")
        container = self.containers.get(container_name)
        if container is None:
            return RuntimeResult.not_found()
        container["running"] = True
        return RuntimeResult.ok()


def make_entry(
    name: str,
    session_key: str = "agent:main:default",
    image: str = DEFAULT_IMAGE,
    created_at_ms: int = BASE_TIME_MS,
    last_used_at_ms: Optional[int] = None,
) -> RegistryEntry:
    return RegistryEntry(
        container_name=name,
        image=image,
        session_key=session_key,
        created_at_ms=created_at_ms,
        last_used_at_ms=created_at_ms if last_used_at_ms is None else last_used_at_ms,
    )


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_global_state():
    """Drop cached config, clients, runtimes and singletons around each test."""
    from sandbox_manager.common.config import reset_config
    from sandbox_manager.common.redis_factory import RedisClientFactory
    from sandbox_manager.common.singleton import SingletonMeta
    from sandbox_manager.config.sandbox_config import reset_sandbox_config_resolver
    from sandbox_manager.runtimes.dispatcher import RuntimeDispatcher

    def reset():
        reset_config()
        reset_sandbox_config_resolver()
        RedisClientFactory.reset()
        RuntimeDispatcher.reset()
        SingletonMeta.reset_all_instances()

    reset()
    yield
    reset()


@pytest.fixture
def sandbox_config_data():
    """Sandbox config with a coder agent override."""
    return {
        "sandbox": {
            "docker": {"image": DEFAULT_IMAGE},
            "prune": {"idleHours": 24, "maxAgeDays": 7},
        },
        "agents": {
            "list": [
                {"id": "coder", "sandbox": {"docker": {"image": CODER_IMAGE}}},
            ]
        },
    }


@pytest.fixture
def config_resolver(sandbox_config_data):
    return SandboxConfigResolver(sandbox_config_data)


@pytest.fixture
def fake_registry():
    return FakeRegistry()


@pytest.fixture
def fake_runtime():
    return FakeRuntime()


@pytest.fixture
def clock():
    """Mutable clock: set ``clock.now`` to move time."""

    class Clock:
        now = BASE_TIME_MS

        def __call__(self) -> int:
            return self.now

    return Clock()


@pytest.fixture
def sandbox_manager(fake_registry, fake_runtime, config_resolver, clock):
    from sandbox_manager.services.sandbox.manager import SandboxLifecycleManager
    from sandbox_manager.services.sandbox.prune import PruneGate

    return SandboxLifecycleManager(
        registry=fake_registry,
        runtime=fake_runtime,
        config_resolver=config_resolver,
        prune_gate=PruneGate(5 * 60 * 1000),
        max_concurrency=4,
        clock=clock,
    )


@pytest.fixture
def mock_redis_client(mocker):
    """Mock synchronous Redis client for testing."""
    mock_client = mocker.MagicMock()
    mock_client.ping.return_value = True
    mock_client.hget.return_value = None
    mock_client.hgetall.return_value = {}
    mock_client.hset.return_value = 1
    mock_client.hdel.return_value = 1
    return mock_client


@pytest.fixture(name="make_entry")
def make_entry_fixture():
    """Factory for RegistryEntry objects."""
    return make_entry


@pytest.fixture
def base_time_ms():
    return BASE_TIME_MS
