# SPDX-FileCopyrightText: 2025 WeCode, Inc.
#
# SPDX-License-Identifier: Apache-2.0

"""Repository layer for the sandbox container registry.

This module encapsulates all Redis data access for registry entries,
separating persistence from the reconciliation and lifecycle logic.

Redis Data Structure:
- Registry Hash: sandbox-registry:containers
  - {container_name} fields: RegistryEntry JSON (camelCase keys)

A hash field per container keeps the container name unique and makes a
removal visible to the very next read.
"""

import json
from typing import List, Optional

import redis

from sandbox_manager.common.exceptions import RegistryUnavailableError
from sandbox_manager.common.logger import setup_logger
from sandbox_manager.common.redis_factory import RedisClientFactory
from sandbox_manager.common.singleton import SingletonMeta
from sandbox_manager.config.config import SANDBOX_REGISTRY_KEY
from sandbox_manager.models.sandbox import RegistryEntry

logger = setup_logger(__name__)


class SandboxRegistryRepository(metaclass=SingletonMeta):
    """Repository for sandbox registry entries.

    Read and write failures raise ``RegistryUnavailableError``; callers
    decide whether that is fatal (operator removal) or degradable (listing,
    background prune).
    """

    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        registry_key: str = SANDBOX_REGISTRY_KEY,
    ):
        """Initialize the repository.

        Args:
            redis_client: Optional Redis client. If not provided, the shared
                          client from RedisClientFactory is used.
            registry_key: Name of the registry hash
        """
        self._redis_client = redis_client
        self._registry_key = registry_key

    @property
    def redis_client(self) -> redis.Redis:
        """Lazy-load Redis client."""
        if self._redis_client is None:
            self._redis_client = RedisClientFactory.get_sync_client()
        if self._redis_client is None:
            raise RegistryUnavailableError("Redis client not available")
        return self._redis_client

    @staticmethod
    def _decode(container_name: str, raw: str) -> Optional[RegistryEntry]:
        try:
            return RegistryEntry.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(
                f"[SandboxRegistryRepository] Skipping malformed entry "
                f"'{container_name}': {e}"
            )
            return None

    # =========================================================================
    # Reads
    # =========================================================================

    def read(self) -> List[RegistryEntry]:
        """Read all registry entries.

        Returns:
            Entries in the order Redis returns the hash fields
        """
        try:
            raw_entries = self.redis_client.hgetall(self._registry_key)
        except redis.RedisError as e:
            raise RegistryUnavailableError(f"Failed to read sandbox registry: {e}")

        entries = []
        for container_name, raw in raw_entries.items():
            entry = self._decode(container_name, raw)
            if entry is not None:
                entries.append(entry)
        return entries

    def get(self, container_name: str) -> Optional[RegistryEntry]:
        """Load a single entry by container name."""
        try:
            raw = self.redis_client.hget(self._registry_key, container_name)
        except redis.RedisError as e:
            raise RegistryUnavailableError(
                f"Failed to read registry entry {container_name}: {e}"
            )
        if raw is None:
            return None
        return self._decode(container_name, raw)

    # =========================================================================
    # Writes
    # =========================================================================

    def upsert(self, entry: RegistryEntry) -> RegistryEntry:
        """Insert or update an entry.

        An already-registered container keeps its original ``createdAtMs``
        and ``image``; only the session and last-use time move forward.

        Args:
            entry: Entry to save

        Returns:
            The entry as stored
        """
        existing = self.get(entry.container_name)
        if existing is not None:
            entry = RegistryEntry(
                container_name=entry.container_name,
                image=existing.image,
                session_key=entry.session_key,
                created_at_ms=existing.created_at_ms,
                last_used_at_ms=entry.last_used_at_ms,
            )

        try:
            self.redis_client.hset(
                self._registry_key, entry.container_name, json.dumps(entry.to_dict())
            )
        except redis.RedisError as e:
            raise RegistryUnavailableError(
                f"Failed to save registry entry {entry.container_name}: {e}"
            )

        logger.debug(
            f"[SandboxRegistryRepository] Saved entry: container={entry.container_name}, "
            f"session={entry.session_key}"
        )
        return entry

    def touch(self, container_name: str, last_used_at_ms: int) -> bool:
        """Record a use of the container.

        Returns:
            True if the entry exists and was updated, False if not registered
        """
        existing = self.get(container_name)
        if existing is None:
            return False

        existing.last_used_at_ms = last_used_at_ms
        try:
            self.redis_client.hset(
                self._registry_key, container_name, json.dumps(existing.to_dict())
            )
        except redis.RedisError as e:
            raise RegistryUnavailableError(
                f"Failed to update registry entry {container_name}: {e}"
            )
        return True

    def remove(self, container_name: str) -> None:
        """Remove an entry. Removing an unknown container is a no-op."""
        try:
            removed = self.redis_client.hdel(self._registry_key, container_name)
        except redis.RedisError as e:
            raise RegistryUnavailableError(
                f"Failed to remove registry entry {container_name}: {e}"
            )

        if removed:
            logger.debug(
                f"[SandboxRegistryRepository] Removed entry: container={container_name}"
            )


def get_sandbox_registry() -> SandboxRegistryRepository:
    """Get the global SandboxRegistryRepository instance.

    Returns:
        The SandboxRegistryRepository singleton
    """
    return SandboxRegistryRepository()
