# SPDX-FileCopyrightText: 2025 WeCode, Inc.
#
# SPDX-License-Identifier: Apache-2.0

"""Data models for sandbox registry entries and their reconciled view.

``RegistryEntry`` is what the registry store persists. ``SandboxContainerInfo``
is computed on demand by merging an entry with live runtime state and is
never written back to the registry.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar

from sandbox_manager.common.exceptions import SelectionError

T = TypeVar("T")


def now_ms() -> int:
    """Current time as integer epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass
class RegistryEntry:
    """A container the registry believes exists.

    Attributes:
        container_name: Primary key, also the runtime container name
        image: Image the container was created from
        session_key: Owning session, e.g. ``agent:coder:main``
        created_at_ms: Creation time (epoch ms)
        last_used_at_ms: Last use time (epoch ms)
    """

    container_name: str
    image: str
    session_key: str
    created_at_ms: int
    last_used_at_ms: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegistryEntry":
        """Build an entry from its stored JSON form.

        Raises:
            KeyError: If a required field is missing
            ValueError: If a timestamp is not numeric
        """
        created_at_ms = int(data["createdAtMs"])
        return cls(
            container_name=str(data["containerName"]),
            image=str(data.get("image", "")),
            session_key=str(data.get("sessionKey", "")),
            created_at_ms=created_at_ms,
            last_used_at_ms=int(data.get("lastUsedAtMs", created_at_ms)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "containerName": self.container_name,
            "image": self.image,
            "sessionKey": self.session_key,
            "createdAtMs": self.created_at_ms,
            "lastUsedAtMs": self.last_used_at_ms,
        }


@dataclass
class SandboxContainerInfo:
    """Registry entry merged with what the runtime currently reports."""

    container_name: str
    image: str
    session_key: str
    created_at_ms: int
    last_used_at_ms: int
    running: bool = False
    image_match: bool = False

    @classmethod
    def from_entry(
        cls,
        entry: RegistryEntry,
        image: str,
        running: bool,
        image_match: bool,
    ) -> "SandboxContainerInfo":
        return cls(
            container_name=entry.container_name,
            image=image,
            session_key=entry.session_key,
            created_at_ms=entry.created_at_ms,
            last_used_at_ms=entry.last_used_at_ms,
            running=running,
            image_match=image_match,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "containerName": self.container_name,
            "image": self.image,
            "sessionKey": self.session_key,
            "createdAtMs": self.created_at_ms,
            "lastUsedAtMs": self.last_used_at_ms,
            "running": self.running,
            "imageMatch": self.image_match,
        }


@dataclass(frozen=True)
class ContainerState:
    """Existence and running flags reported by the runtime."""

    exists: bool
    running: bool


MISSING_CONTAINER = ContainerState(exists=False, running=False)


class RuntimeStatus(str, Enum):
    """Outcome classes of a runtime call."""

    OK = "ok"
    NOT_FOUND = "not_found"
    TRANSIENT_FAILURE = "transient_failure"


@dataclass(frozen=True)
class RuntimeResult(Generic[T]):
    """Result of a runtime adapter call.

    Runtime adapters never raise for daemon or process failures; they return
    ``TRANSIENT_FAILURE`` with the error text and let the caller decide.
    """

    status: RuntimeStatus
    value: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, value: Optional[T] = None) -> "RuntimeResult[T]":
        return cls(RuntimeStatus.OK, value=value)

    @classmethod
    def not_found(cls, error: Optional[str] = None) -> "RuntimeResult[T]":
        return cls(RuntimeStatus.NOT_FOUND, error=error)

    @classmethod
    def failure(cls, error: str) -> "RuntimeResult[T]":
        return cls(RuntimeStatus.TRANSIENT_FAILURE, error=error)

    @property
    def is_ok(self) -> bool:
        return self.status == RuntimeStatus.OK

    @property
    def is_gone(self) -> bool:
        """True when the container is absent after the call (removed or never there)."""
        return self.status in (RuntimeStatus.OK, RuntimeStatus.NOT_FOUND)


@dataclass(frozen=True)
class RecreateSelection:
    """Which containers a recreate run targets.

    Exactly one of ``all``, ``session`` or ``agent`` must be set.
    """

    all: bool = False
    session: Optional[str] = None
    agent: Optional[str] = None

    @property
    def selector_count(self) -> int:
        return sum(1 for selector in (self.all, self.session, self.agent) if selector)

    def validate(self) -> None:
        """Raise ``SelectionError`` unless exactly one selector is set."""
        if self.selector_count == 0:
            raise SelectionError("Please specify --all, --session <key>, or --agent <id>")
        if self.selector_count > 1:
            raise SelectionError("Please specify only one of: --all, --session, --agent")

    def matches(self, session_key: str) -> bool:
        """Check whether a container owned by ``session_key`` is selected."""
        if self.session:
            return session_key == self.session
        if self.agent:
            agent_prefix = f"agent:{self.agent}"
            return session_key == agent_prefix or session_key.startswith(
                f"{agent_prefix}:"
            )
        return True


@dataclass
class RecreateResult:
    """Aggregate outcome of a sequential bulk removal."""

    success_count: int = 0
    fail_count: int = 0
    failures: List[Tuple[str, str]] = field(default_factory=list)
