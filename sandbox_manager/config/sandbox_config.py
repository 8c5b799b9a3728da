# SPDX-FileCopyrightText: 2025 WeCode, Inc.
#
# SPDX-License-Identifier: Apache-2.0

"""Per-agent sandbox configuration resolution.

The sandbox config file is YAML::

    sandbox:
      docker:
        image: sandbox-agent:bookworm-slim
      prune:
        idleHours: 24
        maxAgeDays: 7
    agents:
      defaults:
        sandbox: {...}
      list:
        - id: coder
          sandbox:
            docker: {image: sandbox-coder:latest}
            prune: {idleHours: 0}

Each field is resolved independently: agent entry, then ``agents.defaults``,
then the top-level ``sandbox`` block, then the built-in defaults. Keys may
be written in snake_case or camelCase.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from sandbox_manager.common.config import get_config
from sandbox_manager.common.exceptions import ConfigError
from sandbox_manager.common.logger import setup_logger
from sandbox_manager.config.config import (
    DEFAULT_PRUNE_IDLE_HOURS,
    DEFAULT_PRUNE_MAX_AGE_DAYS,
    DEFAULT_SANDBOX_IMAGE,
)
from sandbox_manager.utils.session_key import normalize_agent_id

logger = setup_logger(__name__)


@dataclass(frozen=True)
class SandboxPruneSettings:
    """Prune thresholds. A zero value disables that rule."""

    idle_hours: int = DEFAULT_PRUNE_IDLE_HOURS
    max_age_days: int = DEFAULT_PRUNE_MAX_AGE_DAYS

    @property
    def disabled(self) -> bool:
        return self.idle_hours == 0 and self.max_age_days == 0


@dataclass(frozen=True)
class SandboxDockerSettings:
    image: str = DEFAULT_SANDBOX_IMAGE


@dataclass(frozen=True)
class SandboxSettings:
    docker: SandboxDockerSettings = field(default_factory=SandboxDockerSettings)
    prune: SandboxPruneSettings = field(default_factory=SandboxPruneSettings)


def _pick(section: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in section and section[key] is not None:
            return section[key]
    return None


def _section(data: Any, key: str, where: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        return {}
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{where}.{key}' must be a mapping")
    return value


def _threshold(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"'{name}' must be a non-negative integer, got {value!r}")
    return value


class SandboxConfigResolver:
    """Resolve sandbox image and prune thresholds for an agent."""

    def __init__(self, raw: Optional[Dict[str, Any]] = None):
        self._raw = raw or {}
        if not isinstance(self._raw, dict):
            raise ConfigError("Sandbox config root must be a mapping")
        self._global = _section(self._raw, "sandbox", "")
        agents = _section(self._raw, "agents", "")
        self._defaults = _section(agents.get("defaults"), "sandbox", "agents.defaults")
        self._agents = self._index_agents(agents.get("list") or [])
        self._validate()

    def _validate(self) -> None:
        """Resolve the default and every listed agent once.

        Raises:
            ConfigError: If any layer holds an invalid value
        """
        self.resolve_sandbox_config(None)
        for agent_id in self._agents:
            self.resolve_sandbox_config(agent_id)

    @staticmethod
    def _index_agents(agent_list: List[Any]) -> Dict[str, Dict[str, Any]]:
        if not isinstance(agent_list, list):
            raise ConfigError("'agents.list' must be a list")
        indexed = {}
        for item in agent_list:
            if not isinstance(item, dict):
                raise ConfigError("Entries of 'agents.list' must be mappings")
            agent_id = normalize_agent_id(str(item.get("id") or ""))
            if agent_id is None:
                raise ConfigError("Entries of 'agents.list' need a non-empty 'id'")
            indexed[agent_id] = _section(item, "sandbox", f"agents.list[{agent_id}]")
        return indexed

    @classmethod
    def from_file(cls, path: str) -> "SandboxConfigResolver":
        """Load the resolver from a YAML file. A missing file means no overrides."""
        if not os.path.exists(path):
            logger.debug(f"[SandboxConfigResolver] No config file at {path}, using defaults")
            return cls({})

        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to read sandbox config {path}: {e}")

        return cls(raw or {})

    def _layers(self, agent_id: Optional[str]) -> List[Dict[str, Any]]:
        layers = []
        normalized = normalize_agent_id(agent_id)
        if normalized and normalized in self._agents:
            layers.append(self._agents[normalized])
        layers.append(self._defaults)
        layers.append(self._global)
        return layers

    def _resolve(self, agent_id: Optional[str], block: str, *keys: str) -> Any:
        for layer in self._layers(agent_id):
            value = _pick(_section(layer, block, block), *keys)
            if value is not None:
                return value
        return None

    def resolve_sandbox_config(self, agent_id: Optional[str] = None) -> SandboxSettings:
        return SandboxSettings(
            docker=SandboxDockerSettings(image=self.resolve_configured_image(agent_id)),
            prune=self.resolve_prune_thresholds(agent_id),
        )

    def resolve_configured_image(self, agent_id: Optional[str] = None) -> str:
        image = self._resolve(agent_id, "docker", "image")
        return str(image) if image else DEFAULT_SANDBOX_IMAGE

    def resolve_prune_thresholds(
        self, agent_id: Optional[str] = None
    ) -> SandboxPruneSettings:
        idle_hours = self._resolve(agent_id, "prune", "idle_hours", "idleHours")
        max_age_days = self._resolve(agent_id, "prune", "max_age_days", "maxAgeDays")
        return SandboxPruneSettings(
            idle_hours=(
                DEFAULT_PRUNE_IDLE_HOURS
                if idle_hours is None
                else _threshold(idle_hours, "prune.idleHours")
            ),
            max_age_days=(
                DEFAULT_PRUNE_MAX_AGE_DAYS
                if max_age_days is None
                else _threshold(max_age_days, "prune.maxAgeDays")
            ),
        )


_resolver: Optional[SandboxConfigResolver] = None


def get_sandbox_config_resolver() -> SandboxConfigResolver:
    """Get the resolver for the configured sandbox config file."""
    global _resolver
    if _resolver is None:
        _resolver = SandboxConfigResolver.from_file(get_config().config_path)
    return _resolver


def reset_sandbox_config_resolver() -> None:
    """Forget the cached resolver. Used by tests and config reloads."""
    global _resolver
    _resolver = None
