# SPDX-FileCopyrightText: 2025 WeCode, Inc.
#
# SPDX-License-Identifier: Apache-2.0

"""Configuration management for sandbox_manager services.

Process-level settings (Redis connection, runtime adapter tuning, prune
scheduling) are read from the environment once and cached. Per-agent
sandbox settings live in the YAML file pointed to by ``config_path`` and
are resolved by ``sandbox_manager.config.sandbox_config``.
"""

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class RedisConfig:
    """Redis connection configuration."""

    url: str = field(
        default_factory=lambda: os.getenv("REDIS_URL", "redis://localhost:6379/0")
    )
    socket_timeout: float = 5.0
    connect_timeout: float = 2.0
    encoding: str = "utf-8"
    decode_responses: bool = True


@dataclass(frozen=True)
class RuntimeConfig:
    """Container runtime adapter configuration."""

    mode: str = field(
        default_factory=lambda: os.getenv("SANDBOX_RUNTIME_MODE", "docker")
    )
    # Per-call timeout for runtime CLI invocations (seconds)
    command_timeout: float = field(
        default_factory=lambda: float(os.getenv("SANDBOX_RUNTIME_TIMEOUT", "5"))
    )
    # Upper bound on concurrent runtime queries while reconciling
    max_concurrent_queries: int = field(
        default_factory=lambda: int(os.getenv("SANDBOX_MAX_CONCURRENT_QUERIES", "8"))
    )


@dataclass(frozen=True)
class PruneConfig:
    """Background prune scheduling configuration."""

    min_interval_seconds: int = 300  # 5 minutes
    check_interval: int = field(
        default_factory=lambda: int(os.getenv("SANDBOX_PRUNE_CHECK_INTERVAL", "300"))
    )


@dataclass
class AppConfig:
    """Application-wide configuration container."""

    redis: RedisConfig = field(default_factory=RedisConfig)
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    prune: PruneConfig = field(default_factory=PruneConfig)
    config_path: str = field(
        default_factory=lambda: os.getenv(
            "SANDBOX_CONFIG_PATH",
            os.path.expanduser("~/.sandbox-manager/config.yaml"),
        )
    )


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global application configuration.

    Returns:
        AppConfig instance with all configuration values
    """
    global _config
    if _config is None:
        _config = AppConfig()
    return _config


def reset_config() -> None:
    """Reset the global configuration.

    This is primarily useful for testing purposes.
    """
    global _config
    _config = None
