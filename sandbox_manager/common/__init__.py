# SPDX-FileCopyrightText: 2025 WeCode, Inc.
#
# SPDX-License-Identifier: Apache-2.0

"""Common utilities and base classes for sandbox_manager services."""

from sandbox_manager.common.config import (
    AppConfig,
    PruneConfig,
    RedisConfig,
    RuntimeConfig,
    get_config,
    reset_config,
)
from sandbox_manager.common.exceptions import (
    ConfigError,
    RegistryUnavailableError,
    RuntimeOperationError,
    SandboxManagerError,
    SelectionError,
)
from sandbox_manager.common.redis_factory import RedisClientFactory
from sandbox_manager.common.singleton import SingletonMeta

__all__ = [
    "SingletonMeta",
    "AppConfig",
    "RedisConfig",
    "RuntimeConfig",
    "PruneConfig",
    "get_config",
    "reset_config",
    "RedisClientFactory",
    "SandboxManagerError",
    "ConfigError",
    "RegistryUnavailableError",
    "RuntimeOperationError",
    "SelectionError",
]
