# SPDX-FileCopyrightText: 2025 WeCode, Inc.
#
# SPDX-License-Identifier: Apache-2.0

import importlib
import json
from typing import Dict, Optional

from sandbox_manager.common.exceptions import ConfigError
from sandbox_manager.common.logger import setup_logger
from sandbox_manager.config import config as runtime_settings
from sandbox_manager.runtimes.base import ContainerRuntime

logger = setup_logger(__name__)


class RuntimeDispatcher:
    """
    Select the container runtime adapter for a mode (docker, podman, ...).

    A malformed SANDBOX_RUNTIME_CONFIG raises ``ConfigError``.
    """

    _runtimes: Optional[Dict[str, ContainerRuntime]] = None

    @staticmethod
    def _load_runtimes() -> Dict[str, ContainerRuntime]:
        runtimes = {}
        config_value = runtime_settings.SANDBOX_RUNTIME_CONFIG

        if not config_value:
            from sandbox_manager.runtimes.docker import DockerRuntime

            runtimes["docker"] = DockerRuntime()
            logger.debug("Loaded default docker runtime")
            return runtimes

        try:
            runtime_config = json.loads(config_value)
        except json.JSONDecodeError as e:
            error_msg = f"Invalid JSON in SANDBOX_RUNTIME_CONFIG: {e}"
            logger.error(error_msg)
            raise ConfigError(error_msg)

        if not isinstance(runtime_config, dict):
            raise ConfigError("SANDBOX_RUNTIME_CONFIG must be a JSON object")

        for mode, runtime_path in runtime_config.items():
            parts = str(runtime_path).strip().split(".")
            if len(parts) < 2:
                raise ConfigError(f"Invalid import path: {runtime_path}")

            class_name = parts[-1]
            module_path = ".".join(parts[:-1])
            try:
                module = importlib.import_module(module_path)
                runtime_class = getattr(module, class_name)
            except (ImportError, AttributeError) as e:
                error_msg = f"Failed to load runtime '{mode}' from '{runtime_path}': {e}"
                logger.error(error_msg)
                raise ConfigError(error_msg)

            runtimes[mode] = runtime_class()
            logger.debug(f"Loaded runtime '{mode}' from '{runtime_path}'")

        if not runtimes:
            raise ConfigError("No runtimes were loaded from SANDBOX_RUNTIME_CONFIG")

        return runtimes

    @classmethod
    def get_runtime(cls, mode: str) -> ContainerRuntime:
        """
        Return the runtime adapter for ``mode``, falling back to docker.
        """
        if cls._runtimes is None:
            cls._runtimes = cls._load_runtimes()

        if mode not in cls._runtimes:
            logger.warning(f"Runtime '{mode}' not found, using default 'docker' runtime")
            if "docker" not in cls._runtimes:
                raise ConfigError(
                    f"Runtime '{mode}' is not configured and no 'docker' fallback exists"
                )
            return cls._runtimes["docker"]

        return cls._runtimes[mode]

    @classmethod
    def reset(cls) -> None:
        cls._runtimes = None
