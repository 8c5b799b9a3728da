# SPDX-FileCopyrightText: 2025 WeCode, Inc.
#
# SPDX-License-Identifier: Apache-2.0

"""Exception types raised by sandbox_manager."""


class SandboxManagerError(Exception):
    """Base class for sandbox_manager errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigError(SandboxManagerError):
    """Sandbox configuration file is unreadable or invalid."""


class RegistryUnavailableError(SandboxManagerError):
    """The registry store could not be reached or updated."""


class RuntimeOperationError(SandboxManagerError):
    """A user-requested runtime operation did not succeed."""

    def __init__(self, container_name: str, message: str):
        self.container_name = container_name
        super().__init__(message)


class SelectionError(SandboxManagerError):
    """Recreate selection flags are missing or conflicting."""
