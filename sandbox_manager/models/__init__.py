# SPDX-FileCopyrightText: 2025 WeCode, Inc.
#
# SPDX-License-Identifier: Apache-2.0

"""Models package for sandbox_manager."""

from sandbox_manager.models.sandbox import (
    MISSING_CONTAINER,
    ContainerState,
    RecreateResult,
    RecreateSelection,
    RegistryEntry,
    RuntimeResult,
    RuntimeStatus,
    SandboxContainerInfo,
    now_ms,
)

__all__ = [
    "RegistryEntry",
    "SandboxContainerInfo",
    "ContainerState",
    "MISSING_CONTAINER",
    "RuntimeStatus",
    "RuntimeResult",
    "RecreateSelection",
    "RecreateResult",
    "now_ms",
]
