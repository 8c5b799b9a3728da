# SPDX-FileCopyrightText: 2025 WeCode, Inc.
#
# SPDX-License-Identifier: Apache-2.0

"""Sandbox service module.

This module provides sandbox container lifecycle capabilities:
- Registry persistence (SandboxRegistryRepository)
- Reconciliation against the container runtime (SandboxReconciler)
- Prune policy and rate limiting (should_prune_sandbox_entry, PruneGate)
- Lifecycle orchestration (SandboxLifecycleManager)
- Background scheduling for pruning (SandboxScheduler)

Public API:
    - SandboxLifecycleManager: Main service for sandbox operations
    - SandboxScheduler: Background scheduler for sandbox maintenance
"""

from sandbox_manager.services.sandbox.manager import (
    SandboxLifecycleManager,
    build_sandbox_manager,
)
from sandbox_manager.services.sandbox.prune import (
    PruneGate,
    should_prune_sandbox_entry,
)
from sandbox_manager.services.sandbox.reconciler import SandboxReconciler
from sandbox_manager.services.sandbox.repository import (
    SandboxRegistryRepository,
    get_sandbox_registry,
)
from sandbox_manager.services.sandbox.scheduler import SandboxScheduler

__all__ = [
    "SandboxLifecycleManager",
    "build_sandbox_manager",
    "SandboxScheduler",
    "SandboxReconciler",
    "PruneGate",
    "should_prune_sandbox_entry",
    "SandboxRegistryRepository",
    "get_sandbox_registry",
]
