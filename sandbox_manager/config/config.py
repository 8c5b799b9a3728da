#!/usr/bin/env python

# SPDX-FileCopyrightText: 2025 WeCode, Inc.
#
# SPDX-License-Identifier: Apache-2.0

# -*- coding: utf-8 -*-

"""
Configuration module, stores sandbox defaults and runtime adapter wiring
"""

import os

# Sandbox defaults, used when neither the agent nor the global config sets a value
DEFAULT_SANDBOX_IMAGE = os.getenv("SANDBOX_DEFAULT_IMAGE", "sandbox-agent:bookworm-slim")
DEFAULT_PRUNE_IDLE_HOURS = 24
DEFAULT_PRUNE_MAX_AGE_DAYS = 7

# Runtime adapters by mode, as "module.ClassName" import paths
SANDBOX_RUNTIME_CONFIG = os.getenv(
    "SANDBOX_RUNTIME_CONFIG",
    '{"docker": "sandbox_manager.runtimes.docker.DockerRuntime", '
    '"podman": "sandbox_manager.runtimes.docker.PodmanRuntime"}',
)

# Registry key in Redis
SANDBOX_REGISTRY_KEY = os.getenv("SANDBOX_REGISTRY_KEY", "sandbox-registry:containers")
