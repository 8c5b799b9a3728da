# SPDX-FileCopyrightText: 2025 WeCode, Inc.
#
# SPDX-License-Identifier: Apache-2.0

"""Sandbox container registry and lifecycle management."""

__version__ = "1.0.0"
