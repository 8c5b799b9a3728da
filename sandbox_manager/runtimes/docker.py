#!/usr/bin/env python

# SPDX-FileCopyrightText: 2025 WeCode, Inc.
#
# SPDX-License-Identifier: Apache-2.0

# -*- coding: utf-8 -*-

"""
Container runtime adapter backed by the docker (or podman) CLI
"""

import asyncio
import subprocess
from typing import List, Optional

from sandbox_manager.common.config import get_config
from sandbox_manager.common.logger import setup_logger
from sandbox_manager.models.sandbox import ContainerState, RuntimeResult
from sandbox_manager.runtimes.base import ContainerRuntime

logger = setup_logger(__name__)

NOT_FOUND_MARKERS = ("no such container", "no such object")


def is_not_found_error(stderr: Optional[str]) -> bool:
    """Check whether CLI stderr reports a missing container."""
    message = (stderr or "").lower()
    return any(marker in message for marker in NOT_FOUND_MARKERS)


class DockerRuntime(ContainerRuntime):
    """Runtime adapter shelling out to the docker CLI.

    Each CLI call runs in a worker thread with a timeout so a degraded
    daemon cannot stall the event loop or the caller indefinitely.
    """

    binary = "docker"

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = (
            timeout if timeout is not None else get_config().runtime.command_timeout
        )

    def _run_sync(self, args: List[str]) -> subprocess.CompletedProcess:
        cmd = [self.binary, *args]
        return subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)

    async def _run(self, args: List[str]) -> subprocess.CompletedProcess:
        return await asyncio.to_thread(self._run_sync, args)

    async def _exec(self, args: List[str], container_name: str):
        """Run a CLI command, converting process-level errors into a failure result.

        Returns:
            CompletedProcess on execution, or a failure RuntimeResult
        """
        try:
            return await self._run(args)
        except subprocess.TimeoutExpired:
            error_msg = f"{self.binary} {args[0]} timed out after {self.timeout}s"
        except FileNotFoundError:
            error_msg = f"{self.binary} executable not found"
        except OSError as e:
            error_msg = f"{self.binary} {args[0]} failed: {e}"

        logger.warning(f"[{type(self).__name__}] {container_name}: {error_msg}")
        return RuntimeResult.failure(error_msg)

    async def container_state(self, container_name: str) -> RuntimeResult[ContainerState]:
        result = await self._exec(
            ["inspect", "-f", "{{.State.Running}}", container_name], container_name
        )
        if isinstance(result, RuntimeResult):
            return result

        if result.returncode != 0:
            if is_not_found_error(result.stderr):
                return RuntimeResult.ok(ContainerState(exists=False, running=False))
            return RuntimeResult.failure(result.stderr.strip() or "inspect failed")

        running = result.stdout.strip().lower() == "true"
        return RuntimeResult.ok(ContainerState(exists=True, running=running))

    async def inspect_image(self, container_name: str) -> RuntimeResult[str]:
        result = await self._exec(
            ["inspect", "-f", "{{.Config.Image}}", container_name], container_name
        )
        if isinstance(result, RuntimeResult):
            return result

        if result.returncode != 0:
            if is_not_found_error(result.stderr):
                return RuntimeResult.not_found(result.stderr.strip())
            return RuntimeResult.failure(result.stderr.strip() or "inspect failed")

        image = result.stdout.strip()
        if not image:
            return RuntimeResult.failure("inspect returned an empty image")
        return RuntimeResult.ok(image)

    async def remove(self, container_name: str) -> RuntimeResult[None]:
        result = await self._exec(["rm", "-f", container_name], container_name)
        if isinstance(result, RuntimeResult):
            return result

        if result.returncode != 0:
            if is_not_found_error(result.stderr):
                logger.debug(
                    f"[{type(self).__name__}] Container '{container_name}' already removed"
                )
                return RuntimeResult.not_found(result.stderr.strip())
            return RuntimeResult.failure(
                f"{self.binary} error: {result.stderr.strip() or 'rm failed'}"
            )

        logger.info(f"Removed container '{container_name}'")
        return RuntimeResult.ok()

    async def start(self, container_name: str) -> RuntimeResult[None]:
        result = await self._exec(["start", container_name], container_name)
        if isinstance(result, RuntimeResult):
            return result

        if result.returncode != 0:
            if is_not_found_error(result.stderr):
                return RuntimeResult.not_found(result.stderr.strip())
            return RuntimeResult.failure(
                f"{self.binary} error: {result.stderr.strip() or 'start failed'}"
            )

        logger.info(f"Started container '{container_name}'")
        return RuntimeResult.ok()


class PodmanRuntime(DockerRuntime):
    """Same CLI surface as docker, different binary."""

    binary = "podman"
