# SPDX-FileCopyrightText: 2025 WeCode, Inc.
#
# SPDX-License-Identifier: Apache-2.0

import abc

from sandbox_manager.models.sandbox import ContainerState, RuntimeResult


class ContainerRuntime(abc.ABC):
    """Live container runtime queried and mutated by the lifecycle manager.

    Implementations must not raise for daemon or process failures; every
    call returns a ``RuntimeResult`` so callers can degrade per container.
    """

    @abc.abstractmethod
    async def container_state(self, container_name: str) -> RuntimeResult[ContainerState]:
        """
        Report whether a container exists and is running.

        A container the runtime does not know about is a successful answer
        with ``exists=False``, not a failure.
        """
        pass

    @abc.abstractmethod
    async def inspect_image(self, container_name: str) -> RuntimeResult[str]:
        """Return the image the container was created from."""
        pass

    @abc.abstractmethod
    async def remove(self, container_name: str) -> RuntimeResult[None]:
        """
        Force-remove a container.

        Returns ``NOT_FOUND`` when the container is already gone.
        """
        pass

    @abc.abstractmethod
    async def start(self, container_name: str) -> RuntimeResult[None]:
        """Start an existing, stopped container."""
        pass
