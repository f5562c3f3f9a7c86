from __future__ import annotations

import logging
from collections.abc import Sequence

from bpm_sdk.configuration import PhaseTimeouts
from bpm_sdk.contracts import Container, Node
from bpm_sdk.orchestration.lifecycle import ClientFactory, docker_client_factory, phase_manager

logger = logging.getLogger("bpm_sdk.upgrader")


class DockerUpgrader:
    """
    Default upgrade strategy: recreate the containers.

    All declared containers are removed and the ones that were running before are
    started again, which pulls the new images. Upgrades that need config changes or
    migrations should provide their own Upgrader.
    """

    def __init__(
        self,
        containers: Sequence[Container],
        *,
        client_factory: ClientFactory | None = None,
        timeouts: PhaseTimeouts | None = None,
    ) -> None:
        self._containers = tuple(containers)
        self._client_factory = client_factory or docker_client_factory()
        self._timeouts = timeouts or PhaseTimeouts()

    def upgrade(self, node: Node) -> None:
        with phase_manager(node, "upgrade", self._client_factory, self._timeouts) as manager:
            running = [container for container in self._containers if manager.is_running(container)]
            logger.debug("Containers running before upgrade: %s", [container.name for container in running])

            for container in self._containers:
                manager.remove_container(container)

            for container in running:
                manager.ensure_container_running(container)
