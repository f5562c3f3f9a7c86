"""
Idempotent container, network and volume operations for one node.

Every operation follows the same pattern:

    1. Query the runtime for the current state
    2. If it already matches the desired state, log the skip and return
    3. Otherwise perform the single action that produces the desired state

Nothing is cached between calls, so an operation that failed halfway can simply be
invoked again. Only "not found" is normalised (to False / skip); every other runtime
error propagates.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from bpm_sdk.contracts import (
    Container,
    ContainerConfig,
    Mount,
    Node,
    ResourceNotFoundError,
    RuntimeClient,
    RuntimeClientError,
    TemplateData,
)
from bpm_sdk.runtime.deadline import Deadline
from bpm_sdk.templating import render_string

logger = logging.getLogger("bpm_sdk.runtime")

RESTART_POLICY = "unless-stopped"
LOG_DRIVER = "json-file"
LOG_MAX_SIZE = "10m"
LOG_MAX_FILE = "3"

DOCKER_NETWORK_PARAMETER = "docker-network"
DEFAULT_DOCKER_NETWORK = "bpm"

_T = TypeVar("_T")


class TransientContainerError(RuntimeClientError):
    def __init__(self, name: str, status: int, output: str) -> None:
        super().__init__(f"Container '{name}' failed with status code: {status}\n{output}".rstrip())
        self.name = name
        self.status = status
        self.output = output


class BasicManager:
    """
    Convergence engine bound to one node and one runtime client.

    Container and volume names are logical; the node prefix is applied here (and never
    twice). Network names are used verbatim because networks may be shared between nodes.
    """

    def __init__(
        self,
        node: Node,
        client: RuntimeClient,
        *,
        deadline: Deadline | None = None,
    ) -> None:
        self._node = node
        self._client = client
        self._deadline = deadline

    def prefixed_name(self, name: str) -> str:
        return self._node.prefixed_name(name)

    # Queries

    def does_exist(self, container: Container | str) -> bool:
        name = self.prefixed_name(_name_of(container))
        try:
            self._call("inspect container", self._client.inspect_container, name)
        except ResourceNotFoundError:
            return False
        return True

    def is_running(self, container: Container | str) -> bool:
        name = self.prefixed_name(_name_of(container))
        try:
            state = self._call("inspect container", self._client.inspect_container, name)
        except ResourceNotFoundError:
            # a container that does not exist is not running
            return False
        return state.running

    def does_network_exist(self, network: str) -> bool:
        try:
            self._call("inspect network", self._client.inspect_network, network)
        except ResourceNotFoundError:
            return False
        return True

    def does_volume_exist(self, volume: str) -> bool:
        try:
            self._call("inspect volume", self._client.inspect_volume, self.prefixed_name(volume))
        except ResourceNotFoundError:
            return False
        return True

    def list_names(self) -> list[str]:
        names = self._call("list containers", self._client.list_container_names)
        return [name[1:] if name.startswith("/") else name for name in names]

    def list_volume_ids(self) -> list[str]:
        return list(self._call("list volumes", self._client.list_volume_names))

    # Networks

    def ensure_network(self, network: str) -> None:
        if self.does_network_exist(network):
            logger.info("Network '%s' already exists, skipping creation", network)
            return

        logger.info("Creating network '%s'", network)
        self._call("create network", self._client.create_network, network)

    def remove_network(self, network: str) -> None:
        if not self.does_network_exist(network):
            logger.info("Cannot find network '%s', skipping removal", network)
            return

        logger.info("Removing network '%s'", network)
        self._call("remove network", self._client.remove_network, network)

    # Volumes are created implicitly by the runtime when a container mounts them.

    def remove_volume(self, volume: str) -> None:
        """
        Remove a node volume if it exists.

        Containers using the volume must already be removed; this is not checked here.
        """
        name = self.prefixed_name(volume)
        if not self.does_volume_exist(volume):
            logger.info("Cannot find volume '%s', skipping removal", name)
            return

        logger.info("Removing volume '%s'", name)
        self._call("remove volume", self._client.remove_volume, name)

    # Containers

    def ensure_container_running(self, container: Container) -> None:
        """Pull the image, then create and start the container as far as needed."""
        name = self.prefixed_name(container.name)

        # always pull: mutable tags may point to new content
        self._pull_image(container.image)

        if not self.does_exist(container):
            logger.info("Creating container '%s'", name)
            self._call("create container", self._client.create_container, self._build_config(container))
        else:
            logger.info("Container '%s' already exists, skipping creation", name)

        if not self.is_running(container):
            logger.info("Starting container '%s'", name)
            self._call("start container", self._client.start_container, name)
        else:
            logger.info("Container '%s' already runs, skipping start", name)

    def stop_container(self, container: Container | str) -> None:
        name = self.prefixed_name(_name_of(container))
        if not self.is_running(container):
            logger.info("Container '%s' is not running, skipping stop", name)
            return

        logger.info("Stopping container '%s'", name)
        self._call("stop container", self._client.stop_container, name)

    def remove_container(self, container: Container | str) -> None:
        """Stop and remove a container together with its anonymous volumes."""
        self.stop_container(container)

        name = self.prefixed_name(_name_of(container))
        if not self.does_exist(container):
            logger.info("Cannot find container '%s', skipping removal", name)
            return

        logger.info("Removing container '%s'", name)
        self._call("remove container", self._client.remove_container, name, remove_volumes=True)

    def run_transient(self, container: Container) -> str:
        """
        Run a one-shot container to completion and return its combined output.

        The container is removed afterwards even if waiting for it failed. A non-zero
        exit status raises TransientContainerError carrying the output.
        """
        name = self.prefixed_name(container.name)

        # cleanup runs even when the phase budget is already spent
        cleanup = BasicManager(self._node, self._client)
        try:
            self.ensure_container_running(container)
            # the wait is bounded by what is left of the phase budget
            timeout = self._deadline.remaining() if self._deadline is not None else None
            status = self._call("wait for container", self._client.wait_container, name, timeout=timeout)
            output = self._call("read container logs", self._client.container_logs, name)
        except Exception:
            try:
                cleanup.remove_container(container)
            except Exception:
                logger.warning("Failed to remove transient container '%s'", name, exc_info=True)
            raise

        cleanup.remove_container(container)
        if status != 0:
            raise TransientContainerError(name, status, output)
        return output

    def _pull_image(self, image: str) -> None:
        logger.debug("Pulling image '%s'", image)
        self._call("pull image", self._client.pull_image, image)

    def _build_config(self, container: Container) -> ContainerConfig:
        return ContainerConfig(
            name=self.prefixed_name(container.name),
            image=container.image,
            command=self._resolve_command(container),
            environment=self._read_env_file(container.env_file),
            user=container.user,
            mounts=tuple(self.resolve_mount(mount) for mount in container.mounts),
            ports=tuple(container.ports),
            network=self._node.string_parameter(DOCKER_NETWORK_PARAMETER, DEFAULT_DOCKER_NETWORK),
            restart_policy=RESTART_POLICY,
            log_driver=LOG_DRIVER,
            log_options={"max-size": LOG_MAX_SIZE, "max-file": LOG_MAX_FILE},
        )

    def resolve_mount(self, mount: Mount) -> Mount:
        """Render the mount source; prefix volume names and anchor relative bind paths."""
        source = render_string(mount.source, TemplateData(node=self._node), name="mount source")
        if mount.type == "bind":
            source = str(self._node.resolve_path(source))
        else:
            source = self.prefixed_name(source)
        return Mount(type=mount.type, source=source, target=mount.target)

    def _resolve_command(self, container: Container) -> tuple[str, ...]:
        if container.cmd:
            return tuple(container.cmd)
        if not container.cmd_file:
            return ()

        content = self._node.resolve_path(container.cmd_file).read_text(encoding="utf-8")
        return tuple(line.strip() for line in content.splitlines() if line.strip())

    def _read_env_file(self, env_file: str | None) -> tuple[str, ...]:
        if not env_file:
            return ()
        content = self._node.resolve_path(env_file).read_text(encoding="utf-8")
        return tuple(line for line in content.splitlines() if line.strip())

    def _call(
        self,
        operation: str,
        func: Callable[..., _T],
        *args: Any,
        **kwargs: Any,
    ) -> _T:
        if self._deadline is not None:
            self._deadline.check(operation)
        return func(*args, **kwargs)


def _name_of(container: Container | str) -> str:
    return container if isinstance(container, str) else container.name
