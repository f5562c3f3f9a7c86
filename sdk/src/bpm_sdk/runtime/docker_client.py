from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import docker
import requests
from docker.constants import DEFAULT_TIMEOUT_SECONDS
from docker.errors import DockerException, NotFound
from docker.types import LogConfig
from docker.types import Mount as DockerMount

from bpm_sdk.contracts.node_contracts.container import Port
from bpm_sdk.contracts.runtime import (
    ContainerConfig,
    ContainerState,
    PhaseTimeoutError,
    ResourceNotFoundError,
    RuntimeClientError,
)


class DockerRuntimeClient:
    """
    Docker Engine implementation of the RuntimeClient facade.
    """

    def __init__(self, client: Any, *, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        """Wrap an existing `docker.DockerClient` (or a compatible object)."""
        self._client = client
        self._timeout = timeout

    @classmethod
    def connect(cls, timeout: float, *, base_url: str | None = None) -> DockerRuntimeClient:
        """Connect to the daemon at `base_url`, or as configured by DOCKER_HOST & co."""
        request_timeout = max(1, int(timeout))
        try:
            if base_url:
                client = docker.DockerClient(base_url=base_url, timeout=request_timeout)
            else:
                client = docker.from_env(timeout=request_timeout)
        except DockerException as exc:
            raise RuntimeClientError(f"Cannot connect to the docker daemon: {exc}") from exc
        return cls(client, timeout=request_timeout)

    def pull_image(self, image: str) -> None:
        """Pull an image, blocking until the transfer completes."""
        with _translate_errors(f"pull image '{image}'"):
            self._client.images.pull(image)

    def inspect_container(self, name: str) -> ContainerState:
        """Return the state of a container."""
        with _translate_errors(f"inspect container '{name}'"):
            container = self._client.containers.get(name)
        state = container.attrs.get("State") or {}
        return ContainerState(name=name, running=bool(state.get("Running", False)))

    def create_container(self, config: ContainerConfig) -> None:
        """Create (but do not start) a container."""
        with _translate_errors(f"create container '{config.name}'"):
            self._client.containers.create(
                image=config.image,
                command=list(config.command) or None,
                name=config.name,
                environment=list(config.environment) or None,
                user=config.user or None,
                mounts=[
                    DockerMount(target=mount.target, source=mount.source, type=mount.type)
                    for mount in config.mounts
                ],
                ports=_port_bindings(config.ports),
                network=config.network,
                restart_policy={"Name": config.restart_policy},
                log_config=LogConfig(type=config.log_driver, config=dict(config.log_options)),
            )

    def start_container(self, name: str) -> None:
        """Start an existing container."""
        with _translate_errors(f"start container '{name}'"):
            self._client.containers.get(name).start()

    def stop_container(self, name: str) -> None:
        """Stop a running container using the runtime's default grace period."""
        with _translate_errors(f"stop container '{name}'"):
            self._client.containers.get(name).stop()

    def remove_container(self, name: str, *, remove_volumes: bool = True) -> None:
        """Remove a stopped container."""
        with _translate_errors(f"remove container '{name}'"):
            self._client.containers.get(name).remove(v=remove_volumes)

    def wait_container(self, name: str, *, timeout: float | None = None) -> int:
        """
        Block until the container exits and return its exit status.

        docker-py sends the wait request without a timeout unless one is given, so the
        client's request timeout is used when `timeout` is None.
        """
        wait_timeout = timeout if timeout is not None else self._timeout
        with _translate_errors(f"wait for container '{name}'"):
            container = self._client.containers.get(name)
            try:
                result = container.wait(timeout=wait_timeout)
            except requests.exceptions.ConnectionError as exc:
                # an expired read on the wait stream surfaces as a connection error
                raise PhaseTimeoutError(
                    f"Timed out waiting for container '{name}' after {wait_timeout:g}s: {exc}"
                ) from exc
        return int(result.get("StatusCode", -1))

    def container_logs(self, name: str) -> str:
        """Return combined stdout and stderr of a container."""
        with _translate_errors(f"read logs of container '{name}'"):
            output = self._client.containers.get(name).logs(stdout=True, stderr=True)
        return output.decode("utf-8", errors="replace")

    def list_container_names(self) -> list[str]:
        """List the names of all containers, running or not."""
        with _translate_errors("list containers"):
            return [container.name for container in self._client.containers.list(all=True)]

    def inspect_network(self, name: str) -> None:
        """Raise ResourceNotFoundError if the network does not exist."""
        with _translate_errors(f"inspect network '{name}'"):
            self._client.networks.get(name)

    def create_network(self, name: str) -> None:
        """Create a network."""
        with _translate_errors(f"create network '{name}'"):
            self._client.networks.create(name)

    def remove_network(self, name: str) -> None:
        """Remove a network."""
        with _translate_errors(f"remove network '{name}'"):
            self._client.networks.get(name).remove()

    def inspect_volume(self, name: str) -> None:
        """Raise ResourceNotFoundError if the volume does not exist."""
        with _translate_errors(f"inspect volume '{name}'"):
            self._client.volumes.get(name)

    def remove_volume(self, name: str) -> None:
        """Remove a volume."""
        with _translate_errors(f"remove volume '{name}'"):
            self._client.volumes.get(name).remove()

    def list_volume_names(self) -> list[str]:
        """List the names of all volumes."""
        with _translate_errors("list volumes"):
            return [volume.name for volume in self._client.volumes.list()]

    def close(self) -> None:
        """Release the underlying connection."""
        self._client.close()


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except NotFound as exc:
        raise ResourceNotFoundError(f"Cannot {operation}: {_explain(exc)}") from exc
    except requests.exceptions.Timeout as exc:
        raise PhaseTimeoutError(f"Timed out trying to {operation}: {exc}") from exc
    except (DockerException, requests.exceptions.RequestException) as exc:
        raise RuntimeClientError(f"Failed to {operation}: {_explain(exc)}") from exc


def _explain(exc: Exception) -> str:
    explanation = getattr(exc, "explanation", None)
    return str(explanation) if explanation else str(exc)


def _port_bindings(ports: tuple[Port, ...]) -> dict[str, Any]:
    bindings: dict[str, Any] = {}
    for port in ports:
        key = f"{port.container_port}/{port.protocol or 'tcp'}"
        host_port = port.host_port or None
        if port.host_ip:
            bindings[key] = (port.host_ip, host_port)
        else:
            bindings[key] = host_port
    return bindings
