from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from bpm_sdk.contracts.node_contracts.container import Mount, Port


class RuntimeClientError(RuntimeError):
    """Any failure reported by the container runtime."""


class ResourceNotFoundError(RuntimeClientError):
    """The requested container, network or volume does not exist."""


class PhaseTimeoutError(TimeoutError):
    """The time budget of a lifecycle phase elapsed."""


@dataclass(frozen=True, slots=True)
class ContainerState:
    name: str
    running: bool


@dataclass(frozen=True, slots=True)
class ContainerConfig:
    """
    Fully resolved container creation request.

    Names and mount sources are final (prefixed / absolute); the runtime client
    passes them through verbatim.
    """

    name: str
    image: str
    command: tuple[str, ...] = ()
    environment: tuple[str, ...] = ()
    user: str = ""
    mounts: tuple[Mount, ...] = ()
    ports: tuple[Port, ...] = ()
    network: str | None = None
    restart_policy: str = "no"
    log_driver: str = "json-file"
    log_options: Mapping[str, str] = field(default_factory=dict)


@runtime_checkable
class RuntimeClient(Protocol):
    """
    Facade contract for the container runtime.

    Lookups raise ResourceNotFoundError for missing resources; every other failure
    surfaces as RuntimeClientError (or PhaseTimeoutError when a request timed out).
    """

    def pull_image(self, image: str) -> None:
        """Pull an image, blocking until the transfer completes."""
        ...

    def inspect_container(self, name: str) -> ContainerState:
        """Return the state of a container."""
        ...

    def create_container(self, config: ContainerConfig) -> None:
        """Create (but do not start) a container."""
        ...

    def start_container(self, name: str) -> None:
        """Start an existing container."""
        ...

    def stop_container(self, name: str) -> None:
        """Stop a running container using the runtime's default grace period."""
        ...

    def remove_container(self, name: str, *, remove_volumes: bool = True) -> None:
        """Remove a stopped container."""
        ...

    def wait_container(self, name: str, *, timeout: float | None = None) -> int:
        """
        Block until the container exits and return its exit status.

        `timeout` bounds the wait in seconds; expiry raises PhaseTimeoutError.
        """
        ...

    def container_logs(self, name: str) -> str:
        """Return combined stdout and stderr of a container."""
        ...

    def list_container_names(self) -> list[str]:
        """List the names of all containers, running or not."""
        ...

    def inspect_network(self, name: str) -> None:
        """Raise ResourceNotFoundError if the network does not exist."""
        ...

    def create_network(self, name: str) -> None:
        """Create a network."""
        ...

    def remove_network(self, name: str) -> None:
        """Remove a network."""
        ...

    def inspect_volume(self, name: str) -> None:
        """Raise ResourceNotFoundError if the volume does not exist."""
        ...

    def remove_volume(self, name: str) -> None:
        """Remove a volume."""
        ...

    def list_volume_names(self) -> list[str]:
        """List the names of all volumes."""
        ...

    def close(self) -> None:
        """Release the underlying connection."""
        ...
