from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from bpm_sdk.contracts.runtime import (
    ContainerConfig,
    ContainerState,
    ResourceNotFoundError,
    RuntimeClientError,
)

MUTATING_CALLS = frozenset(
    {
        "create_container",
        "start_container",
        "stop_container",
        "remove_container",
        "create_network",
        "remove_network",
        "remove_volume",
    }
)


@dataclass(frozen=True, slots=True)
class RuntimeCall:
    """Record of a runtime call for assertions in tests."""

    name: str
    kwargs: dict[str, Any]


@dataclass(slots=True)
class _FakeContainer:
    config: ContainerConfig
    running: bool = False


class FakeRuntimeClient:
    """
    In-memory RuntimeClient for unit tests.

    Behaves like a tiny container runtime: creating a container with volume mounts
    creates the volumes, a running container cannot be removed and a volume in use
    cannot be removed. Image pulls are recorded but treated as non-mutating.
    """

    def __init__(
        self,
        *,
        networks: Iterable[str] = (),
        volumes: Iterable[str] = (),
        exit_codes: Mapping[str, int] | None = None,
        logs: Mapping[str, str] | None = None,
        failures: Mapping[str, Exception] | None = None,
    ) -> None:
        self._containers: dict[str, _FakeContainer] = {}
        self._networks: set[str] = set(networks)
        self._volumes: set[str] = set(volumes)
        self._exit_codes = dict(exit_codes or {})
        self._logs = dict(logs or {})
        self._failures = dict(failures or {})
        self._calls: list[RuntimeCall] = []
        self.closed = False

    @property
    def calls(self) -> list[RuntimeCall]:
        """Return the recorded calls in order."""
        return list(self._calls)

    @property
    def mutating_calls(self) -> list[RuntimeCall]:
        return [call for call in self._calls if call.name in MUTATING_CALLS]

    @property
    def networks(self) -> set[str]:
        return set(self._networks)

    @property
    def volumes(self) -> set[str]:
        return set(self._volumes)

    def container_names(self) -> list[str]:
        return list(self._containers)

    def config_of(self, name: str) -> ContainerConfig:
        return self._get(name).config

    def running(self, name: str) -> bool:
        container = self._containers.get(name)
        return container is not None and container.running

    def call_names(self) -> list[str]:
        return [call.name for call in self._calls]

    def reset_calls(self) -> None:
        self._calls.clear()

    def add_container(self, name: str, *, image: str = "image:latest", running: bool = False) -> None:
        """Seed a container without recording a call."""
        self._containers[name] = _FakeContainer(ContainerConfig(name=name, image=image), running)

    # RuntimeClient

    def pull_image(self, image: str) -> None:
        self._record("pull_image", image=image)

    def inspect_container(self, name: str) -> ContainerState:
        self._record("inspect_container", name=name)
        return ContainerState(name=name, running=self._get(name).running)

    def create_container(self, config: ContainerConfig) -> None:
        self._record("create_container", name=config.name, config=config)
        if config.name in self._containers:
            raise RuntimeClientError(f"Conflict: container name '{config.name}' is already in use")
        if config.network is not None and config.network not in self._networks:
            raise ResourceNotFoundError(f"network {config.network} not found")
        for mount in config.mounts:
            if mount.type == "volume":
                self._volumes.add(mount.source)
        self._containers[config.name] = _FakeContainer(config)

    def start_container(self, name: str) -> None:
        self._record("start_container", name=name)
        self._get(name).running = True

    def stop_container(self, name: str) -> None:
        self._record("stop_container", name=name)
        self._get(name).running = False

    def remove_container(self, name: str, *, remove_volumes: bool = True) -> None:
        self._record("remove_container", name=name, remove_volumes=remove_volumes)
        if self._get(name).running:
            raise RuntimeClientError(f"You cannot remove a running container {name}")
        del self._containers[name]

    def wait_container(self, name: str, *, timeout: float | None = None) -> int:
        self._record("wait_container", name=name, timeout=timeout)
        container = self._get(name)
        container.running = False
        return self._exit_codes.get(name, 0)

    def container_logs(self, name: str) -> str:
        self._record("container_logs", name=name)
        self._get(name)
        return self._logs.get(name, "")

    def list_container_names(self) -> list[str]:
        self._record("list_container_names")
        return [f"/{name}" for name in self._containers]

    def inspect_network(self, name: str) -> None:
        self._record("inspect_network", name=name)
        if name not in self._networks:
            raise ResourceNotFoundError(f"network {name} not found")

    def create_network(self, name: str) -> None:
        self._record("create_network", name=name)
        self._networks.add(name)

    def remove_network(self, name: str) -> None:
        self._record("remove_network", name=name)
        if name not in self._networks:
            raise ResourceNotFoundError(f"network {name} not found")
        self._networks.discard(name)

    def inspect_volume(self, name: str) -> None:
        self._record("inspect_volume", name=name)
        if name not in self._volumes:
            raise ResourceNotFoundError(f"get {name}: no such volume")

    def remove_volume(self, name: str) -> None:
        self._record("remove_volume", name=name)
        if name not in self._volumes:
            raise ResourceNotFoundError(f"get {name}: no such volume")
        for container in self._containers.values():
            if any(mount.type == "volume" and mount.source == name for mount in container.config.mounts):
                raise RuntimeClientError(f"remove {name}: volume is in use")
        self._volumes.discard(name)

    def list_volume_names(self) -> list[str]:
        self._record("list_volume_names")
        return sorted(self._volumes)

    def close(self) -> None:
        self.closed = True

    def _get(self, name: str) -> _FakeContainer:
        container = self._containers.get(name)
        if container is None:
            raise ResourceNotFoundError(f"No such container: {name}")
        return container

    def _record(self, name: str, /, **kwargs: Any) -> None:
        self._calls.append(RuntimeCall(name=name, kwargs=kwargs))
        failure = self._failures.get(name)
        if failure is not None:
            raise failure
