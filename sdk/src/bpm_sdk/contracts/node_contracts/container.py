from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

MountType = Literal["bind", "volume"]


@dataclass(frozen=True, slots=True)
class Mount:
    """
    A bind or volume mount.

    `source` may contain template expressions (e.g. `{{ node.str_parameters["data-dir"] }}`)
    that are rendered against the node before the container is created. Relative bind
    sources resolve against the node directory; volume sources get the node prefix.
    """

    type: MountType
    source: str
    target: str


@dataclass(frozen=True, slots=True)
class Port:
    container_port: str
    host_port: str = ""
    host_ip: str = ""
    protocol: str = "tcp"


@dataclass(frozen=True, slots=True)
class Container:
    """
    Desired container declaration.

    `name` is logical (unprefixed). `cmd` and `cmd_file` are alternatives; when both
    are set the literal `cmd` wins. `cmd_file` points to a rendered file with one
    argument per line.
    """

    name: str
    image: str = ""
    env_file: str | None = None
    mounts: Sequence[Mount] = ()
    ports: Sequence[Port] = ()
    cmd: Sequence[str] = ()
    cmd_file: str | None = None
    user: str = ""
    collect_logs: bool = False

    def volume_mounts(self) -> list[Mount]:
        return [mount for mount in self.mounts if mount.type == "volume"]
