from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

NAME_PREFIX = "bpm"

CONFIGS_DIRECTORY = "configs"
SECRETS_DIRECTORY = "secrets"
LOGS_DIRECTORY = "logs"
MONITORING_DIRECTORY = "monitoring"


class Collection(BaseModel):
    """Telemetry forwarding endpoint and the TLS material used to reach it."""

    model_config = ConfigDict(extra="ignore")

    host: str = ""
    cert: str = ""
    key: str = ""
    ca: str = ""


class Node(BaseModel):
    """
    Persisted node descriptor (`node.json`).

    The descriptor file location defines the node directory; every derived path
    (configs, secrets, logs, monitoring) lives below it. Secrets are loaded next to
    the descriptor at runtime and are never serialized.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(min_length=1, frozen=True)
    plugin_name: str = Field(default="", alias="plugin")
    version: str = ""
    str_parameters: dict[str, str] = Field(default_factory=dict)
    bool_parameters: dict[str, bool] = Field(default_factory=dict)
    collection: Collection = Field(default_factory=Collection)

    _node_file: Path | None = PrivateAttr(default=None)
    _secrets: dict[str, Any] = PrivateAttr(default_factory=dict)

    @field_validator("str_parameters", "bool_parameters", mode="before")
    @classmethod
    def _coerce_parameters(cls, value: Any) -> Any:
        # descriptors written by older tooling carry `null` for empty maps
        if value is None:
            return {}
        return value

    def bind(self, node_file: str | Path) -> Node:
        """Attach the descriptor file this node is read from and written to."""
        self._node_file = Path(node_file).expanduser().absolute()
        return self

    def with_secrets(self, secrets: Mapping[str, Any]) -> Node:
        self._secrets = dict(secrets)
        return self

    @property
    def node_file(self) -> Path:
        if self._node_file is None:
            raise RuntimeError(f"Node '{self.id}' is not bound to a descriptor file")
        return self._node_file

    @property
    def secrets(self) -> dict[str, Any]:
        return dict(self._secrets)

    @property
    def name_prefix(self) -> str:
        """Prefix applied to every container, volume and network owned by this node."""
        return f"{NAME_PREFIX}-{self.id}-"

    def prefixed_name(self, name: str) -> str:
        if name.startswith(self.name_prefix):
            return name
        return f"{self.name_prefix}{name}"

    @property
    def node_directory(self) -> Path:
        return self.node_file.parent

    @property
    def configs_directory(self) -> Path:
        return self.node_directory / CONFIGS_DIRECTORY

    @property
    def secrets_directory(self) -> Path:
        return self.node_directory / SECRETS_DIRECTORY

    @property
    def logs_directory(self) -> Path:
        return self.node_directory / LOGS_DIRECTORY

    @property
    def monitoring_directory(self) -> Path:
        return self.node_directory / MONITORING_DIRECTORY

    def resolve_path(self, path: str | Path) -> Path:
        """Return `path` unchanged if absolute, otherwise relative to the node directory."""
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return self.node_directory / candidate

    def string_parameter(self, name: str, default: str = "") -> str:
        value = self.str_parameters.get(name, "")
        return value if value else default
