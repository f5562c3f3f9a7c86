from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from bpm_sdk.contracts import MetaInfo, Node

_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")
_ENV_SETTINGS_PATH = "BPM_SDK_SETTINGS"

logger = logging.getLogger("bpm_sdk.configuration")


class ConfigError(ValueError):
    pass


class PhaseTimeouts(BaseModel):
    """Time budget (seconds) for all runtime calls within one lifecycle phase."""

    model_config = ConfigDict(extra="forbid")

    start: float = Field(default=180.0, gt=0)
    stop: float = Field(default=120.0, gt=0)
    status: float = Field(default=60.0, gt=0)
    remove_data: float = Field(default=120.0, gt=0)
    remove_runtime: float = Field(default=240.0, gt=0)
    upgrade: float = Field(default=300.0, gt=0)


class SdkSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    docker_base_url: str | None = None
    timeouts: PhaseTimeouts = Field(default_factory=PhaseTimeouts)


def load_yaml(path: str | Path) -> dict[str, Any]:
    with Path(path).open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    if not isinstance(payload, dict):
        raise ConfigError(f"YAML root must be a mapping: {path}")
    return payload


def load_settings(path: str | Path | None = None) -> SdkSettings:
    """
    Load SDK settings.

    Uses `path` if given, else the file named by BPM_SDK_SETTINGS, else defaults.
    """
    if path is None:
        env_value = os.environ.get(_ENV_SETTINGS_PATH)
        if not env_value:
            return SdkSettings()
        path = Path(env_value).expanduser()

    payload = resolve_env_vars(load_yaml(path))
    try:
        return SdkSettings.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(_format_validation_error("settings", exc)) from exc


def resolve_env_vars(payload: Any) -> Any:
    return _resolve_env_vars(payload, path="$")


def _resolve_env_vars(payload: Any, *, path: str) -> Any:
    if isinstance(payload, Mapping):
        return {
            str(key): _resolve_env_vars(value, path=f"{path}.{key}")
            for key, value in payload.items()
        }
    if isinstance(payload, list):
        return [
            _resolve_env_vars(value, path=f"{path}[{index}]") for index, value in enumerate(payload)
        ]
    if isinstance(payload, str):
        return _substitute_env(payload, path=path)
    return payload


def _substitute_env(value: str, *, path: str) -> str:
    def replace(match: re.Match[str]) -> str:
        key = match.group(1)
        env_value = os.environ.get(key)
        if env_value is None:
            raise ConfigError(f"Missing environment variable '{key}' at {path}")
        return env_value

    return _ENV_VAR_PATTERN.sub(replace, value)


def load_node(node_file: str | Path) -> Node:
    """Read a node descriptor and the secrets stored next to it."""
    path = Path(node_file).expanduser()
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"node file {path} is not valid JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise ConfigError(f"node file {path} must contain a JSON object")

    try:
        node = Node.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(_format_validation_error("node", exc)) from exc

    node.bind(path)
    return node.with_secrets(_load_secrets(node.secrets_directory))


def save_node(node: Node) -> None:
    node.secrets_directory.mkdir(parents=True, exist_ok=True)
    node.configs_directory.mkdir(parents=True, exist_ok=True)

    payload = node.model_dump(mode="json", by_alias=True)
    with node.node_file.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2)
        handle.write("\n")
    logger.debug("Saved node file '%s'", node.node_file)


def dump_meta(meta: MetaInfo) -> str:
    return yaml.safe_dump(meta.as_dict(), sort_keys=False)


def _load_secrets(secrets_dir: Path) -> dict[str, Any]:
    secrets: dict[str, Any] = {}
    if not secrets_dir.is_dir():
        return secrets

    for entry in sorted(secrets_dir.iterdir()):
        if not entry.is_file():
            continue
        content = entry.read_bytes()
        # json secrets are parsed so templates can reference individual fields
        if entry.suffix == ".json":
            try:
                secrets[entry.name] = json.loads(content.decode("utf-8"))
            except (UnicodeDecodeError, json.JSONDecodeError) as exc:
                raise ConfigError(f"secret file {entry} is not valid JSON: {exc}") from exc
        else:
            # binary material (DER certificates, raw keys) must not break loading
            secrets[entry.name] = content.decode("utf-8", errors="surrogateescape")
    return secrets


def _format_validation_error(prefix: str, exc: ValidationError) -> str:
    details: list[str] = []
    for error in exc.errors(include_url=False):
        loc = ".".join(str(part) for part in error["loc"])
        details.append(f"{prefix}.{loc}: {error['msg']}")
    return "; ".join(details)
