from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

from bpm_sdk.configuration import dump_meta, load_node, save_node
from bpm_sdk.contracts import Node, Plugin

logger = logging.getLogger("bpm_sdk.api")

META_COMMAND = "meta"


class UnsupportedCapabilityError(RuntimeError):
    pass


class UnknownCommandError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class PhaseResult:
    """Outcome of one command: text for stdout (if any) and pass/fail."""

    command: str
    output: str | None = None
    passed: bool = True


_Handler = Callable[[Plugin, Node], PhaseResult]
_C = TypeVar("_C")


def run_command(plugin: Plugin, command: str, node_file: str | Path | None = None) -> PhaseResult:
    """
    Run one plugin command.

    `meta` takes no node; every other command loads the descriptor at `node_file`.
    Errors propagate unchanged.
    """
    if command == META_COMMAND:
        return PhaseResult(command=command, output=dump_meta(plugin.meta()))

    handler = _HANDLERS.get(command)
    if handler is None:
        raise UnknownCommandError(f"unknown command '{command}'")
    if node_file is None:
        raise ValueError(f"command '{command}' requires a node file")

    node = load_node(node_file)
    logger.debug("Running '%s' for node '%s' with plugin %s %s", command, node.id, plugin.name, plugin.version)
    return handler(plugin, node)


def _validate_parameters(plugin: Plugin, node: Node) -> PhaseResult:
    plugin.parameter_validator.validate_parameters(node)
    return PhaseResult(command="validate-parameters")


def _create_identity(plugin: Plugin, node: Node) -> PhaseResult:
    _require(plugin.identity_creator, plugin, "identity", "create-identity").create_identity(node)
    return PhaseResult(command="create-identity")


def _remove_identity(plugin: Plugin, node: Node) -> PhaseResult:
    _require(plugin.identity_creator, plugin, "identity", "remove-identity").remove_identity(node)
    return PhaseResult(command="remove-identity")


def _create_configurations(plugin: Plugin, node: Node) -> PhaseResult:
    plugin.configurator.configure(node)
    return PhaseResult(command="create-configurations")


def _remove_config(plugin: Plugin, node: Node) -> PhaseResult:
    plugin.configurator.remove_config(node)
    return PhaseResult(command="remove-config")


def _start(plugin: Plugin, node: Node) -> PhaseResult:
    plugin.lifecycle_handler.start(node)
    _write_version(plugin, node)
    return PhaseResult(command="start")


def _stop(plugin: Plugin, node: Node) -> PhaseResult:
    plugin.lifecycle_handler.stop(node)
    return PhaseResult(command="stop")


def _status(plugin: Plugin, node: Node) -> PhaseResult:
    return PhaseResult(command="status", output=plugin.lifecycle_handler.status(node))


def _remove_data(plugin: Plugin, node: Node) -> PhaseResult:
    plugin.lifecycle_handler.remove_data(node)
    return PhaseResult(command="remove-data")


def _remove_runtime(plugin: Plugin, node: Node) -> PhaseResult:
    plugin.lifecycle_handler.remove_runtime(node)
    return PhaseResult(command="remove-runtime")


def _upgrade(plugin: Plugin, node: Node) -> PhaseResult:
    _require(plugin.upgrader, plugin, "upgrade", "upgrade").upgrade(node)
    _write_version(plugin, node)
    return PhaseResult(command="upgrade")


def _test(plugin: Plugin, node: Node) -> PhaseResult:
    passed = _require(plugin.tester, plugin, "test", "test").test(node)
    return PhaseResult(command="test", passed=bool(passed))


_HANDLERS: dict[str, _Handler] = {
    "validate-parameters": _validate_parameters,
    "create-identity": _create_identity,
    "create-configurations": _create_configurations,
    "start": _start,
    "stop": _stop,
    "status": _status,
    "remove-config": _remove_config,
    "remove-data": _remove_data,
    "remove-runtime": _remove_runtime,
    "remove-identity": _remove_identity,
    "upgrade": _upgrade,
    "test": _test,
}


def _require(capability: _C | None, plugin: Plugin, tag: str, command: str) -> _C:
    if capability is None:
        raise UnsupportedCapabilityError(
            f"plugin '{plugin.name}' does not support '{tag}', cannot run '{command}'"
        )
    return capability


def _write_version(plugin: Plugin, node: Node) -> None:
    if node.version == plugin.version:
        return
    logger.debug("Updating node version from '%s' to '%s'", node.version, plugin.version)
    node.version = plugin.version
    save_node(node)
