from __future__ import annotations

from typing import Literal, Protocol, runtime_checkable

from bpm_sdk.contracts.node_contracts.node import Node

NodeStatus = Literal["running", "stopped", "incomplete"]


@runtime_checkable
class ParameterValidator(Protocol):
    def validate_parameters(self, node: Node) -> None:
        """Raise ParameterValidationError if the node's parameters are unusable."""
        ...


@runtime_checkable
class IdentityCreator(Protocol):
    """
    Optional capability: node identity (keys, certificates).

    Implementations must not replace an identity that already exists on disk, so that
    users can supply their own.
    """

    def create_identity(self, node: Node) -> None: ...

    def remove_identity(self, node: Node) -> None: ...


@runtime_checkable
class Configurator(Protocol):
    def configure(self, node: Node) -> None:
        """Create the configuration files of the blockchain client."""
        ...

    def remove_config(self, node: Node) -> None:
        """Delete the generated configuration."""
        ...


@runtime_checkable
class LifecycleHandler(Protocol):
    def start(self, node: Node) -> None: ...

    def stop(self, node: Node) -> None: ...

    def status(self, node: Node) -> NodeStatus: ...

    def remove_data(self, node: Node) -> None: ...

    def remove_runtime(self, node: Node) -> None: ...


@runtime_checkable
class Upgrader(Protocol):
    """Optional capability: move a node to a newer plugin version."""

    def upgrade(self, node: Node) -> None: ...


@runtime_checkable
class Tester(Protocol):
    """Optional capability: run a test suite against a running node."""

    def test(self, node: Node) -> bool: ...
