from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from packaging.version import Version

from .capabilities import (
    Configurator,
    IdentityCreator,
    LifecycleHandler,
    ParameterValidator,
    Tester,
    Upgrader,
)
from .parameters import Parameter

PROTOCOL_VERSION = "1.1.0"

Capability = Literal["test", "upgrade", "identity"]

SUPPORTS_TEST: Capability = "test"
SUPPORTS_UPGRADE: Capability = "upgrade"
SUPPORTS_IDENTITY: Capability = "identity"


@dataclass(frozen=True, slots=True)
class MetaInfo:
    """Plugin self-description returned by the `meta` command."""

    name: str
    version: str
    description: str
    protocol_version: str = PROTOCOL_VERSION
    parameters: tuple[Parameter, ...] = ()
    supported: tuple[Capability, ...] = ()

    def supports(self, capability: str) -> bool:
        return capability in self.supported

    def protocol_version_at_least(self, version: str) -> bool:
        return Version(self.protocol_version) >= Version(version)

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "protocol_version": self.protocol_version,
            "parameters": [parameter.as_dict() for parameter in self.parameters],
            "supported": list(self.supported),
        }


@dataclass(slots=True)
class Plugin:
    """
    A plugin assembled from one implementation per capability.

    Required capabilities are always wired; optional ones (identity, upgrade, test)
    may be None. Any slot can be replaced independently after construction.
    """

    name: str
    version: str
    description: str
    parameter_validator: ParameterValidator
    configurator: Configurator
    lifecycle_handler: LifecycleHandler
    parameters: Sequence[Parameter] = field(default_factory=tuple)
    identity_creator: IdentityCreator | None = None
    upgrader: Upgrader | None = None
    tester: Tester | None = None
    protocol_version: str = PROTOCOL_VERSION

    def meta(self) -> MetaInfo:
        # derived from the current wiring on every call
        supported: list[Capability] = []
        if self.tester is not None:
            supported.append(SUPPORTS_TEST)
        if self.upgrader is not None:
            supported.append(SUPPORTS_UPGRADE)
        if self.identity_creator is not None:
            supported.append(SUPPORTS_IDENTITY)

        return MetaInfo(
            name=self.name,
            version=self.version,
            description=self.description,
            protocol_version=self.protocol_version,
            parameters=tuple(self.parameters),
            supported=tuple(supported),
        )
