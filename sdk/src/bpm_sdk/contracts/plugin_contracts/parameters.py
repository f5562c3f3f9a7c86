from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

ParameterType = Literal["string", "bool"]

PARAMETER_TYPE_STRING: ParameterType = "string"
PARAMETER_TYPE_BOOL: ParameterType = "bool"


@dataclass(frozen=True, slots=True)
class Parameter:
    """
    One configurable plugin parameter.

    `default` only applies to string parameters. A mandatory parameter has no default:
    the user must supply it.
    """

    name: str
    type: ParameterType
    description: str = ""
    mandatory: bool = False
    default: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("parameter name must be a non-empty string")
        if self.type not in (PARAMETER_TYPE_STRING, PARAMETER_TYPE_BOOL):
            raise ValueError(f"parameter {self.name!r}: unsupported type {self.type!r}")
        if self.mandatory and self.default:
            raise ValueError(f"parameter {self.name!r}: mandatory parameters cannot have a default")

    def as_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "name": self.name,
            "description": self.description,
            "mandatory": self.mandatory,
            "default": self.default,
        }
