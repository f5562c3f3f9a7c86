from __future__ import annotations

from collections.abc import Sequence

from bpm_sdk.contracts import Node, Parameter
from bpm_sdk.contracts.plugin_contracts.parameters import PARAMETER_TYPE_BOOL, PARAMETER_TYPE_STRING


class ParameterValidationError(ValueError):
    pass


class SimpleParameterValidator:
    """
    Check that every declared parameter is present on the node.

    The orchestrator fills in defaults when it writes the descriptor, so a missing key
    means the descriptor is incomplete. An empty string is accepted only for optional
    parameters without a default.
    """

    def __init__(self, parameters: Sequence[Parameter]) -> None:
        self._parameters = tuple(parameters)

    def validate_parameters(self, node: Node) -> None:
        for parameter in self._parameters:
            if parameter.type == PARAMETER_TYPE_BOOL:
                if parameter.name not in node.bool_parameters:
                    raise ParameterValidationError(f"the parameter '{parameter.name}' is missing")

            elif parameter.type == PARAMETER_TYPE_STRING:
                if parameter.name not in node.str_parameters:
                    raise ParameterValidationError(f"the parameter '{parameter.name}' is missing")

                if node.str_parameters[parameter.name] == "":
                    if parameter.mandatory:
                        raise ParameterValidationError(
                            f"the mandatory parameter '{parameter.name}' is empty"
                        )
                    if parameter.default:
                        raise ParameterValidationError(
                            f"the parameter '{parameter.name}' is empty but it should have a default"
                        )
