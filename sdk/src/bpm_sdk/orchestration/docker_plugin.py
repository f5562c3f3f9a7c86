from __future__ import annotations

from collections.abc import Mapping, Sequence

from bpm_sdk.configuration import SdkSettings
from bpm_sdk.contracts import Container, Parameter, Plugin
from bpm_sdk.contracts.plugin_contracts.parameters import PARAMETER_TYPE_STRING
from bpm_sdk.orchestration.configurator import FileConfigurator
from bpm_sdk.orchestration.lifecycle import (
    DATA_DIRECTORY_PARAMETER,
    DEFAULT_DATA_DIRECTORY,
    ClientFactory,
    DockerLifecycleHandler,
    docker_client_factory,
)
from bpm_sdk.orchestration.monitoring import MONITORING_PACK_PARAMETER
from bpm_sdk.orchestration.upgrader import DockerUpgrader
from bpm_sdk.orchestration.validator import SimpleParameterValidator
from bpm_sdk.runtime.manager import DEFAULT_DOCKER_NETWORK, DOCKER_NETWORK_PARAMETER

DOCKER_PARAMETERS: tuple[Parameter, ...] = (
    Parameter(
        name=DOCKER_NETWORK_PARAMETER,
        type=PARAMETER_TYPE_STRING,
        description=(
            "If set, the node will be spun up in this docker network. "
            "The network will be created automatically if it doesn't exist"
        ),
        default=DEFAULT_DOCKER_NETWORK,
    ),
    Parameter(
        name=DATA_DIRECTORY_PARAMETER,
        type=PARAMETER_TYPE_STRING,
        description="Directory for blockchain data, relative to the node directory unless absolute",
        default=DEFAULT_DATA_DIRECTORY,
    ),
    Parameter(
        name=MONITORING_PACK_PARAMETER,
        type=PARAMETER_TYPE_STRING,
        description="Path to a monitoring pack (.tar.gz). If empty, logs are only written to the console",
    ),
)


def new_docker_plugin(
    name: str,
    version: str,
    description: str,
    parameters: Sequence[Parameter],
    templates: Mapping[str, str],
    containers: Sequence[Container],
    *,
    settings: SdkSettings | None = None,
    client_factory: ClientFactory | None = None,
) -> Plugin:
    """
    Assemble a plugin that runs `containers` with plain docker.

    The SDK's docker parameters are prepended to `parameters`. Identity and testing are
    not wired; assign `identity_creator` / `tester` on the returned plugin to add them.
    """
    settings = settings or SdkSettings()
    factory = client_factory or docker_client_factory(settings)
    all_parameters = DOCKER_PARAMETERS + tuple(parameters)

    return Plugin(
        name=name,
        version=version,
        description=description,
        parameters=all_parameters,
        parameter_validator=SimpleParameterValidator(all_parameters),
        configurator=FileConfigurator(templates, containers=containers),
        lifecycle_handler=DockerLifecycleHandler(
            containers, client_factory=factory, timeouts=settings.timeouts
        ),
        upgrader=DockerUpgrader(containers, client_factory=factory, timeouts=settings.timeouts),
    )
