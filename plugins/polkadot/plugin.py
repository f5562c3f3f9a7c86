from __future__ import annotations

import secrets

from bpm_sdk.configuration import SdkSettings
from bpm_sdk.contracts import Container, LifecycleHandler, Mount, Node, Parameter, Plugin, Port
from bpm_sdk.contracts.plugin_contracts.parameters import PARAMETER_TYPE_STRING
from bpm_sdk.orchestration import (
    FileIdentityCreator,
    ParameterValidationError,
    SimpleParameterValidator,
    new_docker_plugin,
)
from bpm_sdk.orchestration.lifecycle import ClientFactory

PLUGIN_NAME = "polkadot"
PLUGIN_VERSION = "1.0.0"
PLUGIN_DESCRIPTION = "A polkadot plugin"

POLKADOT_IMAGE = "docker.io/parity/polkadot:v0.9.42"
SUBTYPES = ("watcher", "validator")

NODE_KEY_FILE = "node-key"
COMMAND_FILE = "configs/polkadot.cmd"

# one argument per line
POLKADOT_CMD_TEMPLATE = """--base-path
/data
--name
{{ node.id }}
--node-key
{{ node.secrets["node-key"] | trim }}
--port
30333
--rpc-port
9933
--rpc-external
--rpc-cors
all
{%- if node.str_parameters["subtype"] == "validator" %}
--validator
{%- endif %}
"""

PARAMETERS = (
    Parameter(
        name="subtype",
        type=PARAMETER_TYPE_STRING,
        description="The type of node. Must be either `watcher` or `validator`",
        default="watcher",
    ),
)

CONTAINERS = (
    Container(
        name="polkadot",
        image=POLKADOT_IMAGE,
        cmd_file=COMMAND_FILE,
        mounts=(Mount(type="volume", source="polkadot-data", target="/data"),),
        ports=(
            Port(container_port="30333", host_port="30333", host_ip="0.0.0.0"),
            Port(container_port="9933", host_port="9933", host_ip="127.0.0.1"),
        ),
        collect_logs=True,
    ),
)


def generate_node_key(node: Node) -> str:
    """Return a random ed25519 secret seed as hex, the format `--node-key` expects."""
    return secrets.token_hex(32) + "\n"


class PolkadotParameterValidator(SimpleParameterValidator):
    def validate_parameters(self, node: Node) -> None:
        super().validate_parameters(node)

        subtype = node.str_parameters.get("subtype", "")
        if subtype not in SUBTYPES:
            raise ParameterValidationError(
                f"the parameter 'subtype' must be one of {', '.join(SUBTYPES)}, got '{subtype}'"
            )


class PolkadotTester:
    """Passes when the node reports `running`."""

    def __init__(self, lifecycle_handler: LifecycleHandler) -> None:
        self._lifecycle_handler = lifecycle_handler

    def test(self, node: Node) -> bool:
        return self._lifecycle_handler.status(node) == "running"


def build_plugin(
    *,
    settings: SdkSettings | None = None,
    client_factory: ClientFactory | None = None,
) -> Plugin:
    plugin = new_docker_plugin(
        PLUGIN_NAME,
        PLUGIN_VERSION,
        PLUGIN_DESCRIPTION,
        PARAMETERS,
        {COMMAND_FILE: POLKADOT_CMD_TEMPLATE},
        CONTAINERS,
        settings=settings,
        client_factory=client_factory,
    )
    plugin.parameter_validator = PolkadotParameterValidator(plugin.parameters)
    plugin.identity_creator = FileIdentityCreator({NODE_KEY_FILE: generate_node_key})
    plugin.tester = PolkadotTester(plugin.lifecycle_handler)
    return plugin
