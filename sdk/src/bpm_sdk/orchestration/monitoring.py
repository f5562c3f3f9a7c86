"""
Log forwarding via a filebeat sidecar.

Monitoring runs in one of two modes, selected by the `monitoring-pack` parameter:

    - unset: the base configuration plus a console output
    - set: the pack (a .tar.gz) is extracted into the monitoring directory and its
      `config.tpl` fragment is appended to the base configuration

Only containers declared with `collect_logs=True` are tagged as user logs; all other
log lines are dropped by filebeat.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from bpm_sdk.contracts import Container, Mount, Node, TemplateData
from bpm_sdk.runtime.filesystem import extract_tar_gz, make_directory
from bpm_sdk.templating import render_string

logger = logging.getLogger("bpm_sdk.monitoring")

MONITORING_PACK_PARAMETER = "monitoring-pack"
MONITORING_PACK_TEMPLATE = "config.tpl"

FILEBEAT_CONTAINER_IMAGE = "docker.elastic.co/beats/filebeat:7.4.1"
FILEBEAT_CONTAINER_NAME = "filebeat"
FILEBEAT_CONFIG_FILE = "filebeat.yml"

DOCKER_CONTAINERS_DIRECTORY = "/var/lib/docker/containers"
DOCKER_SOCKET = "/var/run/docker.sock"

FILEBEAT_BASE_CONFIG_TEMPLATE = """filebeat.inputs:
- type: container
  paths:
  - '/var/lib/docker/containers/*/*.log'
fields:
  node:
    project: development
    protocol_type: {{ node.plugin_name | upper }}
    user_id: bpm
    xid: {{ node.id }}
fields_under_root: true
processors:
- add_docker_metadata: null
{%- if plugin_data.containers %}
- else.add_fields:
    fields.log_type: system
    target: ''
  if.or:
  {%- for container in plugin_data.containers %}
    {%- if container.collect_logs %}
  - equals.container.name: {{ node.name_prefix }}{{ container.name }}
    {%- endif %}
  {%- endfor %}
  then.add_fields:
    fields.log_type: user
    target: ''
{%- endif %}
- drop_event.when.not.equals.log_type: user
"""

FILEBEAT_CONSOLE_CONFIG_TEMPLATE = """output:
  console:
    pretty: true
"""


def filebeat_config_path(node: Node) -> Path:
    return node.monitoring_directory / FILEBEAT_CONFIG_FILE


def compose_monitoring_template(node: Node) -> str:
    """Return the combined filebeat template for the node's monitoring mode."""
    pack = node.string_parameter(MONITORING_PACK_PARAMETER)
    if not pack:
        logger.info("Forwarding of monitoring is disabled. Specify `--monitoring-pack` to enable it.")
        return FILEBEAT_BASE_CONFIG_TEMPLATE + "\n" + FILEBEAT_CONSOLE_CONFIG_TEMPLATE

    logger.info("Enabling forwarding of monitoring data.")
    members = extract_tar_gz(pack, node.monitoring_directory)

    # a fragment left behind by an earlier pack must not be picked up
    if MONITORING_PACK_TEMPLATE not in members:
        raise FileNotFoundError(f"monitoring pack '{pack}' does not contain {MONITORING_PACK_TEMPLATE}")
    fragment_path = node.monitoring_directory / MONITORING_PACK_TEMPLATE
    return FILEBEAT_BASE_CONFIG_TEMPLATE + "\n" + fragment_path.read_text(encoding="utf-8")


def render_monitoring_config(node: Node, containers: Sequence[Container]) -> Path:
    """
    Write the filebeat configuration into the monitoring directory.

    The file is owned by the SDK and rewritten on every call, unlike user configuration.
    """
    make_directory(node.monitoring_directory)
    template = compose_monitoring_template(node)

    output_path = filebeat_config_path(node)
    content = render_string(
        template,
        TemplateData(node=node, plugin_data={"containers": tuple(containers)}),
        name=str(output_path),
    )

    logger.info("Writing file '%s'", output_path)
    output_path.write_text(content, encoding="utf-8")
    return output_path


def filebeat_container(node: Node) -> Container:
    return Container(
        name=FILEBEAT_CONTAINER_NAME,
        image=FILEBEAT_CONTAINER_IMAGE,
        cmd=("-e", "-strict.perms=false"),
        mounts=(
            Mount(type="bind", source=str(filebeat_config_path(node)), target="/usr/share/filebeat/filebeat.yml"),
            Mount(type="bind", source=DOCKER_CONTAINERS_DIRECTORY, target=DOCKER_CONTAINERS_DIRECTORY),
            Mount(type="bind", source=str(node.monitoring_directory), target="/monitoring"),
            Mount(type="bind", source=DOCKER_SOCKET, target=DOCKER_SOCKET),
        ),
        user="root",
    )
