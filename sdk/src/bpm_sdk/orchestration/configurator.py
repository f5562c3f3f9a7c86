from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from bpm_sdk.contracts import Container, Node, TemplateData
from bpm_sdk.runtime.filesystem import make_directory, remove_tree
from bpm_sdk.templating import render_all

logger = logging.getLogger("bpm_sdk.configurator")


class FileConfigurator:
    """
    Render configuration files from templates, once each.

    `templates` maps a path relative to the node directory (usually below `configs/`)
    to a Jinja2 template. Templates receive the node and, as `plugin_data.containers`,
    the declared containers.
    """

    def __init__(
        self,
        templates: Mapping[str, str],
        *,
        containers: Sequence[Container] = (),
        plugin_data: Mapping[str, Any] | None = None,
    ) -> None:
        self._templates = dict(templates)
        self._containers = tuple(containers)
        self._plugin_data = dict(plugin_data or {})

    def configure(self, node: Node) -> None:
        make_directory(node.configs_directory)

        plugin_data = {"containers": self._containers, **self._plugin_data}
        written = render_all(self._templates, TemplateData(node=node, plugin_data=plugin_data))
        logger.debug("Rendered %d of %d configuration files", len(written), len(self._templates))

    def remove_config(self, node: Node) -> None:
        remove_tree(node.configs_directory)
