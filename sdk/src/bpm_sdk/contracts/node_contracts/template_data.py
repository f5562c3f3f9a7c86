from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .node import Node


@dataclass(frozen=True, slots=True)
class TemplateData:
    """
    Input for template rendering.

    `plugin_data` carries transient, plugin-specific inputs (e.g. the container list)
    explicitly instead of stashing them on the node, so nothing here is ever persisted.
    """

    node: Node
    plugin_data: Mapping[str, Any] = field(default_factory=dict)

    def as_context(self) -> dict[str, Any]:
        return {"node": self.node, "plugin_data": dict(self.plugin_data)}
