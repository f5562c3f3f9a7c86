"""
Render Jinja2 templates against a node into files on disk.

Rendering is create-only: an existing file is never overwritten, which lets users
edit generated configuration by hand without losing their changes on the next run.

Templates see two names, `node` (the Node descriptor) and `plugin_data` (transient
plugin inputs). For comma separated output the global `not_last` is available:

    {% for peer in plugin_data.peers %}"{{ peer }}"{% if not_last(loop.index0, plugin_data.peers) %},{% endif %}{% endfor %}
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import jinja2

from bpm_sdk.contracts import Node, TemplateData

logger = logging.getLogger("bpm_sdk.templating")


class TemplateRenderError(ValueError):
    pass


def not_last(index: int, sequence: Sequence[Any]) -> bool:
    return index != len(sequence) - 1


def build_environment() -> jinja2.Environment:
    environment = jinja2.Environment(
        undefined=jinja2.StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )
    environment.globals["not_last"] = not_last
    return environment


def render_string(template: str, data: TemplateData, *, name: str = "<template>") -> str:
    try:
        compiled = build_environment().from_string(template)
        return compiled.render(data.as_context())
    except jinja2.TemplateError as exc:
        raise TemplateRenderError(f"Failed to render {name}: {exc}") from exc


def render_if_absent(relative_path: str | Path, template: str, data: TemplateData) -> bool:
    """Render `template` to `relative_path` under the node directory unless the file exists."""
    output_path = data.node.resolve_path(relative_path)
    if output_path.exists():
        logger.info("File '%s' already exists, skipping creation", output_path)
        return False

    content = render_string(template, data, name=str(output_path))

    logger.info("Writing file '%s'", output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(content, encoding="utf-8")
    return True


def render_all(templates: Mapping[str, str], data: TemplateData) -> list[Path]:
    """
    Render every `path -> template` entry, stopping at the first failure.

    Files rendered before a failure stay on disk; re-running skips them.
    Returns the paths that were written by this call.
    """
    written: list[Path] = []
    for relative_path, template in templates.items():
        if render_if_absent(relative_path, template, data):
            written.append(data.node.resolve_path(relative_path))
    return written


def remove_if_present(relative_path: str | Path, node: Node) -> bool:
    path = node.resolve_path(relative_path)
    if not path.exists():
        logger.info("Cannot find file '%s', skipping removal", path)
        return False

    logger.info("Removing file '%s'", path)
    path.unlink()
    return True
