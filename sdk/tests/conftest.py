from __future__ import annotations

import json
from pathlib import Path

import pytest

from bpm_sdk.contracts import Node


@pytest.fixture
def node(tmp_path: Path) -> Node:
    return Node(
        id="node1",
        plugin="test",
        version="0.1.0",
        str_parameters={"docker-network": "bpm", "data-dir": "data", "monitoring-pack": ""},
        bool_parameters={},
    ).bind(tmp_path / "node1" / "node.json")


@pytest.fixture
def node_file(tmp_path: Path) -> Path:
    path = tmp_path / "node1" / "node.json"
    path.parent.mkdir(parents=True)
    path.write_text(
        json.dumps(
            {
                "id": "node1",
                "plugin": "test",
                "version": "0.1.0",
                "str_parameters": {"docker-network": "bpm", "data-dir": "data", "monitoring-pack": ""},
                "bool_parameters": {},
            }
        ),
        encoding="utf-8",
    )
    return path
