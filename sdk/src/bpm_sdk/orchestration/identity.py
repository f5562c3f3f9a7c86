from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from pathlib import Path

from bpm_sdk.contracts import Node
from bpm_sdk.runtime.filesystem import make_directory, remove_tree

logger = logging.getLogger("bpm_sdk.identity")

IdentityGenerator = Callable[[Node], str]


class FileIdentityCreator:
    """
    Write identity files (keys, certificates) into the node's secrets directory.

    Each generator is only called when its file is missing, so a manually supplied
    identity is kept.
    """

    def __init__(self, generators: Mapping[str, IdentityGenerator]) -> None:
        self._generators = dict(generators)

    def create_identity(self, node: Node) -> None:
        secrets_directory = make_directory(node.secrets_directory)

        for filename, generate in self._generators.items():
            path = secrets_directory / filename
            if path.exists():
                logger.info("Identity file '%s' already exists, skipping creation", path)
                continue

            logger.info("Creating identity file '%s'", path)
            _write_private(path, generate(node))

    def remove_identity(self, node: Node) -> None:
        remove_tree(node.secrets_directory)


def _write_private(path: Path, content: str) -> None:
    # owner-only from the moment the file exists
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as handle:
        handle.write(content)
