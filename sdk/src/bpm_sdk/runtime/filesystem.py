from __future__ import annotations

import logging
import shutil
import tarfile
from pathlib import Path, PurePosixPath

logger = logging.getLogger("bpm_sdk.filesystem")


def make_directory(base_dir: str | Path, *sub_dirs: str) -> Path:
    """Create `base_dir/sub_dirs...` (with parents) if missing and return it."""
    path = Path(base_dir).expanduser().joinpath(*sub_dirs)
    path.mkdir(parents=True, exist_ok=True)
    return path


def remove_tree(path: Path) -> None:
    if not path.exists():
        logger.info("Cannot find directory '%s', skipping removal", path)
        return
    logger.info("Removing directory '%s'", path)
    shutil.rmtree(path)


def extract_tar_gz(archive: str | Path, destination: Path) -> list[str]:
    """
    Extract a gzip-compressed tarball into `destination`, refusing unsafe members.

    Returns the archive's member paths, normalised (`./config.tpl` -> `config.tpl`).
    """
    destination.mkdir(parents=True, exist_ok=True)
    with tarfile.open(Path(archive).expanduser(), mode="r:gz") as handle:
        handle.extractall(destination, filter="data")
        return [PurePosixPath(name).as_posix() for name in handle.getnames()]
