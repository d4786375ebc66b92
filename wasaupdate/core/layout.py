"""Filesystem layout helpers: replacement and wrapper-directory unrolling."""

from __future__ import annotations

import logging
import shutil
import uuid
from pathlib import Path

from wasaupdate.core.exceptions import InstallIOError

logger = logging.getLogger(__name__)


def remove_existing(path: Path) -> None:
    """Remove whatever occupies ``path``: a file first, a directory tree otherwise."""
    if not path.exists() and not path.is_symlink():
        return
    try:
        path.unlink()
        return
    except (IsADirectoryError, PermissionError) as exc:
        # Directories raise IsADirectoryError on Linux, PermissionError on Windows/macOS
        if not path.is_dir() or path.is_symlink():
            raise InstallIOError("remove", path, exc) from exc
    except OSError as exc:
        raise InstallIOError("remove", path, exc) from exc
    try:
        shutil.rmtree(path)
    except OSError as exc:
        raise InstallIOError("remove", path, exc) from exc


def unroll(path: Path) -> None:
    """Move the children of the wrapper directory ``path`` up one level.

    Nothing happens when ``path`` does not exist or is not a directory, which
    covers archives that are already flat. Existing entries in the parent with
    the same name as a child are replaced. The wrapper is removed afterwards.
    """
    path = Path(path)
    if not path.is_dir() or path.is_symlink():
        logger.debug("Nothing to unroll at %s", path)
        return

    parent = path.parent
    # Park the wrapper under a hidden name so a child may share its name (tool/tool)
    staging = parent / f".{path.name}.unroll-{uuid.uuid4().hex[:8]}"
    try:
        path.rename(staging)
    except OSError as exc:
        raise InstallIOError("rename", path, exc) from exc

    logger.info("Unrolling %s into %s", path, parent)
    for child in sorted(staging.iterdir()):
        destination = parent / child.name
        remove_existing(destination)
        try:
            shutil.move(str(child), str(destination))
        except OSError as exc:
            raise InstallIOError("move", child, exc) from exc
        logger.debug("Moved %s -> %s", child.name, destination)

    try:
        shutil.rmtree(staging)
    except OSError as exc:
        raise InstallIOError("remove", staging, exc) from exc
