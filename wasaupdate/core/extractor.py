"""Unpack artifacts into the installation directory."""

from __future__ import annotations

import logging
import os
import shutil
import tarfile
import zipfile
from pathlib import Path, PurePosixPath
from typing import Iterable, Optional

from wasaupdate.core.exceptions import InstallIOError
from wasaupdate.core.layout import remove_existing

logger = logging.getLogger(__name__)

COPY_BUFFER_SIZE = 64 * 1024


def _enclosed_path(name: str, dest: Path) -> Optional[Path]:
    """Return ``dest / name`` unless ``name`` would escape ``dest``."""
    normalized = PurePosixPath(name.replace("\\", "/"))
    if normalized.is_absolute() or not normalized.parts:
        return None
    parts = [part for part in normalized.parts if part not in ("", ".")]
    if not parts or ".." in parts or ":" in parts[0]:
        return None
    return dest.joinpath(*parts)


def _clear_file(target: Path) -> None:
    """Unlink an existing file so a running binary can be replaced."""
    if target.is_symlink() or target.is_file():
        try:
            target.unlink()
        except OSError as exc:
            raise InstallIOError("remove", target, exc) from exc


def extract_zip(archive_path: Path, dest: Path) -> list[Path]:
    """Extract a ZIP archive entry by entry into ``dest``.

    Parent directories are created on demand and, on POSIX systems, the
    permission bits stored in the archive are restored. Returns the paths
    written, in archive order.
    """
    written: list[Path] = []
    directory_modes: list[tuple[Path, int]] = []
    try:
        with zipfile.ZipFile(archive_path) as archive:
            for info in archive.infolist():
                target = _enclosed_path(info.filename, dest)
                if target is None:
                    logger.warning("Skipping unsafe archive entry %s", info.filename)
                    continue

                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    logger.debug("Created directory %s", target)
                else:
                    target.parent.mkdir(parents=True, exist_ok=True)
                    _clear_file(target)
                    with archive.open(info) as src, open(target, "wb") as dst:
                        shutil.copyfileobj(src, dst, COPY_BUFFER_SIZE)
                    logger.debug("Extracted %s (%d bytes)", target, info.file_size)

                mode = (info.external_attr >> 16) & 0o7777
                if mode and os.name == "posix":
                    if info.is_dir():
                        directory_modes.append((target, mode))
                    else:
                        os.chmod(target, mode)
                written.append(target)

            # Deepest first, once every child is written
            for directory, mode in sorted(directory_modes, key=lambda item: len(item[0].parts), reverse=True):
                os.chmod(directory, mode)
    except zipfile.BadZipFile as exc:
        raise InstallIOError("extract", archive_path, exc) from exc
    except OSError as exc:
        raise InstallIOError("extract", archive_path, exc) from exc

    logger.info("Extracted %d entries from %s", len(written), archive_path.name)
    return written


def _clear_member_targets(dest: Path, members: Iterable[tarfile.TarInfo]) -> None:
    for member in members:
        if member.isdir():
            continue
        target = _enclosed_path(member.name, dest)
        if target is not None:
            _clear_file(target)


def extract_tar(archive_path: Path, dest: Path, compressed: bool = False) -> None:
    """Extract a (optionally gzip-compressed) tarball into ``dest``.

    The archive's internal paths are kept as they are. Members that would land
    outside ``dest`` are refused by the ``tar`` extraction filter.
    """
    mode = "r:gz" if compressed else "r:"
    try:
        with tarfile.open(archive_path, mode) as archive:
            members = archive.getmembers()
            _clear_member_targets(dest, members)
            archive.extractall(dest, members=members, filter="tar")
    except tarfile.TarError as exc:
        raise InstallIOError("extract", archive_path, exc) from exc
    except OSError as exc:
        raise InstallIOError("extract", archive_path, exc) from exc

    logger.info("Extracted %d members from %s", len(members), archive_path.name)


def place_file(source: Path, dest: Path) -> Path:
    """Copy ``source`` into ``dest`` under its own name, replacing what is there."""
    target = dest / source.name
    try:
        if target.exists() and target.resolve() == source.resolve():
            logger.info("%s is already in place", target)
            return target
    except OSError as exc:
        raise InstallIOError("resolve", target, exc) from exc

    remove_existing(target)
    try:
        shutil.copy2(source, target)
    except OSError as exc:
        raise InstallIOError("copy", source, exc) from exc
    logger.info("Copied %s to %s", source.name, dest)
    return target
