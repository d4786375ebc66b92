"""Artifact installation pipeline.

``Installer.install`` takes a location string returned by the policy script,
fetches it when it is a URL, unpacks it into the executable directory and
flattens single-directory wrappers so the installed layout does not depend on
how the archive was produced.
"""

from __future__ import annotations

import logging
import tempfile
from enum import Enum
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from wasaupdate.core.archive import ArchiveKind, archive_base_name, classify_archive
from wasaupdate.core.context import UpdateContext
from wasaupdate.core.exceptions import InstallIOError, InvalidLocationError
from wasaupdate.core.extractor import extract_tar, extract_zip, place_file
from wasaupdate.core.fetcher import download
from wasaupdate.core.layout import unroll

logger = logging.getLogger(__name__)


class LocationKind(str, Enum):
    """What an install location string refers to."""

    LOCAL_PATH = "local"
    REMOTE_URL = "remote"


def is_valid_url(location: str) -> bool:
    """Return True when ``location`` has both a scheme and a host."""
    try:
        parsed = urlparse(location)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc) and bool(parsed.hostname)


def classify_location(location: str) -> LocationKind:
    """Classify ``location`` once: an existing file wins over URL parsing."""
    if location and Path(location).is_file():
        return LocationKind.LOCAL_PATH
    if is_valid_url(location):
        return LocationKind.REMOTE_URL
    raise InvalidLocationError(location)


class Installer:
    """Install artifacts into the directory of the running executable."""

    def __init__(self, context: Optional[UpdateContext] = None):
        self.context = context or UpdateContext()

    @property
    def target_dir(self) -> Path:
        return self.context.executable_dir

    def install(self, location: str) -> Path:
        """Install the artifact at ``location`` and return the target directory."""
        kind = classify_location(location)
        logger.info("Installing %s (%s) into %s", location, kind.value, self.target_dir)

        if kind is LocationKind.LOCAL_PATH:
            self.install_archive(Path(location))
        else:
            with tempfile.TemporaryDirectory(prefix="wasaupdate-") as tmp:
                artifact = download(location, Path(tmp), self.context)
                self.install_archive(artifact)
        return self.target_dir

    def install_archive(self, path: Path) -> None:
        """Unpack a local artifact according to its archive kind."""
        target = self.target_dir
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise InstallIOError("mkdir", target, exc) from exc

        kind = classify_archive(path.name)
        logger.debug("Artifact %s classified as %s", path.name, kind.value)

        if kind is ArchiveKind.PLAIN_FILE:
            place_file(path, target)
            return

        if kind is ArchiveKind.ZIP:
            extract_zip(path, target)
        else:
            extract_tar(path, target, compressed=kind is ArchiveKind.TAR_GZ)
        unroll(target / archive_base_name(path.name, kind))
