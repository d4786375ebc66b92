"""Extension-based archive classification."""

from __future__ import annotations

from enum import Enum
from pathlib import PurePath, PurePosixPath


class ArchiveKind(str, Enum):
    """How an artifact must be unpacked."""

    ZIP = "zip"
    TAR = "tar"
    TAR_GZ = "tar.gz"
    PLAIN_FILE = "plain"


# Suffixes stripped from the file name to find the wrapper directory name
_BASE_NAME_SUFFIXES = {
    ArchiveKind.ZIP: (".zip",),
    ArchiveKind.TAR: (".tar",),
    ArchiveKind.TAR_GZ: (".tar.gz", ".tgz", ".gz"),
    ArchiveKind.PLAIN_FILE: (),
}


def _final_segment(name: str | PurePath) -> str:
    if isinstance(name, PurePath):
        return name.name
    # URLs and Windows paths both end with the artifact name
    return PurePosixPath(name.replace("\\", "/")).name


def classify_archive(name: str | PurePath) -> ArchiveKind:
    """Classify an artifact by the suffix of its final path segment.

    Matching is case-sensitive: ``.zip`` is ZIP, ``.tar`` is TAR, ``.gz`` and
    ``.tgz`` are TAR_GZ and anything else is a plain file.
    """
    segment = _final_segment(name)
    if segment.endswith(".zip"):
        return ArchiveKind.ZIP
    if segment.endswith(".tar"):
        return ArchiveKind.TAR
    if segment.endswith((".gz", ".tgz")):
        return ArchiveKind.TAR_GZ
    return ArchiveKind.PLAIN_FILE


def archive_base_name(name: str | PurePath, kind: ArchiveKind | None = None) -> str:
    """Return the artifact name without its archive suffix.

    ``tool-1.2.0.tar.gz`` gives ``tool-1.2.0``; plain files keep their name.
    """
    segment = _final_segment(name)
    kind = kind or classify_archive(segment)
    for suffix in _BASE_NAME_SUFFIXES[kind]:
        if segment.endswith(suffix) and len(segment) > len(suffix):
            return segment[: -len(suffix)]
    return segment
