"""Tests for archive classification and base-name derivation."""

from pathlib import Path

import pytest

from wasaupdate.core.archive import ArchiveKind, archive_base_name, classify_archive


@pytest.mark.parametrize(
    "name, kind",
    [
        ("tool-1.0.0.zip", ArchiveKind.ZIP),
        ("tool-1.0.0.tar", ArchiveKind.TAR),
        ("tool-1.0.0.tar.gz", ArchiveKind.TAR_GZ),
        ("tool-1.0.0.tgz", ArchiveKind.TAR_GZ),
        ("tool.gz", ArchiveKind.TAR_GZ),
        ("tool", ArchiveKind.PLAIN_FILE),
        ("tool.exe", ArchiveKind.PLAIN_FILE),
        ("TOOL.ZIP", ArchiveKind.PLAIN_FILE),
        ("https://example.com/releases/tool-2.0.0.zip", ArchiveKind.ZIP),
        ("C:\\downloads\\tool.tar", ArchiveKind.TAR),
    ],
)
def test_classify_archive(name, kind):
    assert classify_archive(name) is kind


def test_classify_uses_final_segment_only():
    assert classify_archive("/srv/archive.zip/tool") is ArchiveKind.PLAIN_FILE
    assert classify_archive(Path("/srv/archive.zip/tool.tar")) is ArchiveKind.TAR


@pytest.mark.parametrize(
    "name, base",
    [
        ("tool-1.2.0.zip", "tool-1.2.0"),
        ("tool-1.2.0.tar", "tool-1.2.0"),
        ("tool-1.2.0.tar.gz", "tool-1.2.0"),
        ("tool-1.2.0.tgz", "tool-1.2.0"),
        ("tool.gz", "tool"),
        ("tool", "tool"),
        ("https://example.com/a/tool-2.0.0.tar.gz", "tool-2.0.0"),
    ],
)
def test_archive_base_name(name, base):
    assert archive_base_name(name) == base


def test_archive_base_name_keeps_bare_suffix():
    assert archive_base_name(".zip") == ".zip"
