"""Core modules for wasaupdate's version resolution and installation pipeline."""

from .archive import ArchiveKind, archive_base_name, classify_archive
from .context import UpdateContext
from .installer import Installer, LocationKind, classify_location
from .layout import unroll
from .policy import ScriptContract, ScriptPolicy, StaticPolicy, VersionPolicy, load_script
from .updater import UpdatePlan, UpdateReport, Updater
from .version import SemanticVersion

__all__ = [
    "ArchiveKind",
    "archive_base_name",
    "classify_archive",
    "UpdateContext",
    "Installer",
    "LocationKind",
    "classify_location",
    "unroll",
    "ScriptContract",
    "ScriptPolicy",
    "StaticPolicy",
    "VersionPolicy",
    "load_script",
    "UpdatePlan",
    "UpdateReport",
    "Updater",
    "SemanticVersion",
]
