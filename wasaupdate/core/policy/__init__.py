"""Version policies: where version information and artifacts come from."""

from .base import VersionPolicy, parse_version
from .script import (
    ScriptContract,
    ScriptPolicy,
    current_version,
    install_version,
    latest_version,
    load_script,
)
from .static import StaticPolicy

__all__ = [
    "VersionPolicy",
    "parse_version",
    "ScriptContract",
    "ScriptPolicy",
    "StaticPolicy",
    "load_script",
    "current_version",
    "latest_version",
    "install_version",
]
