"""Configuration system for wasaupdate."""

from .config import (
    WasaupdateConfig,
    ScriptConfig,
    LoggingConfig,
    NetworkConfig,
    InstallConfig,
    PostUpdateConfig,
    load_config,
)

__all__ = [
    "WasaupdateConfig",
    "ScriptConfig",
    "LoggingConfig",
    "NetworkConfig",
    "InstallConfig",
    "PostUpdateConfig",
    "load_config",
]
