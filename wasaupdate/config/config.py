"""
Configuration loading and models for wasaupdate.

The configuration file is optional. When present it is a YAML document named
``wasaupdate.yaml`` (or the file given with ``--config``) with the sections
``script``, ``logging``, ``network``, ``install`` and ``post_update``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "wasaupdate.yaml"
DEFAULT_SCRIPT_NAME = "wasaupdate.py"


def _known(cls: type, data: dict[str, Any]) -> dict[str, Any]:
    """Filter ``data`` down to the fields declared on dataclass ``cls``."""
    names = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - names)
    if unknown:
        logger.debug("Ignoring unknown %s keys: %s", cls.__name__, ", ".join(unknown))
    return {k: v for k, v in data.items() if k in names}


@dataclass
class ScriptConfig:
    """Where the policy script lives."""

    path: str = DEFAULT_SCRIPT_NAME


@dataclass
class LoggingConfig:
    """Configuration for logging.

    Attributes:
        level: Log verbosity level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        path: Optional log file destination path.
        reset_on_start: If True, delete log file on startup. If False, add separator.
    """

    level: str = "WARNING"
    path: Optional[str] = None
    reset_on_start: bool = True


@dataclass
class NetworkConfig:
    """HTTP settings shared by downloads and the script ``fetch`` capability.

    Attributes:
        timeout_seconds: Connect/read/write timeout applied to every request.
        chunk_size: Size of the buffer used when streaming downloads to disk.
        user_agent: User-Agent header sent with every request.
    """

    timeout_seconds: float = 30.0
    chunk_size: int = 64 * 1024
    user_agent: str = "wasaupdate"


@dataclass
class InstallConfig:
    """Installation target settings.

    ``target_dir`` overrides the directory of the running executable.
    """

    target_dir: Optional[str] = None


@dataclass
class PostUpdateConfig:
    """Command launched after a successful update."""

    command: list[str] = field(default_factory=list)
    background: bool = False


@dataclass
class WasaupdateConfig:
    """Global configuration."""

    script: ScriptConfig = field(default_factory=ScriptConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    install: InstallConfig = field(default_factory=InstallConfig)
    post_update: PostUpdateConfig = field(default_factory=PostUpdateConfig)
    config_root: Path = field(default_factory=Path.cwd)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WasaupdateConfig:
        """Create a config object from a dictionary."""
        script_data = data.get("script") or {}
        # Shorthand: ``script: path/to/policy.py``
        if isinstance(script_data, str):
            script_data = {"path": script_data}

        post_update_data = dict(data.get("post_update") or {})
        command = post_update_data.get("command")
        if isinstance(command, str):
            post_update_data["command"] = command.split()

        return cls(
            script=ScriptConfig(**_known(ScriptConfig, script_data)),
            logging=LoggingConfig(**_known(LoggingConfig, data.get("logging") or {})),
            network=NetworkConfig(**_known(NetworkConfig, data.get("network") or {})),
            install=InstallConfig(**_known(InstallConfig, data.get("install") or {})),
            post_update=PostUpdateConfig(**_known(PostUpdateConfig, post_update_data)),
        )

    def resolve_script_path(self) -> Path:
        """Return the script path, relative paths being taken from the config root."""
        path = Path(self.script.path)
        if path.is_absolute():
            return path
        return self.config_root / path


def get_config_path(root_path: Path, config_file: str | None = None) -> Path:
    """Locate the configuration file for ``root_path``."""
    if config_file:
        candidate = Path(config_file)
        return candidate if candidate.is_absolute() else root_path / candidate
    return root_path / CONFIG_FILE_NAME


def load_config(root_path: Path, config_file: str | None = None) -> WasaupdateConfig:
    """Load configuration from a YAML file.

    A missing file yields the defaults. A malformed file is logged and the
    defaults are used as well.
    """
    config_path = get_config_path(root_path, config_file=config_file)

    if not config_path.is_file():
        logger.debug("No config file found at %s, using defaults.", config_path)
        return WasaupdateConfig(config_root=root_path)

    logger.info("Loading config from %s", config_path)
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise TypeError(f"expected a mapping at the top level, got {type(data).__name__}")

        config = WasaupdateConfig.from_dict(data)
        config.config_root = config_path.parent
        return config
    except (OSError, yaml.YAMLError, TypeError, ValueError) as e:
        logger.error("Failed to load config file: %s", e)
        return WasaupdateConfig(config_root=root_path)

