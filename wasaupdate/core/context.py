"""Per-run settings shared by the installer, the fetcher and host capabilities."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import Callable, Optional

import httpx

from wasaupdate import __version__
from wasaupdate.config import WasaupdateConfig

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, Optional[int]], None]


def current_executable() -> Path:
    """Return the path of the running executable.

    Frozen builds (PyInstaller and friends) report themselves through
    ``sys.executable``; otherwise the entry script in ``sys.argv[0]`` is used.
    """
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve()
    entry = sys.argv[0] if sys.argv and sys.argv[0] else sys.executable
    return Path(entry).resolve()


@dataclass
class UpdateContext:
    """Explicit configuration threaded through one update run.

    Attributes:
        timeout_seconds: Timeout applied to every HTTP request.
        chunk_size: Streaming buffer size for downloads.
        user_agent: User-Agent header for HTTP requests.
        target_dir: Overrides the executable directory when set.
        progress: Optional observer notified with ``(downloaded, total)``.
        transport: Optional httpx transport (tests use ``httpx.MockTransport``).
    """

    timeout_seconds: float = 30.0
    chunk_size: int = 64 * 1024
    user_agent: str = f"wasaupdate/{__version__}"
    target_dir: Optional[Path] = None
    progress: Optional[ProgressCallback] = None
    transport: Optional[httpx.BaseTransport] = field(default=None, repr=False)

    @classmethod
    def from_config(cls, config: WasaupdateConfig, progress: Optional[ProgressCallback] = None) -> UpdateContext:
        target_dir = None
        if config.install.target_dir:
            target_dir = Path(config.install.target_dir)
            if not target_dir.is_absolute():
                target_dir = config.config_root / target_dir
        return cls(
            timeout_seconds=config.network.timeout_seconds,
            chunk_size=config.network.chunk_size,
            user_agent=config.network.user_agent,
            target_dir=target_dir,
            progress=progress,
        )

    @cached_property
    def executable_dir(self) -> Path:
        """Directory receiving installed files; resolved once per run."""
        if self.target_dir is not None:
            directory = Path(self.target_dir).resolve()
        else:
            directory = current_executable().parent
        logger.debug("Executable directory resolved to %s", directory)
        return directory

    def http_client(self) -> httpx.Client:
        """Return a new HTTP client configured for this run."""
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout_seconds),
            headers={"User-Agent": self.user_agent},
            follow_redirects=True,
            transport=self.transport,
        )
