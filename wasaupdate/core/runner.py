"""Post-update command execution."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel

from wasaupdate.core.exceptions import ProcessError

logger = logging.getLogger(__name__)


class CommandResult(BaseModel):
    """Result of launching the post-update command."""

    command: List[str]
    pid: int
    background: bool
    returncode: Optional[int] = None
    used_fallback: bool = False


def _spawn(command: List[str], background: bool) -> subprocess.Popen:
    if background:
        # Detached: only the error channel stays attached to ours
        return subprocess.Popen(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=None,
        )
    return subprocess.Popen(command)


def run_after_update(command: List[str], *, background: bool, executable_dir: Path) -> CommandResult:
    """Launch ``command`` once the update is installed.

    The program is looked up on the search path first and, if it cannot be
    found there, once more relative to ``executable_dir``. Attached commands
    are waited for; background commands are left running.
    """
    if not command:
        raise ProcessError("No post-update command given", command=command)

    logger.info("Running post-update command: %s (background=%s)", " ".join(command), background)
    launched = list(command)
    used_fallback = False
    try:
        process = _spawn(launched, background)
    except FileNotFoundError:
        launched = [str(executable_dir / command[0]), *command[1:]]
        used_fallback = True
        logger.debug("%s not found on PATH, retrying as %s", command[0], launched[0])
        try:
            process = _spawn(launched, background)
        except OSError as exc:
            raise ProcessError(f"Failed to run command '{command[0]}': {exc}", command=command) from exc
    except OSError as exc:
        raise ProcessError(f"Failed to run command '{command[0]}': {exc}", command=command) from exc

    returncode = None
    if not background:
        returncode = process.wait()
        logger.info("Post-update command exited with %s", returncode)

    return CommandResult(
        command=launched,
        pid=process.pid,
        background=background,
        returncode=returncode,
        used_fallback=used_fallback,
    )
