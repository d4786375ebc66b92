"""Capabilities exposed to policy scripts: ``fetch`` and ``run``."""

from __future__ import annotations

import logging
import subprocess
from typing import Callable, Dict

import httpx

from wasaupdate.core.context import UpdateContext
from wasaupdate.core.exceptions import HostError

logger = logging.getLogger(__name__)


def _execute(argv: list[str]) -> subprocess.CompletedProcess:
    return subprocess.run(argv, capture_output=True, check=False)


class HostCapabilities:
    """Functions injected into the policy script namespace.

    Both capabilities are stateless, so nested or repeated calls are safe.
    """

    def __init__(self, context: UpdateContext):
        self.context = context

    def fetch(self, url: str) -> str:
        """HTTP GET ``url`` and return the body as text."""
        logger.debug("Script fetch %s", url)
        try:
            with self.context.http_client() as client:
                response = client.get(url)
        except httpx.HTTPError as exc:
            raise HostError(f"Failed to fetch URL: {url} ({exc})", details={"url": url}) from exc
        if not response.is_success:
            raise HostError(
                f"Failed to fetch URL: {url} with status: {response.status_code} {response.reason_phrase}",
                details={"url": url, "status": response.status_code},
            )
        return response.text

    def run(self, command_line: str) -> str:
        """Run ``command_line`` (split on whitespace) and return its stdout.

        When the program is not on the search path, it is looked up once more
        relative to the executable directory.
        """
        argv = str(command_line).split()
        if not argv:
            raise HostError("Cannot run an empty command", details={"command": command_line})

        logger.debug("Script run %s", argv)
        try:
            completed = _execute(argv)
        except FileNotFoundError:
            fallback = [str(self.context.executable_dir / argv[0]), *argv[1:]]
            logger.debug("%s not found on PATH, retrying as %s", argv[0], fallback[0])
            try:
                completed = _execute(fallback)
            except OSError as exc:
                raise HostError(
                    f"Failed to execute command '{command_line}': {exc}",
                    details={"command": command_line},
                ) from exc
        except OSError as exc:
            raise HostError(
                f"Failed to execute command '{command_line}': {exc}",
                details={"command": command_line},
            ) from exc

        if completed.returncode != 0:
            raise HostError(
                f"Command '{command_line}' failed with status: {completed.returncode}",
                details={
                    "command": command_line,
                    "returncode": completed.returncode,
                    "stderr": completed.stderr.decode("utf-8", errors="replace").strip(),
                },
            )
        return completed.stdout.decode("utf-8", errors="replace")

    def as_namespace(self) -> Dict[str, Callable[[str], str]]:
        """Names injected into the script globals."""
        return {"fetch": self.fetch, "run": self.run}
