"""Version policy backed by plain Python callables."""

from __future__ import annotations

from typing import Callable

from wasaupdate.core.exceptions import ScriptError
from wasaupdate.core.policy.base import (
    CURRENT_VERSION_FN,
    INSTALL_VERSION_FN,
    LATEST_VERSION_FN,
    VersionPolicy,
    ensure_text,
    parse_version,
)
from wasaupdate.core.version import SemanticVersion


class StaticPolicy(VersionPolicy):
    """Policy whose three operations are supplied as in-process callables.

    Used to embed wasaupdate in another program without a policy script, and
    in tests.
    """

    def __init__(
        self,
        current: Callable[[], str],
        latest: Callable[[], str],
        install: Callable[[str], str],
    ):
        self._current = current
        self._latest = latest
        self._install = install

    @classmethod
    def fixed(cls, current: str, latest: str, location: str) -> "StaticPolicy":
        """Policy returning constant values."""
        return cls(lambda: current, lambda: latest, lambda version: location)

    def _call(self, function: str, func: Callable, *args) -> str:
        try:
            result = func(*args)
        except ScriptError:
            raise
        except Exception as exc:
            raise ScriptError(f"Function '{function}' failed: {exc}", function=function) from exc
        return ensure_text(function, result)

    def current_version(self) -> SemanticVersion:
        return parse_version(CURRENT_VERSION_FN, self._call(CURRENT_VERSION_FN, self._current))

    def latest_version(self) -> SemanticVersion:
        return parse_version(LATEST_VERSION_FN, self._call(LATEST_VERSION_FN, self._latest))

    def install_version(self, version: str) -> str:
        return self._call(INSTALL_VERSION_FN, self._install, version)
