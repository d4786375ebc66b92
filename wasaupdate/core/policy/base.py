from abc import ABC, abstractmethod

from wasaupdate.core.exceptions import ScriptError
from wasaupdate.core.version import SemanticVersion

CURRENT_VERSION_FN = "current_version"
LATEST_VERSION_FN = "latest_version"
INSTALL_VERSION_FN = "install_version"


def ensure_text(function: str, result: object) -> str:
    """Return the value produced by ``function`` as text or raise ``ScriptError``."""
    if isinstance(result, str):
        return result
    if isinstance(result, bytes):
        try:
            return result.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ScriptError(f"Function '{function}' returned bytes that are not UTF-8", function=function) from exc
    raise ScriptError(
        f"Function '{function}' returned {type(result).__name__}, expected a string",
        function=function,
        raw=repr(result),
    )


def parse_version(function: str, raw: str) -> SemanticVersion:
    """Parse the text returned by ``function`` or raise ``ScriptError``."""
    try:
        return SemanticVersion.parse(raw)
    except ValueError as exc:
        label = function.replace("_version", "")
        raise ScriptError(
            f"Failed to parse '{raw}' as {label} version: {exc}",
            function=function,
            raw=raw,
        ) from exc


class VersionPolicy(ABC):
    """Decides what is installed, what is available and where to get it."""

    @abstractmethod
    def current_version(self) -> SemanticVersion:
        """Return the version currently installed."""
        pass

    @abstractmethod
    def latest_version(self) -> SemanticVersion:
        """Return the newest version available."""
        pass

    @abstractmethod
    def install_version(self, version: str) -> str:
        """Return the location (path or URL) of the artifact for ``version``."""
        pass
