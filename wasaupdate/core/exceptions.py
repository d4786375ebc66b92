"""wasaupdate exceptions.

Every error carries a machine-readable ``code`` and a ``details`` dict so the
CLI can render it either as text or as JSON.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional


class WasaupdateError(Exception):
    """Base exception for all wasaupdate errors."""

    def __init__(self, message: str, code: str = "INTERNAL_ERROR", details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a serializable dict."""
        return {
            "error": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ContractError(WasaupdateError):
    """Raised when a policy script does not honour the three-function contract.

    Attributes:
        function: Name of the offending function (or ``None`` for script-wide
            problems such as a syntax error).
        rule: The rule that was violated: ``missing``, ``arity``,
            ``visibility``, ``parameter_name``, ``syntax``, ``sandbox`` or ``load``.
    """

    def __init__(self, message: str, function: Optional[str] = None, rule: str = "missing"):
        super().__init__(message, code="CONTRACT_INVALID", details={"function": function, "rule": rule})
        self.function = function
        self.rule = rule


class ScriptError(WasaupdateError):
    """Raised when a contract function fails or returns an unusable value."""

    def __init__(self, message: str, function: str, raw: Optional[str] = None):
        details: dict[str, Any] = {"function": function}
        if raw is not None:
            details["raw"] = raw
        super().__init__(message, code="SCRIPT_FAILED", details=details)
        self.function = function
        self.raw = raw


class HostError(WasaupdateError):
    """Raised by the ``fetch``/``run`` capabilities exposed to policy scripts."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, code="HOST_CAPABILITY_FAILED", details=details)


class InstallError(WasaupdateError):
    """Base class for installation failures."""

    def __init__(self, message: str, code: str = "INSTALL_FAILED", details: dict | None = None):
        super().__init__(message, code=code, details=details)


class InvalidLocationError(InstallError):
    """Raised when an install location is neither an existing file nor a URL."""

    def __init__(self, location: str):
        super().__init__(
            f"Install location '{location}' is neither an existing file nor a valid URL",
            code="INVALID_LOCATION",
            details={"location": location},
        )
        self.location = location


class InstallIOError(InstallError):
    """Raised when a filesystem or network operation fails during install.

    Attributes:
        operation: Short name of the failed operation (``download``, ``extract``, ...).
        path: The path or URL the operation was acting on.
    """

    def __init__(self, operation: str, path: str | Path, reason: str | BaseException):
        self.operation = operation
        self.path = str(path)
        self.reason = str(reason)
        super().__init__(
            f"{operation} failed for {self.path}: {self.reason}",
            code="INSTALL_IO",
            details={"operation": operation, "path": self.path, "reason": self.reason},
        )


class ProcessError(WasaupdateError):
    """Raised when the post-update command cannot be started."""

    def __init__(self, message: str, command: list[str] | None = None):
        super().__init__(message, code="PROCESS_FAILED", details={"command": command or []})
        self.command = command or []
