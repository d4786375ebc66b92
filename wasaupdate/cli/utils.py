import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from wasaupdate.config import WasaupdateConfig


@dataclass(frozen=True)
class Console:
    """Output settings for one CLI invocation."""

    quiet: bool = False
    as_json: bool = False

    @property
    def shows_text(self) -> bool:
        return not (self.quiet or self.as_json)

    def info(self, message: str) -> None:
        if self.shows_text:
            print(message)

    def error(self, message: str) -> None:
        print(f"❌ {message}", file=sys.stderr)

    def emit(self, payload: Any) -> None:
        print(json.dumps(payload, indent=2))

    def progress(self, downloaded: int, total: Optional[int]) -> None:
        """Download progress on stderr; silent when the size is unknown."""
        if not self.shows_text or not total:
            return
        percent = min(100, downloaded * 100 // total)
        end = "\n" if downloaded >= total else ""
        print(f"\r⬇️  Downloading... {percent}%", end=end, file=sys.stderr, flush=True)


def _clean_path_argument(value: Optional[Path]) -> Optional[Path]:
    """Return a sanitized path if the CLI argument was provided."""
    if value is None:
        return None
    return Path(str(value).strip('"\''))


def resolve_script_argument(script_arg: Optional[Path], config: WasaupdateConfig) -> Path:
    """Resolve the policy script, preferring an explicit ``--script``."""
    explicit = _clean_path_argument(script_arg)
    if explicit:
        return explicit
    return config.resolve_script_path()
