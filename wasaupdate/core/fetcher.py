"""Download remote artifacts to local files."""

from __future__ import annotations

import logging
from email.message import Message
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import unquote, urlparse

import httpx

from wasaupdate.core.context import UpdateContext
from wasaupdate.core.exceptions import InstallIOError

logger = logging.getLogger(__name__)

DEFAULT_FILE_NAME = "download"


def _safe_name(name: str | None) -> Optional[str]:
    """Reduce ``name`` to a bare file name, rejecting empty or dot-only names."""
    if not name:
        return None
    candidate = PurePosixPath(name.replace("\\", "/")).name.strip()
    if candidate in ("", ".", ".."):
        return None
    return candidate


def filename_from_content_disposition(header: str | None) -> Optional[str]:
    """Extract the file name from a ``Content-Disposition`` header value.

    Both ``filename`` and the RFC 2231/5987 ``filename*`` forms are understood.
    """
    if not header:
        return None
    message = Message()
    message["content-disposition"] = header
    return _safe_name(message.get_filename())


def filename_from_url(url: str) -> Optional[str]:
    """Return the last path segment of ``url``, percent-decoded."""
    path = urlparse(url).path
    return _safe_name(unquote(path.rsplit("/", 1)[-1]))


def resolve_download_name(url: str, headers: httpx.Headers | dict) -> str:
    """Choose the local file name for a download."""
    return (
        filename_from_content_disposition(headers.get("content-disposition"))
        or filename_from_url(url)
        or DEFAULT_FILE_NAME
    )


def _notify(context: UpdateContext, downloaded: int, total: Optional[int]) -> None:
    if context.progress is None:
        return
    try:
        context.progress(downloaded, total)
    except Exception as exc:  # observer failures never abort a download
        logger.debug("Progress observer failed: %s", exc)


def download(url: str, dest_dir: Path, context: UpdateContext) -> Path:
    """Stream ``url`` into ``dest_dir`` and return the written file.

    The body is written chunk by chunk so large artifacts never sit in memory.
    Non-2xx responses and transport errors raise ``InstallIOError``.
    """
    logger.info("Downloading %s", url)
    try:
        with context.http_client() as client:
            with client.stream("GET", url) as response:
                if not response.is_success:
                    raise InstallIOError(
                        "download", url, f"HTTP {response.status_code} {response.reason_phrase}"
                    )
                target = Path(dest_dir) / resolve_download_name(url, response.headers)
                total_header = response.headers.get("content-length")
                total = int(total_header) if total_header and total_header.isdigit() else None
                downloaded = 0
                with open(target, "wb") as f:
                    for chunk in response.iter_bytes(chunk_size=context.chunk_size):
                        f.write(chunk)
                        downloaded += len(chunk)
                        _notify(context, downloaded, total)
    except httpx.HTTPError as exc:
        raise InstallIOError("download", url, exc) from exc
    except OSError as exc:
        raise InstallIOError("write", dest_dir, exc) from exc

    logger.info("Downloaded %d bytes to %s", downloaded, target)
    return target
