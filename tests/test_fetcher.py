"""Tests for streaming downloads and download file naming."""

import httpx
import pytest

from wasaupdate.core.context import UpdateContext
from wasaupdate.core.fetcher import (
    DEFAULT_FILE_NAME,
    download,
    filename_from_content_disposition,
    filename_from_url,
    resolve_download_name,
)


class TestNaming:
    @pytest.mark.parametrize(
        "header, expected",
        [
            ('attachment; filename="tool-1.0.0.zip"', "tool-1.0.0.zip"),
            ("attachment; filename=tool.tar.gz", "tool.tar.gz"),
            ("attachment; filename*=UTF-8''t%C3%B6ol.zip", "töol.zip"),
            ('attachment; filename="../../etc/passwd"', "passwd"),
            ("inline", None),
            (None, None),
        ],
    )
    def test_content_disposition(self, header, expected):
        assert filename_from_content_disposition(header) == expected

    def test_url_last_segment(self):
        assert filename_from_url("https://example.com/a/tool%20v2.zip?x=1") == "tool v2.zip"
        assert filename_from_url("https://example.com/") is None

    def test_header_wins_over_url(self):
        headers = httpx.Headers({"content-disposition": 'attachment; filename="real.zip"'})
        assert resolve_download_name("https://example.com/get/other.tar", headers) == "real.zip"

    def test_fallback_name(self):
        assert resolve_download_name("https://example.com/", {}) == DEFAULT_FILE_NAME


class TestDownload:
    def test_streams_body_and_reports_progress(self, tmp_path):
        body = b"x" * 10_000
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["user-agent"] == "wasaupdate-test"
            return httpx.Response(200, content=body)

        context = UpdateContext(
            chunk_size=4096,
            user_agent="wasaupdate-test",
            progress=lambda done, total: seen.append((done, total)),
            transport=httpx.MockTransport(handler),
        )

        target = download("https://example.com/files/blob.bin", tmp_path, context)

        assert target == tmp_path / "blob.bin"
        assert target.read_bytes() == body
        assert seen[-1] == (len(body), len(body))
        assert [done for done, _ in seen] == sorted(done for done, _ in seen)

    def test_failing_progress_observer_is_ignored(self, tmp_path):
        def explode(done, total):
            raise RuntimeError("observer bug")

        context = UpdateContext(
            progress=explode,
            transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"data")),
        )

        target = download("https://example.com/tool", tmp_path, context)

        assert target.read_bytes() == b"data"

    def test_redirects_are_followed(self, tmp_path):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/latest":
                return httpx.Response(302, headers={"Location": "https://cdn.example.com/tool-9.zip"})
            return httpx.Response(200, content=b"zip")

        context = UpdateContext(transport=httpx.MockTransport(handler))

        target = download("https://example.com/latest", tmp_path, context)

        # Named after the requested URL, not the redirect target
        assert target.name == "latest"
        assert target.read_bytes() == b"zip"
