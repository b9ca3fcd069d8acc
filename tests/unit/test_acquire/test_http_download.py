# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests
from wimpatch.acquire.http_download import HTTPDownloader, filename_from_url
from wimpatch.acquire.progress_reporters import (
    LoggingProgressReporter,
    NoopProgressReporter,
    create_progress_reporter,
)
from wimpatch.core.exceptions import DownloadError


def _client(chunks=(b"abc", b"", b"def"), headers=None, status_error=None):
    response = MagicMock()
    response.headers = headers if headers is not None else {"content-length": "6"}
    response.iter_content.return_value = list(chunks)
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    client = MagicMock()
    client.get.return_value.__enter__.return_value = response
    client.get.return_value.__exit__.return_value = False
    return client, response


@pytest.mark.unit
class TestFilenameFromUrl:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://catalog.example.test/d/msdownload/update/kb5005565-x64.msu", "kb5005565-x64.msu"),
            ("https://h.test/a/b/windows10.0-kb1%20x64.msu?sig=abc#frag", "windows10.0-kb1 x64.msu"),
            ("http://h.test/pkg.msu/", "pkg.msu"),
        ],
    )
    def test_last_segment(self, url, expected):
        assert filename_from_url(url) == expected

    @pytest.mark.parametrize("url", ["https://h.test/", "https://h.test", "https://h.test/a/.."])
    def test_no_name(self, url):
        with pytest.raises(DownloadError):
            filename_from_url(url)


@pytest.mark.unit
class TestHTTPDownloader:
    def test_streams_to_destination(self, tmp_path):
        client, _ = _client()
        dest = tmp_path / "kb1.msu"

        out = HTTPDownloader(MagicMock(), show_progress=False, http_client=client, timeout=10).download(
            "https://h.test/kb1.msu", dest
        )

        assert out == dest
        assert dest.read_bytes() == b"abcdef"
        assert not (tmp_path / "kb1.msu.part").exists()
        client.get.assert_called_once_with("https://h.test/kb1.msu", stream=True, timeout=10)

    def test_http_error_becomes_download_error(self, tmp_path):
        err = requests.HTTPError("404 Client Error")
        err.response = MagicMock(status_code=404)
        client, _ = _client(status_error=err)
        dest = tmp_path / "kb1.msu"

        with pytest.raises(DownloadError) as ei:
            HTTPDownloader(MagicMock(), show_progress=False, http_client=client).download("https://h.test/kb1.msu", dest)

        assert ei.value.code == 3
        assert ei.value.context["status"] == 404
        assert ei.value.cause is err
        assert not dest.exists()

    def test_connection_error_leaves_no_partial_file(self, tmp_path):
        client, response = _client()
        response.iter_content.side_effect = requests.ConnectionError("reset by peer")
        dest = tmp_path / "kb1.msu"

        with pytest.raises(DownloadError):
            HTTPDownloader(MagicMock(), show_progress=False, http_client=client).download("https://h.test/kb1.msu", dest)

        assert list(tmp_path.iterdir()) == []

    def test_unwritable_destination(self, tmp_path):
        client, _ = _client()
        dest = tmp_path / "missing-dir" / "kb1.msu"

        with pytest.raises(DownloadError) as ei:
            HTTPDownloader(MagicMock(), show_progress=False, http_client=client).download("https://h.test/kb1.msu", dest)
        assert "Could not write" in ei.value.msg

    def test_invalid_timeout(self):
        with pytest.raises(ValueError):
            HTTPDownloader(MagicMock(), timeout=0)


@pytest.mark.unit
class TestProgressReporters:
    def test_factory(self):
        assert isinstance(create_progress_reporter(MagicMock(), show_progress=False), NoopProgressReporter)

    def test_logging_reporter_throttles(self):
        logger = MagicMock()
        rep = LoggingProgressReporter(logger, log_every_bytes=10)
        rep.start("kb1.msu", 40)
        for _ in range(8):
            rep.update(5)
        rep.finish()

        progress_lines = [c for c in logger.info.call_args_list if c.args[0].startswith("Download progress")]
        assert len(progress_lines) == 4
        assert logger.info.call_args.args[0] == "Download completed: %s"
