# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from wimpatch.acquire.artifacts import ArtifactAcquirer, safety_marker_path
from wimpatch.core.exceptions import ConfigurationError, InputNotFound, NoPackagesFound


def _downloader(payload=b"msu"):
    dl = MagicMock()

    def download(url, dest):
        Path(dest).write_bytes(payload)
        return Path(dest)

    dl.download.side_effect = download
    return dl


@pytest.mark.unit
class TestArtifactAcquirer:
    def test_no_source_fails_before_touching_disk(self, logger, tmp_path):
        staging = tmp_path / "updates"

        with pytest.raises(ConfigurationError) as ei:
            ArtifactAcquirer(logger, staging, downloader=_downloader()).acquire()

        assert ei.value.code == 2
        assert not staging.exists()

    def test_local_copy(self, logger, tmp_path):
        src = tmp_path / "src" / "windows10.0-kb5005565-x64.msu"
        src.parent.mkdir()
        src.write_bytes(b"payload")
        staging = tmp_path / "updates"

        pkgs = ArtifactAcquirer(logger, staging, downloader=_downloader()).acquire(local_path=src)

        assert pkgs == (staging / src.name,)
        assert pkgs[0].read_bytes() == b"payload"
        assert src.exists()

    def test_local_copy_overwrites(self, logger, tmp_path):
        staging = tmp_path / "updates"
        staging.mkdir()
        (staging / "kb1.msu").write_bytes(b"old")
        src = tmp_path / "kb1.msu"
        src.write_bytes(b"new")

        ArtifactAcquirer(logger, staging, downloader=_downloader()).acquire(local_path=src)
        assert (staging / "kb1.msu").read_bytes() == b"new"

    def test_missing_local_path(self, logger, tmp_path):
        with pytest.raises(InputNotFound):
            ArtifactAcquirer(logger, tmp_path / "updates", downloader=_downloader()).acquire(
                local_path=tmp_path / "nope.msu"
            )

    def test_download_lands_in_staging(self, logger, tmp_path):
        staging = tmp_path / "updates"
        dl = _downloader()

        pkgs = ArtifactAcquirer(logger, staging, downloader=dl).acquire(url="https://h.test/path/kb9.msu?x=1")

        dl.download.assert_called_once_with("https://h.test/path/kb9.msu?x=1", staging / "kb9.msu")
        assert pkgs == (staging / "kb9.msu",)

    def test_both_sources_and_leftovers_are_staged_in_name_order(self, logger, tmp_path):
        staging = tmp_path / "updates"
        staging.mkdir()
        (staging / "KB0-from-last-run.msu").write_bytes(b"old")
        (staging / "notes.txt").write_text("ignored")
        src = tmp_path / "kb2.msu"
        src.write_bytes(b"local")

        pkgs = ArtifactAcquirer(logger, staging, downloader=_downloader()).acquire(
            url="https://h.test/kb1.MSU", local_path=src
        )

        assert [p.name for p in pkgs] == ["KB0-from-last-run.msu", "kb1.MSU", "kb2.msu"]

    def test_nothing_staged(self, logger, tmp_path):
        dl = MagicMock()
        dl.download.return_value = tmp_path / "updates" / "page.html"

        with pytest.raises(NoPackagesFound) as ei:
            ArtifactAcquirer(logger, tmp_path / "updates", downloader=dl).acquire(url="https://h.test/page.html")
        assert ei.value.code == 4

    def test_custom_extensions(self, logger, tmp_path):
        staging = tmp_path / "updates"
        src = tmp_path / "ssu.cab"
        src.write_bytes(b"cab")

        pkgs = ArtifactAcquirer(logger, staging, downloader=_downloader(), extensions=("cab", ".msu")).acquire(
            local_path=src
        )
        assert [p.name for p in pkgs] == ["ssu.cab"]

    def test_marker_removal_failure_is_logged(self, logger, tmp_path, monkeypatch, caplog):
        src = tmp_path / "kb1.msu"
        src.write_bytes(b"x")
        original_unlink = Path.unlink

        def unlink(self, *a, **k):
            if str(self).endswith(":Zone.Identifier"):
                raise PermissionError(13, "Access is denied")
            return original_unlink(self, *a, **k)

        monkeypatch.setattr(Path, "unlink", unlink)

        pkgs = ArtifactAcquirer(logger, tmp_path / "updates", downloader=_downloader()).acquire(local_path=src)

        assert len(pkgs) == 1
        assert "Could not clear download marker" in caplog.text

    def test_marker_path(self):
        assert str(safety_marker_path(Path("/u/kb1.msu"))) == "/u/kb1.msu:Zone.Identifier"
