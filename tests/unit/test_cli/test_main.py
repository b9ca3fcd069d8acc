# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import pytest
from fakes.fake_executor import FakeExecutor
from wimpatch import __main__ as cli


@pytest.fixture
def workdir(tmp_path):
    (tmp_path / "drivers").mkdir()
    (tmp_path / "kb5005565.msu").write_bytes(b"msu")
    return tmp_path


@pytest.fixture
def fake(monkeypatch):
    fake = FakeExecutor()
    monkeypatch.setattr(cli, "DismExecutor", lambda logger, **kw: fake)
    return fake


def _main(*argv):
    with pytest.raises(SystemExit) as ei:
        cli.main(list(argv))
    return ei.value.code


@pytest.mark.unit
class TestMain:
    def test_single_index_success(self, workdir, fake, capsys):
        rc = _main("--workdir", str(workdir), "install.wim", "--update-path", "kb5005565.msu", "--no-progress")

        assert rc == 0
        assert [c[2] for c in fake.calls if c[0] == "mount"] == [6, 1, 2]
        out = capsys.readouterr().out
        assert "install indexes committed: 6" in out
        assert "boot indexes committed:    1, 2" in out
        assert "Servicing install image: Index 6 (1/1) (0%)" in out
        assert "Servicing boot image: complete" in out
        assert sorted(p.name for p in workdir.iterdir()) == ["drivers", "kb5005565.msu", "updates"]

    def test_driver_failure_exit_code(self, workdir, fake):
        fake.driver_rcs[("install.wim", 3)] = [2, 2]

        rc = _main("--workdir", str(workdir), "install.wim", "--all-indexes", "--update-path", "kb5005565.msu", "--no-progress")

        assert rc == 11
        assert [c[2] for c in fake.calls if c[0] == "mount"] == [1, 2, 3]

    def test_missing_update_source(self, tmp_path, fake):
        rc = _main("--workdir", str(tmp_path), "install.wim")

        assert rc == 2
        assert fake.calls == []
        assert list(tmp_path.iterdir()) == []

    def test_missing_local_package(self, workdir, fake):
        assert _main("--workdir", str(workdir), "install.wim", "--update-path", "nope.msu", "--no-progress") == 2
        assert fake.calls == []

    def test_dry_run_executes_nothing(self, workdir, capsys):
        rc = _main("--workdir", str(workdir / "svc"), "install.wim", "--update-path", str(workdir / "kb5005565.msu"), "--dry-run", "--no-progress")

        assert rc == 0
        assert "install indexes committed: 6" in capsys.readouterr().out
        assert sorted(p.name for p in (workdir / "svc").iterdir()) == ["updates"]

    def test_interrupt(self, workdir, monkeypatch):
        def interrupted(args, logger):
            raise KeyboardInterrupt

        monkeypatch.setattr(cli, "run", interrupted)
        assert _main("--workdir", str(workdir), "install.wim", "--update-path", "kb5005565.msu") == 130

    def test_unexpected_error(self, workdir, monkeypatch):
        def broken(args, logger):
            raise RuntimeError("boom")

        monkeypatch.setattr(cli, "run", broken)
        assert _main("--workdir", str(workdir), "install.wim", "--update-path", "kb5005565.msu") == 1
