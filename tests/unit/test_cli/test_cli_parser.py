# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import json
import logging

import pytest
from wimpatch.cli.args import build_parser, parse_args_with_config, validate_args
from wimpatch.core.exceptions import ConfigurationError, InputNotFound

LOG = logging.getLogger("wimpatch_tests.cli")


@pytest.fixture
def workdir(tmp_path):
    (tmp_path / "drivers").mkdir()
    return tmp_path


def _parse(workdir, *extra):
    args, conf, _logger = parse_args_with_config(["--workdir", str(workdir), *extra], logger=LOG)
    return args, conf


@pytest.mark.unit
class TestParser:
    def test_defaults(self, workdir):
        args, conf = _parse(workdir, "install.wim", "--update-path", "kb.msu")

        assert conf == {}
        assert args.install_wim == "install.wim"
        assert args.index == 6
        assert args.max_install_indexes == 11
        assert args.boot_wim == "./Downloads/boot.wim"
        assert args.drivers == "./drivers"
        assert args.verify is False
        assert args.all_indexes is False
        assert args.dism == "dism"

    def test_all_flags(self, workdir):
        args, _ = _parse(
            workdir,
            "C:/img/install.wim",
            "--all-indexes",
            "--max-install-indexes", "4",
            "--detect-indexes",
            "--update-url", "https://h.test/kb.msu",
            "--staging-dir", "pkgs",
            "--verify",
            "--command-timeout", "600",
            "--no-progress",
        )
        assert args.all_indexes and args.detect_indexes and args.verify and args.no_progress
        assert args.max_install_indexes == 4
        assert args.command_timeout == 600.0
        assert args.staging_dir == "pkgs"

    def test_help_mentions_config_example(self):
        assert "install_wim:" in build_parser().format_help()


@pytest.mark.unit
class TestValidation:
    def test_no_update_source_wins_over_missing_drivers(self, tmp_path):
        with pytest.raises(ConfigurationError) as ei:
            _parse(tmp_path, "install.wim")
        assert "update" in ei.value.msg
        assert ei.value.code == 2

    def test_missing_install_image(self, workdir):
        with pytest.raises(ConfigurationError):
            _parse(workdir, "--update-path", "kb.msu")

    def test_url_scheme(self, workdir):
        with pytest.raises(ConfigurationError):
            _parse(workdir, "install.wim", "--update-url", "ftp://h.test/kb.msu")

    def test_detect_requires_all(self, workdir):
        with pytest.raises(ConfigurationError):
            _parse(workdir, "install.wim", "--update-path", "kb.msu", "--detect-indexes")

    def test_index_range(self, workdir):
        with pytest.raises(ConfigurationError):
            _parse(workdir, "install.wim", "--update-path", "kb.msu", "--index", "0")

    def test_missing_driver_dir(self, tmp_path):
        with pytest.raises(InputNotFound) as ei:
            _parse(tmp_path, "install.wim", "--update-path", "kb.msu")
        assert ei.value.context["drivers"].endswith("drivers")

    def test_dry_run_skips_driver_check(self, tmp_path):
        args, _ = _parse(tmp_path, "install.wim", "--update-path", "kb.msu", "--dry-run")
        assert args.dry_run

    def test_validate_without_path_checks(self, tmp_path):
        args = build_parser().parse_args(["install.wim", "--update-path", "kb.msu", "--drivers", str(tmp_path / "x")])
        validate_args(args, check_paths=False)


@pytest.mark.unit
class TestConfigFiles:
    def test_config_supplies_inputs(self, workdir):
        cfg = workdir / "run.yaml"
        cfg.write_text(
            "install_wim: C:/img/install.wim\n"
            "update_url: https://h.test/kb5005565.msu\n"
            "all_indexes: true\n"
            "verify: true\n"
        )

        args, conf = _parse(workdir, "--config", str(cfg))

        assert conf["install_wim"] == "C:/img/install.wim"
        assert args.install_wim == "C:/img/install.wim"
        assert args.all_indexes is True
        assert args.verify is True

    def test_cli_overrides_config(self, workdir):
        cfg = workdir / "run.yaml"
        cfg.write_text("install_wim: a.wim\nupdate_path: kb.msu\nindex: 2\n")

        args, _ = _parse(workdir, "--config", str(cfg), "b.wim", "--index", "5")

        assert args.install_wim == "b.wim"
        assert args.index == 5

    def test_dump_config(self, workdir, capsys):
        cfg = workdir / "run.yaml"
        cfg.write_text("install_wim: a.wim\nindex: 2\n")

        with pytest.raises(SystemExit) as ei:
            _parse(workdir, "--config", str(cfg), "--dump-config")

        assert ei.value.code == 0
        assert json.loads(capsys.readouterr().out) == {"install_wim": "a.wim", "index": 2}

    def test_dump_args(self, workdir, capsys):
        with pytest.raises(SystemExit):
            _parse(workdir, "install.wim", "--dump-args")
        assert json.loads(capsys.readouterr().out)["install_wim"] == "install.wim"
