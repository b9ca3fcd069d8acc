# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import argparse
import logging

import pytest
from wimpatch.config.config_loader import Config
from wimpatch.core.exceptions import ConfigurationError, InputNotFound

LOG = logging.getLogger("wimpatch_tests.config")


@pytest.mark.unit
class TestConfigLoader:
    def test_load_yaml_normalizes_dashes(self, tmp_path):
        p = tmp_path / "run.yaml"
        p.write_text("install_wim: C:/img/install.wim\nupdate-url: https://example.test/kb.msu\nindex: 3\n")

        conf = Config.load_one(LOG, p)
        assert conf == {"install_wim": "C:/img/install.wim", "update_url": "https://example.test/kb.msu", "index": 3}

    def test_load_json(self, tmp_path):
        p = tmp_path / "run.json"
        p.write_text('{"verify": true, "all_indexes": true}')
        assert Config.load_one(LOG, p) == {"verify": True, "all_indexes": True}

    def test_empty_file_is_empty_mapping(self, tmp_path):
        p = tmp_path / "empty.yaml"
        p.write_text("")
        assert Config.load_one(LOG, p) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(InputNotFound):
            Config.load_one(LOG, tmp_path / "nope.yaml")

    def test_non_mapping_rejected(self, tmp_path):
        p = tmp_path / "list.yaml"
        p.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError):
            Config.load_one(LOG, p)

    def test_invalid_yaml(self, tmp_path):
        p = tmp_path / "bad.yaml"
        p.write_text("index: [1, 2\n")
        with pytest.raises(ConfigurationError) as ei:
            Config.load_one(LOG, p)
        assert ei.value.code == 2

    def test_later_files_override(self, tmp_path):
        a = tmp_path / "a.yaml"
        b = tmp_path / "b.yaml"
        a.write_text("index: 1\nverify: true\n")
        b.write_text("index: 4\n")

        merged = Config.load_many(LOG, [a, b])
        assert merged == {"index": 4, "verify": True}

    def test_expand_globs_dedupes(self, tmp_path):
        (tmp_path / "10-base.yaml").write_text("index: 1\n")
        (tmp_path / "20-site.yaml").write_text("index: 2\n")

        out = Config.expand_configs(LOG, [str(tmp_path / "*.yaml"), str(tmp_path / "10-base.yaml")])
        assert [p.name for p in out] == ["10-base.yaml", "20-site.yaml"]

    def test_glob_matching_nothing(self, tmp_path):
        with pytest.raises(InputNotFound):
            Config.expand_configs(LOG, [str(tmp_path / "*.yaml")])

    def test_apply_as_defaults_skips_unknown(self, caplog):
        parser = argparse.ArgumentParser()
        parser.add_argument("--index", type=int, default=6)

        with caplog.at_level(logging.WARNING, logger=LOG.name):
            Config.apply_as_defaults(LOG, parser, {"index": 2, "colour": "blue"})

        assert parser.parse_args([]).index == 2
        assert parser.parse_args(["--index", "5"]).index == 5
        assert "colour" in caplog.text
