# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# wimpatch/config/config_loader.py
"""
YAML/JSON run configuration.

Config files are plain mappings whose keys are argparse dest names
(`install_wim`, `index`, `update_url`, `boot_wim`, ...). Several files may be
given; later files override earlier ones, and the merged mapping becomes the
parser defaults so explicit CLI flags always win.
"""
from __future__ import annotations

import argparse
import glob
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import yaml

from ..core.exceptions import ConfigurationError, InputNotFound


class Config:
    @staticmethod
    def expand_configs(logger: logging.Logger, paths: List[str]) -> List[Path]:
        """Expand user/globs; keep order, drop duplicates."""
        out: List[Path] = []
        seen: set[Path] = set()
        for raw in paths:
            expanded = str(Path(raw).expanduser())
            matches = sorted(glob.glob(expanded)) if any(ch in expanded for ch in "*?[") else [expanded]
            if not matches:
                raise InputNotFound(msg=f"Config glob matched nothing: {raw}")
            for m in matches:
                p = Path(m).resolve()
                if p in seen:
                    continue
                seen.add(p)
                out.append(p)
        logger.debug("Config files: %s", [str(p) for p in out])
        return out

    @staticmethod
    def load_one(logger: logging.Logger, path: Path) -> Dict[str, Any]:
        if not path.is_file():
            raise InputNotFound(msg=f"Config file not found: {path}")

        raw = path.read_text(encoding="utf-8")
        try:
            if path.suffix.lower() == ".json":
                parsed = json.loads(raw)
            else:
                parsed = yaml.safe_load(raw)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(msg=f"Config file is not valid: {path}: {e}", cause=e)

        if parsed is None:
            logger.warning("Config file is empty: %s", path)
            return {}
        if not isinstance(parsed, dict):
            raise ConfigurationError(msg=f"Config top-level must be a mapping: {path}")
        return {str(k).replace("-", "_"): v for k, v in parsed.items()}

    @staticmethod
    def load_many(logger: logging.Logger, paths: List[Path]) -> Dict[str, Any]:
        merged: Dict[str, Any] = {}
        for p in paths:
            conf = Config.load_one(logger, p)
            logger.info("Loaded config: %s (%d keys)", p, len(conf))
            merged.update(conf)
        return merged

    @staticmethod
    def apply_as_defaults(logger: logging.Logger, parser: argparse.ArgumentParser, conf: Dict[str, Any]) -> None:
        """
        Push config values into the parser as defaults. Unknown keys are
        reported and ignored.
        """
        known = {a.dest for a in parser._actions}  # argparse has no public accessor
        defaults: Dict[str, Any] = {}
        for k, v in conf.items():
            if k not in known:
                logger.warning("Ignoring unknown config key: %s", k)
                continue
            defaults[k] = v
        if defaults:
            parser.set_defaults(**defaults)
