# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# wimpatch/cli/args/builder.py
from __future__ import annotations

import argparse

from ...core.logger import c

YAML_EXAMPLE = r"""# wimpatch config
# Run:
#   wimpatch --config site.yaml
# or merge configs:
#   wimpatch --config base.yaml --config overrides.yaml --verify
install_wim: D:\media\sources\install.wim
boot_wim: D:\media\sources\boot.wim
drivers: D:\drivers\nuc13
index: 6
# all_indexes: true
# max_install_indexes: 11
# detect_indexes: true
update_url: https://catalog.example.com/windows11.0-kb5031354-x64.msu
# update_path: C:\Downloads\windows11.0-kb5031354-x64.msu
workdir: C:\wimpatch
verify: false
verbose: 1
"""

FEATURE_SUMMARY = """ • Install image: mount -> add drivers -> add updates -> (verify) -> commit, per index
 • Boot image: mount -> add drivers -> commit, indexes 1 and 2
 • Unsigned drivers: one retry with /ForceUnsigned
 • Any failure: discard that index and stop the run
"""


class HelpFormatter(argparse.RawDescriptionHelpFormatter, argparse.ArgumentDefaultsHelpFormatter):
    """Combines raw description formatting with default value display in help."""


def _build_epilog() -> str:
    return (
        c("YAML example:\n", "cyan", ["bold"])
        + c(YAML_EXAMPLE, "cyan")
        + "\n"
        + c("Feature summary:\n", "cyan", ["bold"])
        + c(FEATURE_SUMMARY, "cyan")
    )
