# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# wimpatch/console/__init__.py
from .operator import LoggingOperatorConsole, OperatorConsole, RichOperatorConsole, create_operator_console

__all__ = ["LoggingOperatorConsole", "OperatorConsole", "RichOperatorConsole", "create_operator_console"]
