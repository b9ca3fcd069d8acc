# wimpatch/core/__init__.py
from .exceptions import Fatal, WimpatchError, format_exception_for_cli

__all__ = ["Fatal", "WimpatchError", "format_exception_for_cli"]
