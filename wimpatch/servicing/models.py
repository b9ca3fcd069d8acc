# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# wimpatch/servicing/models.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from ..core.exceptions import WimpatchError


class ImageKind(str, Enum):
    INSTALL = "install"
    BOOT = "boot"


@dataclass(frozen=True)
class ImageReference:
    path: Path
    kind: ImageKind

    @property
    def receives_updates(self) -> bool:
        return self.kind is ImageKind.INSTALL


@dataclass(frozen=True)
class ImageIndex:
    ordinal: int
    image: ImageReference

    def __post_init__(self) -> None:
        if int(self.ordinal) < 1:
            raise ValueError(f"image index must be >= 1, got {self.ordinal}")

    def __str__(self) -> str:
        return f"{self.image.path.name}#{self.ordinal}"


@dataclass(frozen=True)
class DriverSource:
    root_path: Path


class SessionState(str, Enum):
    UNMOUNTED = "unmounted"
    MOUNTED = "mounted"
    COMMITTING = "committing"
    DISCARDING = "discarding"


class IndexState(str, Enum):
    """Pipeline position of one image index."""
    IDLE = "idle"
    MOUNTED = "mounted"
    DRIVERS_INJECTED = "drivers-injected"
    UPDATES_APPLIED = "updates-applied"
    VERIFIED = "verified"
    COMMITTED = "committed"
    DISCARDED = "discarded"


@dataclass(frozen=True)
class IndexResult:
    index: ImageIndex
    state: IndexState
    error: Optional[WimpatchError] = None

    @property
    def committed(self) -> bool:
        return self.state is IndexState.COMMITTED
