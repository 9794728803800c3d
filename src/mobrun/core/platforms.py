"""Platform-specific directory substitution.

A project may keep per-platform trees next to the generic ones:

    src/step-definitions          src/ios/step-definitions
    src/page-objects              src/ios/page-objects
    src/features                  src/android/features

When the tree for the selected platform exists it takes over from the generic
path. Feature files are the exception: an explicit `--featureFiles` always wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Literal

from mobrun.core.config import ResolvedConfig
from mobrun.core.paths import SRC_DIR

logger = logging.getLogger(__name__)

Family = Literal["ios", "android"]


@dataclass(frozen=True)
class PlatformDirs:
    steps: Path
    page_objects: Path
    features: Path


def platform_family(browser: str) -> Family:
    return "ios" if "ios" in browser else "android"


def platform_dirs(family: Family) -> PlatformDirs:
    root = SRC_DIR / family
    return PlatformDirs(
        steps=root / "step-definitions",
        page_objects=root / "page-objects",
        features=root / "features",
    )


def apply_platform_dirs(config: ResolvedConfig, *, cwd: Path) -> ResolvedConfig:
    family = platform_family(config.browser)
    dirs = platform_dirs(family)
    changes: dict[str, str] = {}

    if (cwd / dirs.steps).exists():
        changes["steps"] = str(dirs.steps)
    if (cwd / dirs.page_objects).exists():
        changes["page_objects"] = str(dirs.page_objects)
    if (cwd / dirs.features).exists() and not config.feature_files_explicit:
        changes["feature_files"] = str(dirs.features)

    for field, value in changes.items():
        logger.debug("Using %s directory for %s: %s", family, field, value)
    return replace(config, **changes) if changes else config
