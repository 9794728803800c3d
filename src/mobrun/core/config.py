"""Layered launcher configuration.

Each source is a pure function over a partial mapping; folding them left to right
gives the precedence order (later layers win):

    defaults -> environment variables -> config.json -> CLI flags

Keys in the merged mapping use the config.json spelling (`pageObjects`,
`browserTeardownStrategy`, ...). `resolve_config` turns the final mapping into an
immutable `ResolvedConfig`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import reduce
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Sequence

import jsonschema

from mobrun.core import paths
from mobrun.core.errors import ConfigParseError

logger = logging.getLogger(__name__)

Layer = Callable[[dict[str, Any]], dict[str, Any]]

DEFAULTS: dict[str, Any] = {
    "steps": "./src/step-definitions",
    "pageObjects": "./src/page-objects",
    "sharedObjects": ["./src/support"],
    "featureFiles": "./src/features",
    "reports": "./reports",
    "browser": "ios",
    "browserTeardownStrategy": "always",
    "timeout": 30000,
    "tags": [],
    "worldParameters": None,
    "env": "staging",
    "parallel": 1,
    "disableLaunchReport": False,
    "noScreenshot": False,
}

_STRING_OR_LIST = {
    "anyOf": [
        {"type": "string"},
        {"type": "array", "items": {"type": "string"}},
    ]
}

CONFIG_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "steps": {"type": "string"},
        "pageObjects": {"type": "string"},
        "sharedObjects": _STRING_OR_LIST,
        "featureFiles": {"type": "string"},
        "reports": {"type": "string"},
        "browser": {"type": "string"},
        "browserTeardownStrategy": {"type": "string"},
        "timeout": {"type": "integer", "minimum": 0},
        "tags": _STRING_OR_LIST,
        "worldParameters": {"type": ["string", "object"]},
        "env": {"type": "string"},
        "parallel": {"type": "integer", "minimum": 1},
        "disableLaunchReport": {"type": "boolean"},
        "noScreenshot": {"type": "boolean"},
    },
}


@dataclass(frozen=True)
class ResolvedConfig:
    steps: str
    page_objects: str
    shared_objects: tuple[Path, ...]
    browser: str
    browser_teardown: str
    reports: str
    feature_files: str
    timeout: int
    tags: tuple[str, ...]
    world_parameters: str | None
    env: str
    parallel: int
    disable_launch_report: bool
    no_screenshot: bool
    feature_files_explicit: bool = False


@dataclass
class CliOverrides:
    steps: str | None = None
    page_objects: str | None = None
    shared_objects: Sequence[str] = field(default_factory=list)
    browser: str | None = None
    browser_teardown: str | None = None
    reports: str | None = None
    disable_launch_report: bool = False
    tags: Sequence[str] = field(default_factory=list)
    feature_files: str | None = None
    timeout: str | None = None
    no_screenshot: bool = False
    world_parameters: str | None = None
    env: str | None = None
    parallel: str | None = None


def coerce_int(value: object, default: int, *, minimum: int = 0) -> int:
    """Parse `value` as an integer, falling back to `default` when it is unusable.

    Strings must be plain ASCII decimals with an optional sign; floats are accepted
    only when integral (JSON `12000.0`).
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, float) and value.is_integer():
        parsed = int(value)
    else:
        text = str(value).strip()
        digits = text[1:] if text[:1] in ("+", "-") else text
        if not (digits.isascii() and digits.isdecimal()):
            logger.debug("Ignoring non-integer value %r, keeping %d", value, default)
            return default
        parsed = int(text)
    if parsed < minimum:
        logger.debug("Ignoring out-of-range value %r, keeping %d", value, default)
        return default
    return parsed


def _as_list(value: str | Iterable[str]) -> list[str]:
    if isinstance(value, str):
        return [value]
    return list(value)


def defaults_layer(partial: dict[str, Any]) -> dict[str, Any]:
    merged = {key: list(value) if isinstance(value, list) else value for key, value in DEFAULTS.items()}
    merged.update(partial)
    return merged


def environment_layer(environ: Mapping[str, str]) -> Layer:
    def apply(partial: dict[str, Any]) -> dict[str, Any]:
        merged = dict(partial)
        platform = environ.get("DEFAULT_PLATFORM")
        if platform:
            merged["browser"] = platform
        timeout = environ.get("DEFAULT_TIMEOUT")
        if timeout:
            merged["timeout"] = coerce_int(timeout, merged.get("timeout", DEFAULTS["timeout"]))
        test_env = environ.get("TEST_ENV")
        if test_env:
            merged["env"] = test_env
        parallel = environ.get("PARALLEL_INSTANCES")
        if parallel:
            merged["parallel"] = coerce_int(parallel, merged.get("parallel", DEFAULTS["parallel"]), minimum=1)
        return merged

    return apply


def load_config_file(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigParseError(path, str(exc)) from exc
    except json.JSONDecodeError as exc:
        raise ConfigParseError(path, f"not valid JSON ({exc.msg} at line {exc.lineno})") from exc
    try:
        jsonschema.validate(data, CONFIG_SCHEMA)
    except jsonschema.ValidationError as exc:
        location = ".".join(str(part) for part in exc.absolute_path) or "<root>"
        raise ConfigParseError(path, f"{location}: {exc.message}") from exc
    return data


def config_file_layer(path: Path) -> Layer:
    data = load_config_file(path)
    if data:
        logger.debug("Loaded %d key(s) from %s", len(data), path)

    def apply(partial: dict[str, Any]) -> dict[str, Any]:
        merged = dict(partial)
        for key, value in data.items():
            if key in ("sharedObjects", "tags"):
                merged[key] = _as_list(value)
            elif key in ("timeout", "parallel"):
                merged[key] = coerce_int(value, merged.get(key, DEFAULTS[key]), minimum=0 if key == "timeout" else 1)
            elif key == "worldParameters" and isinstance(value, dict):
                merged[key] = json.dumps(value)
            else:
                merged[key] = value
        return merged

    return apply


def cli_layer(overrides: CliOverrides) -> Layer:
    scalars = {
        "steps": overrides.steps,
        "pageObjects": overrides.page_objects,
        "browser": overrides.browser,
        "browserTeardownStrategy": overrides.browser_teardown,
        "reports": overrides.reports,
        "featureFiles": overrides.feature_files,
        "worldParameters": overrides.world_parameters,
        "env": overrides.env,
    }

    def apply(partial: dict[str, Any]) -> dict[str, Any]:
        merged = dict(partial)
        for key, value in scalars.items():
            if value is not None:
                merged[key] = value
        if overrides.timeout is not None:
            merged["timeout"] = coerce_int(overrides.timeout, merged.get("timeout", DEFAULTS["timeout"]))
        if overrides.parallel is not None:
            merged["parallel"] = coerce_int(overrides.parallel, merged.get("parallel", DEFAULTS["parallel"]), minimum=1)
        # Repeatable flags extend whatever the lower layers seeded.
        merged["sharedObjects"] = [*_as_list(merged.get("sharedObjects", [])), *overrides.shared_objects]
        merged["tags"] = [*_as_list(merged.get("tags", [])), *overrides.tags]
        if overrides.disable_launch_report:
            merged["disableLaunchReport"] = True
        if overrides.no_screenshot:
            merged["noScreenshot"] = True
        return merged

    return apply


def merge_layers(layers: Iterable[Layer]) -> dict[str, Any]:
    return reduce(lambda partial, layer: layer(partial), layers, {})


def build_config(merged: Mapping[str, Any], *, cwd: Path, feature_files_explicit: bool = False) -> ResolvedConfig:
    shared = _as_list(merged["sharedObjects"]) or list(DEFAULTS["sharedObjects"])
    return ResolvedConfig(
        steps=str(merged["steps"]),
        page_objects=str(merged["pageObjects"]),
        shared_objects=tuple(paths.resolve_from(cwd, item) for item in shared),
        browser=str(merged["browser"]),
        browser_teardown=str(merged["browserTeardownStrategy"]),
        reports=str(merged["reports"]),
        feature_files=str(merged["featureFiles"]),
        timeout=int(merged["timeout"]),
        tags=tuple(str(tag) for tag in _as_list(merged["tags"])),
        world_parameters=merged.get("worldParameters"),
        env=str(merged["env"]),
        parallel=int(merged["parallel"]),
        disable_launch_report=bool(merged["disableLaunchReport"]),
        no_screenshot=bool(merged["noScreenshot"]),
        feature_files_explicit=feature_files_explicit,
    )


def resolve_config(overrides: CliOverrides, *, cwd: Path, environ: Mapping[str, str]) -> ResolvedConfig:
    layers: list[Layer] = [
        defaults_layer,
        environment_layer(environ),
        config_file_layer(paths.config_path(cwd, environ)),
        cli_layer(overrides),
    ]
    merged = merge_layers(layers)
    return build_config(merged, cwd=cwd, feature_files_explicit=overrides.feature_files is not None)
