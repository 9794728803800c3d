from __future__ import annotations

from pathlib import Path

from mobrun.core import paths
from mobrun.core.config import ResolvedConfig

CONSOLE_FORMAT = "pretty"


def feature_targets(feature_files: str) -> list[str]:
    return [item.strip() for item in feature_files.split(",") if item.strip()]


def build_runner_args(config: ResolvedConfig, *, cwd: Path) -> list[str]:
    """Translate a resolved config into cucumber-js arguments.

    Feature paths come first as positionals; every flag after them is emitted in a
    fixed order so two runs with the same config produce identical argv.
    """
    reports = paths.resolve_from(cwd, config.reports)
    args = feature_targets(config.feature_files)

    args += ["--format", CONSOLE_FORMAT]
    args += ["--format", f"json:{paths.json_report_path(reports)}"]
    args += ["--require", str(paths.world_module_path())]
    args += ["--require", str(paths.resolve_from(cwd, config.steps))]
    for tag in config.tags:
        args += ["--tags", tag]
    if config.world_parameters:
        args += ["--world-parameters", config.world_parameters]
    args.append("--strict")
    if config.parallel > 1:
        args += ["--parallel", str(config.parallel)]
    return args
