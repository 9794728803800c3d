from __future__ import annotations

from pathlib import Path

from mobrun.core import paths
from mobrun.core.args import build_runner_args, feature_targets
from mobrun.core.config import CliOverrides, resolve_config


def _args(tmp_path: Path, **overrides) -> list[str]:
    cfg = resolve_config(CliOverrides(**overrides), cwd=tmp_path, environ={})
    return build_runner_args(cfg, cwd=tmp_path)


def _pairs(args: list[str], flag: str) -> list[str]:
    return [args[i + 1] for i, arg in enumerate(args) if arg == flag]


def test_feature_targets_split_and_trim():
    assert feature_targets(" a.feature, b.feature ,,c ") == ["a.feature", "b.feature", "c"]


def test_default_argument_sequence(tmp_path):
    args = _args(tmp_path)
    reports = (tmp_path / "reports").resolve()
    assert args == [
        "./src/features",
        "--format",
        "pretty",
        "--format",
        f"json:{reports / 'cucumber-report.json'}",
        "--require",
        str(paths.world_module_path()),
        "--require",
        str((tmp_path / "src" / "step-definitions").resolve()),
        "--strict",
    ]


def test_feature_positionals_precede_flags(tmp_path):
    args = _args(tmp_path, feature_files="features/login.feature, features/feed.feature")
    assert args[:2] == ["features/login.feature", "features/feed.feature"]
    assert args[2] == "--format"


def test_tags_emit_independent_pairs_in_order(tmp_path):
    args = _args(tmp_path, tags=["@smoke", "@regression"])
    assert _pairs(args, "--tags") == ["@smoke", "@regression"]
    assert args.index("--tags") > args.index("--require")


def test_world_parameters_passed_verbatim(tmp_path):
    args = _args(tmp_path, world_parameters='{"user": "qa"')
    assert _pairs(args, "--world-parameters") == ['{"user": "qa"']
    assert args.index("--world-parameters") < args.index("--strict")


def test_parallel_only_above_one(tmp_path):
    assert "--parallel" not in _args(tmp_path, parallel="1")
    args = _args(tmp_path, parallel="4")
    assert args[-2:] == ["--parallel", "4"]


def test_json_report_follows_reports_option(tmp_path):
    args = _args(tmp_path, reports="out/run1")
    expected = (tmp_path / "out" / "run1").resolve() / "cucumber-report.json"
    assert f"json:{expected}" in _pairs(args, "--format")


def test_world_module_is_packaged():
    assert paths.world_module_path().is_file()
