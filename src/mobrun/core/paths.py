from __future__ import annotations

from pathlib import Path
from typing import Mapping

CONFIG_FILENAME = "config.json"
JSON_REPORT_FILENAME = "cucumber-report.json"
HTML_REPORT_FILENAME = "cucumber-report.html"
SRC_DIR = Path("src")


def config_path(cwd: Path, environ: Mapping[str, str]) -> Path:
    override = environ.get("MOBRUN_CONFIG_PATH")
    if override:
        return Path(override).expanduser()
    return cwd / CONFIG_FILENAME


def resolve_from(cwd: Path, path: str | Path) -> Path:
    candidate = Path(path).expanduser()
    return candidate if candidate.is_absolute() else (cwd / candidate).resolve()


def ensure_reports_dir(reports: Path) -> Path:
    reports.mkdir(parents=True, exist_ok=True)
    return reports


def json_report_path(reports: Path) -> Path:
    return reports / JSON_REPORT_FILENAME


def html_report_path(reports: Path) -> Path:
    return reports / HTML_REPORT_FILENAME


def world_module_path() -> Path:
    return Path(__file__).resolve().parents[1] / "support" / "world.js"
