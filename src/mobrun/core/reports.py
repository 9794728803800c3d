from __future__ import annotations

import html
import json
import logging
import os
import webbrowser
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from mobrun.core import paths
from mobrun.core.errors import ReportError

logger = logging.getLogger(__name__)

STEP_STATUSES = ("passed", "failed", "skipped", "pending", "undefined", "ambiguous")


@dataclass(frozen=True)
class ScenarioResult:
    feature: str
    name: str
    status: str


@dataclass
class ReportSummary:
    features: int = 0
    scenarios: list[ScenarioResult] = field(default_factory=list)
    steps: Counter[str] = field(default_factory=Counter)
    duration_ms: int = 0

    @property
    def scenario_counts(self) -> Counter[str]:
        return Counter(scenario.status for scenario in self.scenarios)

    @property
    def failed_scenarios(self) -> list[ScenarioResult]:
        return [scenario for scenario in self.scenarios if scenario.status != "passed"]


def _now_utc() -> datetime:
    # MOBRUN_TEST_NOW_ISO pins the report timestamp in tests.
    override = os.environ.get("MOBRUN_TEST_NOW_ISO")
    if override:
        return datetime.fromisoformat(override).astimezone(timezone.utc)
    return datetime.now(timezone.utc)


def load_cucumber_report(path: Path) -> list[dict[str, Any]]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ReportError(path, f"not valid JSON ({exc.msg})") from exc
    if not isinstance(data, list):
        raise ReportError(path, f"expected a list of features, got {type(data).__name__}")
    return data


def _scenario_status(step_statuses: list[str]) -> str:
    # Worst status wins; a scenario with no steps counts as passed.
    for status in ("failed", "ambiguous", "undefined", "pending", "skipped"):
        if status in step_statuses:
            return status
    return "passed"


def summarize(features: list[dict[str, Any]]) -> ReportSummary:
    summary = ReportSummary(features=len(features))
    duration_ns = 0
    for feature in features:
        feature_name = str(feature.get("name", ""))
        for element in feature.get("elements") or []:
            if element.get("type", "scenario") == "background":
                continue
            statuses: list[str] = []
            for step in element.get("steps") or []:
                result = step.get("result") or {}
                status = str(result.get("status", "undefined"))
                duration_ns += int(result.get("duration") or 0)
                summary.steps[status] += 1
                statuses.append(status)
            summary.scenarios.append(
                ScenarioResult(feature=feature_name, name=str(element.get("name", "")), status=_scenario_status(statuses))
            )
    summary.duration_ms = duration_ns // 1_000_000
    return summary


def _counts_row(label: str, counts: Counter[str]) -> str:
    cells = "".join(f"<td>{counts.get(status, 0)}</td>" for status in STEP_STATUSES)
    return f"<tr><th>{html.escape(label)}</th><td>{sum(counts.values())}</td>{cells}</tr>"


def render_html(summary: ReportSummary, *, generated_at: datetime, run_id: str | None = None) -> str:
    header = "".join(f"<th>{status}</th>" for status in STEP_STATUSES)
    failures = "".join(
        f"<li class=\"{html.escape(s.status)}\">{html.escape(s.feature)}: {html.escape(s.name)} ({html.escape(s.status)})</li>"
        for s in summary.failed_scenarios
    )
    verdict = "failed" if summary.failed_scenarios else "passed"
    run_line = f"<p>Run: {html.escape(run_id)}</p>" if run_id else ""
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>Cucumber report ({verdict})</title>
<style>
body {{ font-family: sans-serif; margin: 2em; }}
table {{ border-collapse: collapse; }}
th, td {{ border: 1px solid #ccc; padding: 4px 10px; text-align: right; }}
.passed {{ color: #2e7d32; }}
.failed, .ambiguous {{ color: #c62828; }}
.pending, .undefined, .skipped {{ color: #ef6c00; }}
</style>
</head>
<body>
<h1 class="{verdict}">Cucumber report: {verdict}</h1>
<p>Generated at {generated_at.isoformat()}</p>
{run_line}
<p>Features: {summary.features} &middot; Duration: {summary.duration_ms} ms</p>
<table>
<tr><th></th><th>total</th>{header}</tr>
{_counts_row("Scenarios", summary.scenario_counts)}
{_counts_row("Steps", summary.steps)}
</table>
<h2>Scenarios not passed</h2>
<ul>{failures or "<li>None</li>"}</ul>
</body>
</html>
"""


def generate(reports_dir: Path, *, open_browser: bool = True, run_id: str | None = None) -> Path | None:
    json_path = paths.json_report_path(reports_dir)
    if not json_path.is_file():
        logger.warning("No cucumber report at %s, skipping HTML report", json_path)
        return None

    summary = summarize(load_cucumber_report(json_path))
    out_path = paths.html_report_path(reports_dir)
    out_path.write_text(render_html(summary, generated_at=_now_utc(), run_id=run_id), encoding="utf-8")
    logger.info("HTML report written to %s", out_path)

    if open_browser:
        webbrowser.open(out_path.resolve().as_uri())
    return out_path
