from __future__ import annotations

import logging
import os
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Protocol, Sequence

from mobrun.core import ids, paths
from mobrun.core.args import build_runner_args
from mobrun.core.config import ResolvedConfig
from mobrun.core.process import ensure_tool, run_inherited

logger = logging.getLogger(__name__)

DEFAULT_RUNNER_CMD = ("npx", "cucumber-js")

ReportGenerator = Callable[[Path], object]


@dataclass(frozen=True)
class RunContext:
    cwd: Path
    env: Mapping[str, str]


@dataclass(frozen=True)
class RunOutcome:
    success: bool
    returncode: int


class Runner(Protocol):
    def run(self, args: Sequence[str], context: RunContext) -> RunOutcome: ...


class CucumberRunner:
    def __init__(self, command: Sequence[str] = DEFAULT_RUNNER_CMD) -> None:
        if not command:
            raise ValueError("Runner command must not be empty")
        self.command = tuple(command)

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> "CucumberRunner":
        override = environ.get("MOBRUN_RUNNER_CMD")
        if override:
            return cls(shlex.split(override))
        return cls()

    def run(self, args: Sequence[str], context: RunContext) -> RunOutcome:
        ensure_tool(self.command[0])
        cmd = [*self.command, *args]
        logger.debug("Running %s", shlex.join(cmd))
        returncode = run_inherited(cmd, cwd=context.cwd, env=context.env)
        return RunOutcome(success=returncode == 0, returncode=returncode)


def runner_environment(config: ResolvedConfig, base: Mapping[str, str], *, cwd: Path, run_id: str) -> dict[str, str]:
    """Settings the world bootstrap reads from the environment instead of CLI arguments."""
    env = dict(base)
    env.update(
        {
            "APP_NAME": config.browser,
            "BROWSER_TEARDOWN_STRATEGY": config.browser_teardown,
            "TEST_ENV": config.env,
            "DEFAULT_TIMEOUT": str(config.timeout),
            "PAGE_OBJECT_PATH": str(paths.resolve_from(cwd, config.page_objects)),
            "SHARED_OBJECT_PATHS": os.pathsep.join(str(path) for path in config.shared_objects),
            "REPORTS_PATH": str(paths.resolve_from(cwd, config.reports)),
            "DISABLE_LAUNCH_REPORT": "1" if config.disable_launch_report else "0",
            "NO_SCREENSHOT": "1" if config.no_screenshot else "0",
            ids.RUN_ID_ENV: run_id,
        }
    )
    return env


def execute(
    config: ResolvedConfig,
    runner: Runner,
    *,
    cwd: Path,
    environ: Mapping[str, str],
    run_id: str,
    report_generator: ReportGenerator,
) -> int:
    """Run the suite once and return the process exit code (0 or 1)."""
    reports = paths.ensure_reports_dir(paths.resolve_from(cwd, config.reports))
    args = build_runner_args(config, cwd=cwd)
    context = RunContext(cwd=cwd, env=runner_environment(config, environ, cwd=cwd, run_id=run_id))

    outcome = runner.run(args, context)
    if outcome.success:
        logger.info("Test run passed")
    else:
        logger.error("Test run failed (runner exit status %d)", outcome.returncode)

    # Failing runs still get a report so the failures can be inspected.
    if not config.disable_launch_report:
        logger.info("Generating test reports...")
        report_generator(reports)
    return 0 if outcome.success else 1
