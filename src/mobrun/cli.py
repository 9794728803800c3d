from __future__ import annotations

import functools
import logging
import os
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from mobrun.core import (
    config as config_core,
    ids,
    log,
    platforms,
    reports,
    runner as runner_core,
)
from mobrun.core.errors import ConfigParseError
from mobrun.core.process import ToolMissingError

VERSION = "0.1.0"

app = typer.Typer(add_completion=False, help="mobrun - launcher for cucumber-js mobile (iOS/Android) suites")
logger = logging.getLogger("mobrun.cli")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"mobrun {VERSION}")
        raise typer.Exit(code=0)


def _banner(config: config_core.ResolvedConfig, run_id: str) -> Panel:
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()
    table.add_row("Platform:", config.browser)
    table.add_row("Environment:", config.env)
    table.add_row("Timeout:", f"{config.timeout}ms")
    table.add_row("Parallel:", str(config.parallel))
    table.add_row("Run:", run_id)
    return Panel(table, title=f"Mobile Automation Framework v{VERSION}", expand=False)


@app.command()
def run(
    steps: str | None = typer.Option(None, "--steps", "-s", help="path to step definitions"),
    page_objects: str | None = typer.Option(None, "--pageObjects", "-p", help="path to page objects"),
    shared_objects: list[str] | None = typer.Option(
        None, "--sharedObjects", "-o", help="path to shared objects (repeatable)"
    ),
    browser: str | None = typer.Option(None, "--browser", "-b", help="platform to test (ios/android)"),
    browser_teardown: str | None = typer.Option(
        None, "--browser-teardown", "-k", help="browser teardown strategy (always, clear, none)"
    ),
    reports_path: str | None = typer.Option(None, "--reports", "-r", help="output path for reports"),
    disable_launch_report: bool = typer.Option(
        False, "--disableLaunchReport", "-d", help="disable auto-opening browser with test report"
    ),
    tags: list[str] | None = typer.Option(None, "--tags", "-t", help="cucumber tags to run (repeatable)"),
    feature_files: str | None = typer.Option(
        None, "--featureFiles", "-f", help="comma-separated feature files or directory path"
    ),
    timeout: str | None = typer.Option(None, "--timeOut", "-x", help="step timeout in milliseconds"),
    no_screenshot: bool = typer.Option(False, "--noScreenshot", "-n", help="disable screenshot capture on error"),
    world_parameters: str | None = typer.Option(
        None, "--worldParameters", "-w", help="JSON parameters for cucumber world constructor"
    ),
    env: str | None = typer.Option(None, "--env", "-e", help="test environment (dev, staging, prod)"),
    parallel: str | None = typer.Option(None, "--parallel", help="number of parallel instances"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="debug logging"),
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback, is_eager=True, help="print version and exit"
    ),
):
    """Resolve configuration, run cucumber-js once and exit 0 (passed) or 1 (anything else)."""
    cwd = Path.cwd()
    load_dotenv(cwd / ".env", override=False)
    log.configure_logging(verbose)

    overrides = config_core.CliOverrides(
        steps=steps,
        page_objects=page_objects,
        shared_objects=shared_objects or [],
        browser=browser,
        browser_teardown=browser_teardown,
        reports=reports_path,
        disable_launch_report=disable_launch_report,
        tags=tags or [],
        feature_files=feature_files,
        timeout=timeout,
        no_screenshot=no_screenshot,
        world_parameters=world_parameters,
        env=env,
        parallel=parallel,
    )
    try:
        config = config_core.resolve_config(overrides, cwd=cwd, environ=os.environ)
    except ConfigParseError as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=1)
    config = platforms.apply_platform_dirs(config, cwd=cwd)

    run_id = ids.run_id_from_env(os.environ)
    Console().print(_banner(config, run_id))
    logger.info("Starting test execution...")

    try:
        code = runner_core.execute(
            config,
            runner_core.CucumberRunner.from_env(os.environ),
            cwd=cwd,
            environ=os.environ,
            run_id=run_id,
            report_generator=functools.partial(reports.generate, run_id=run_id),
        )
    except ToolMissingError as exc:
        logger.error("%s (install Node.js or set MOBRUN_RUNNER_CMD)", exc)
        raise typer.Exit(code=1)
    except Exception:
        logger.exception("Error running tests")
        raise typer.Exit(code=1)
    raise typer.Exit(code=code)


if __name__ == "__main__":
    app()
