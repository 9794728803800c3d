# pytest configuration hooks.
#
# Policy: No skipped tests. Skips hide real problems.
# If something cannot run in this environment, use xfail with a clear reason (and fix it later).

from __future__ import annotations

import pytest

# Register pytest-bdd step definitions as a pytest plugin so fixtures are discoverable.
pytest_plugins = ["tests.bdd.steps"]

# Variables the launcher reads; a developer's shell must not leak into the tests.
LAUNCHER_ENV_VARS = (
    "DEFAULT_PLATFORM",
    "DEFAULT_TIMEOUT",
    "TEST_ENV",
    "PARALLEL_INSTANCES",
    "MOBRUN_CONFIG_PATH",
    "MOBRUN_RUNNER_CMD",
    "MOBRUN_TEST_NOW_ISO",
    "MOBRUN_RUN_ID",
)

_SKIP_COUNT = 0


@pytest.fixture(autouse=True)
def _isolate_launcher_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in LAUNCHER_ENV_VARS:
        monkeypatch.delenv(key, raising=False)


def pytest_runtest_logreport(report: pytest.TestReport) -> None:
    global _SKIP_COUNT
    if report.when == "setup" and report.outcome == "skipped":
        _SKIP_COUNT += 1


def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:
    if _SKIP_COUNT > 0:
        pytest.exit(f"Skipped tests are not allowed (skipped={_SKIP_COUNT}).", returncode=2)
