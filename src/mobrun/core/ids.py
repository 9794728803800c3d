from __future__ import annotations

import logging
import re
from typing import Mapping

import ulid

logger = logging.getLogger(__name__)

RUN_ID_RE = re.compile(r"^run_[0-9A-Z]{26}$")
RUN_ID_ENV = "MOBRUN_RUN_ID"


def run_id() -> str:
    return f"run_{ulid.new()}"


def is_run_id(value: str) -> bool:
    return bool(RUN_ID_RE.fullmatch(value))


def run_id_from_env(environ: Mapping[str, str]) -> str:
    """Reuse a caller-supplied `MOBRUN_RUN_ID` (e.g. from CI) or mint a fresh one."""
    supplied = environ.get(RUN_ID_ENV)
    if supplied:
        if is_run_id(supplied):
            return supplied
        logger.warning("Ignoring malformed %s=%r", RUN_ID_ENV, supplied)
    return run_id()
