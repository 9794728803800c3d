from __future__ import annotations

import shutil
import subprocess
from typing import Mapping, Sequence
from pathlib import Path


class ToolMissingError(RuntimeError):
    def __init__(self, tool: str) -> None:
        super().__init__(f"Required tool not found on PATH: {tool}")
        self.tool = tool


def ensure_tool(name: str) -> str:
    path = shutil.which(name)
    if not path:
        raise ToolMissingError(name)
    return path


def run_inherited(cmd: Sequence[str], *, cwd: Path, env: Mapping[str, str]) -> int:
    """Run `cmd` attached to our stdout/stderr and return its exit status."""
    proc = subprocess.run(list(cmd), cwd=cwd, env=dict(env))
    return proc.returncode
