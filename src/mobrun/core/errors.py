from __future__ import annotations

from pathlib import Path


class ConfigParseError(ValueError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Invalid config file {path}: {reason}")
        self.path = path
        self.reason = reason


class ReportError(ValueError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Unreadable cucumber report {path}: {reason}")
        self.path = path
        self.reason = reason
