from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any

import attrs

from .modes import MeasureMode


@attrs.define(frozen=True, slots=True)
class Session:
    mode: MeasureMode
    started_at: str
    started_monotonic: float
    pid: int


@attrs.define(frozen=True, slots=True)
class SessionMetadata:
    mode: str
    clock: str
    started_at: str
    finished_at: str
    duration_s: float
    pid: int
    report: str
    command: list[str]
    host: dict[str, str]
    tool: dict[str, str | None]

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode,
            "clock": self.clock,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "duration_s": self.duration_s,
            "pid": self.pid,
            "report": self.report,
            "command": list(self.command),
            "host": dict(self.host),
            "tool": dict(self.tool),
        }

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "SessionMetadata":
        return SessionMetadata(
            mode=d["mode"],
            clock=d["clock"],
            started_at=d["started_at"],
            finished_at=d["finished_at"],
            duration_s=float(d["duration_s"]),
            pid=int(d["pid"]),
            report=d["report"],
            command=list(d["command"]),
            host=dict(d["host"]),
            tool=dict(d["tool"]),
        )


@attrs.define(frozen=True, slots=True, eq=False)
class ViewerLaunch:
    report: Path
    argv: list[str]
    process: subprocess.Popen[bytes]

    @property
    def pid(self) -> int:
        return self.process.pid
