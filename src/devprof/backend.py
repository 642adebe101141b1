"""
yappi adapter used as the measurement and report-writing collaborator.

yappi is process-global: one profiler per interpreter. `YappiBackend` is the
only code in this package that drives it; the controller talks to it through
the `ProfilerBackend` / `ReportWriter` protocols so tests can substitute fakes.
"""

from __future__ import annotations

import logging
import os
from importlib import metadata
from pathlib import Path
from typing import Any, Protocol

import yappi

from . import paths
from .modes import MeasureMode

logger = logging.getLogger(__name__)

REPORT_FORMAT = "callgrind"

# yappi only has wall and cpu clocks. Other modes go through as-is so yappi
# rejects them with YappiError.
_YAPPI_CLOCKS: dict[MeasureMode, str] = {
    MeasureMode.WALL_TIME: "wall",
    MeasureMode.CPU_TIME: "cpu",
    MeasureMode.PROCESS_TIME: "cpu",
}


def clock_for_mode(mode: MeasureMode) -> str:
    """Return the yappi clock type argument for a measure mode."""
    return _YAPPI_CLOCKS.get(mode, mode.value)


def yappi_version() -> str | None:
    try:
        return metadata.version("yappi")
    except metadata.PackageNotFoundError:
        return None


class ProfilerBackend(Protocol):
    name: str

    def start(self, mode: MeasureMode) -> None: ...

    def stop(self) -> Any: ...

    def clock(self, mode: MeasureMode) -> str: ...

    def version(self) -> str | None: ...


class ReportWriter(Protocol):
    def write(self, result: Any, out_dir: Path) -> Path: ...


class YappiBackend:
    """Start/stop yappi with the clock selected by a measure mode."""

    name = "yappi"

    def __init__(self, *, builtins: bool = False, profile_threads: bool = True) -> None:
        self.builtins = builtins
        self.profile_threads = profile_threads

    def clock(self, mode: MeasureMode) -> str:
        return clock_for_mode(mode)

    def version(self) -> str | None:
        return yappi_version()

    def start(self, mode: MeasureMode) -> None:
        # The clock type cannot change while yappi holds stats from a previous run.
        yappi.clear_stats()
        yappi.set_clock_type(self.clock(mode))
        yappi.start(builtins=self.builtins, profile_threads=self.profile_threads)
        logger.debug("yappi started (clock=%s)", yappi.get_clock_type())

    def stop(self) -> yappi.YFuncStats:
        yappi.stop()
        return yappi.get_func_stats()


class CallgrindWriter:
    """Write yappi function stats as `callgrind.out.<pid>` into a directory."""

    format = REPORT_FORMAT

    def __init__(self, pid: int | None = None) -> None:
        self.pid = pid

    def write(self, result: Any, out_dir: Path) -> Path:
        report = out_dir / paths.report_name(self.pid if self.pid is not None else os.getpid())
        result.save(str(report), type=self.format)
        return report
