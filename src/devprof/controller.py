"""
Session controller: the start/stop lifecycle of one profiling session.

State is Idle or Active. `start_profiling` moves Idle -> Active, `stop_profiling`
moves Active -> Idle and persists the report. Starting while Active is refused
and stopping while Idle raises `NoActiveSessionError`.

A controller owns its session explicitly; the process-wide default instance
used by the module-level functions lives in `devprof.api`.
"""

from __future__ import annotations

import logging
import os
import platform
import sys
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from . import report as report_store
from .backend import CallgrindWriter, ProfilerBackend, ReportWriter, YappiBackend
from .config import ProfilerSettings
from .errors import NoActiveSessionError, SessionAlreadyActiveError
from .model import Session, SessionMetadata, ViewerLaunch
from .modes import MeasureMode
from .viewer import launch_viewer

logger = logging.getLogger(__name__)

Launcher = Callable[[Path], ViewerLaunch]


def _utc_now_iso() -> str:
    """Return the current UTC time in ISO-8601 format."""
    return datetime.now(timezone.utc).isoformat()


def _host_info() -> dict[str, str]:
    return {"platform": platform.platform(), "machine": platform.machine(), "python": platform.python_version()}


class SessionController:
    def __init__(
        self,
        settings: ProfilerSettings | None = None,
        *,
        backend: ProfilerBackend | None = None,
        writer: ReportWriter | None = None,
        launcher: Launcher | None = None,
    ) -> None:
        self.settings = ProfilerSettings() if settings is None else settings
        self.backend: ProfilerBackend = YappiBackend() if backend is None else backend
        self.writer: ReportWriter = CallgrindWriter() if writer is None else writer
        self._launcher = launcher
        self._session: Session | None = None
        self._lock = threading.RLock()

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def is_active(self) -> bool:
        return self._session is not None

    @property
    def report_dir(self) -> Path:
        return self.settings.report_dir

    def start_profiling(self, mode: MeasureMode | str | None = None) -> Session:
        """Start a session. Errors from the profiler backend propagate unchanged."""
        mode = self.settings.default_mode if mode is None else MeasureMode.parse(mode)
        with self._lock:
            if self._session is not None:
                raise SessionAlreadyActiveError(
                    f"A {self._session.mode.name} session started at {self._session.started_at} is still active"
                )
            self.backend.start(mode)
            self._session = Session(
                mode=mode,
                started_at=_utc_now_iso(),
                started_monotonic=time.monotonic(),
                pid=os.getpid(),
            )
            logger.info("Profiling started (%s)", mode.name)
            return self._session

    def stop_profiling(self) -> Path:
        """Stop the active session and save its report. Returns the report path."""
        with self._lock:
            session = self._session
            if session is None:
                raise NoActiveSessionError("stop_profiling called without an active session")
            try:
                result = self.backend.stop()
            finally:
                self._session = None
            logger.info("Profiling stopped (%s)", session.mode.name)
            return self.save_profile_results(result, session=session)

    def stop_profiling_and_open(self) -> ViewerLaunch | None:
        with self._lock:
            self.stop_profiling()
            return self.open_latest_profile_report()

    def save_profile_results(self, result: Any, *, session: Session | None = None) -> Path:
        """Replace the contents of the report directory with a report for `result`.

        When the producing session is known, `meta.json` and `README.md` are
        written next to the report.
        """
        out_dir = self.report_dir
        with self._lock:
            report = report_store.save_profile_results(result, out_dir=out_dir, writer=self.writer)
            if session is not None:
                meta = self._session_metadata(session, report)
                report_store.write_metadata(out_dir, meta)
                report_store.write_readme(out_dir, report, meta=meta, viewer=self.settings.viewer)
            return report

    def open_latest_profile_report(self) -> ViewerLaunch | None:
        """Open the newest report in the viewer. Logs and returns None when there is none."""
        with self._lock:
            report = report_store.find_latest_report(self.report_dir)
            if report is None:
                logger.warning("No profile report found.")
                return None
            return self._launch(report)

    @contextmanager
    def profile(self, mode: MeasureMode | str | None = None) -> Iterator[Session]:
        session = self.start_profiling(mode)
        try:
            yield session
        finally:
            self.stop_profiling()

    def _launch(self, report: Path) -> ViewerLaunch:
        if self._launcher is not None:
            return self._launcher(report)
        return launch_viewer(report, viewer=self.settings.viewer)

    def _session_metadata(self, session: Session, report: Path) -> SessionMetadata:
        return SessionMetadata(
            mode=session.mode.name,
            clock=self.backend.clock(session.mode),
            started_at=session.started_at,
            finished_at=_utc_now_iso(),
            duration_s=max(0.0, time.monotonic() - session.started_monotonic),
            pid=session.pid,
            report=report.name,
            command=list(sys.argv),
            host=_host_info(),
            tool={"name": self.backend.name, "version": self.backend.version()},
        )
