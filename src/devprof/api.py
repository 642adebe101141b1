"""
Module-level profiling calls for use anywhere in application code.

Usage:

    import devprof

    devprof.start_profiling()                 # or start_profiling(MeasureMode.CPU_TIME)
    ...
    devprof.stop_profiling()                  # writes <root>/tmp/ruby_prof_report/callgrind.out.<pid>
    devprof.stop_profiling_and_open()         # ... and opens it in qcachegrind

The functions delegate to a default `SessionController` built lazily from
`ProfilerSettings.from_env()`. `install_profiling` registers its controller as
the default; tests can swap it with `set_default_controller`.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

from .config import ProfilerSettings
from .controller import SessionController
from .model import Session, ViewerLaunch
from .modes import MeasureMode

_default_lock = threading.Lock()
_default: SessionController | None = None


def get_default_controller() -> SessionController:
    global _default
    with _default_lock:
        if _default is None:
            _default = SessionController(ProfilerSettings.from_env())
        return _default


def set_default_controller(controller: SessionController | None) -> SessionController | None:
    """Replace the default controller (None resets it). Returns the previous one."""
    global _default
    with _default_lock:
        previous, _default = _default, controller
        return previous


def start_profiling(mode: MeasureMode | str = MeasureMode.WALL_TIME) -> Session:
    return get_default_controller().start_profiling(mode)


def stop_profiling() -> Path:
    return get_default_controller().stop_profiling()


def stop_profiling_and_open() -> ViewerLaunch | None:
    return get_default_controller().stop_profiling_and_open()


def save_profile_results(result: Any) -> Path:
    return get_default_controller().save_profile_results(result)


def open_latest_profile_report() -> ViewerLaunch | None:
    return get_default_controller().open_latest_profile_report()
