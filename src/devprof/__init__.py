"""
Development-time profiling for Starlette applications.

This package starts and stops yappi profiling sessions from request-handling
code and writes the resulting call graph as a callgrind report under
`<root>/tmp/ruby_prof_report/` for inspection in an external viewer such as
qcachegrind.
"""

from __future__ import annotations

from .api import (
    open_latest_profile_report,
    save_profile_results,
    start_profiling,
    stop_profiling,
    stop_profiling_and_open,
)
from .modes import MeasureMode

__all__ = [
    "MeasureMode",
    "open_latest_profile_report",
    "save_profile_results",
    "start_profiling",
    "stop_profiling",
    "stop_profiling_and_open",
]
