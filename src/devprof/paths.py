from __future__ import annotations

from pathlib import Path

REPORT_PREFIX = "callgrind.out."
REPORT_GLOB = f"{REPORT_PREFIX}*"
METADATA_NAME = "meta.json"


def report_dir(root: Path) -> Path:
    """Return the fixed report directory `<root>/tmp/ruby_prof_report`."""
    return root / "tmp" / "ruby_prof_report"


def report_name(pid: int) -> str:
    """Return the callgrind file name for a process, e.g. `callgrind.out.12345`."""
    return f"{REPORT_PREFIX}{pid}"


def find_project_root(start: Path | None = None) -> Path:
    """Return the nearest ancestor of `start` holding a `pyproject.toml`.

    Falls back to `start` itself (default: the working directory) when no
    project marker is found, so scripts run outside a project still get a
    usable root.
    """
    here = (start or Path.cwd()).resolve()
    for parent in (here, *here.parents):
        if (parent / "pyproject.toml").is_file():
            return parent
    return here
