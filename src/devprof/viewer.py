from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
import threading
from pathlib import Path

from .errors import ViewerLaunchError
from .model import ViewerLaunch

logger = logging.getLogger(__name__)


def _reap(proc: subprocess.Popen[bytes]) -> None:
    rc = proc.wait()
    logger.debug("Viewer pid %d exited with %d", proc.pid, rc)


def build_viewer_argv(viewer: str, report: Path) -> list[str]:
    """Return `[<viewer executable>, <viewer args...>, <report>]`.

    `viewer` is a command string (e.g. `qcachegrind`); the executable is resolved on PATH.
    """
    parts = shlex.split(viewer)
    if not parts:
        raise ViewerLaunchError("No viewer command configured")
    exe = shutil.which(parts[0])
    if exe is None:
        raise ViewerLaunchError(f"{parts[0]} not found on PATH")
    return [exe, *parts[1:], str(report)]


def launch_viewer(report: Path, *, viewer: str = "qcachegrind") -> ViewerLaunch:
    """Spawn the viewer on `report` without waiting for it.

    The child runs in its own session with stdio detached, so it outlives the
    caller. A daemon thread waits on it so it never lingers as a zombie; the
    returned handle can still be polled or waited on.
    """
    argv = build_viewer_argv(viewer, report)
    try:
        proc = subprocess.Popen(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as e:
        raise ViewerLaunchError(f"Failed to launch {shlex.join(argv)}: {e}") from e
    logger.info("Opened %s in %s (pid %d)", report, argv[0], proc.pid)
    threading.Thread(target=_reap, args=(proc,), name=f"devprof-viewer-{proc.pid}", daemon=True).start()
    return ViewerLaunch(report=report, argv=argv, process=proc)
