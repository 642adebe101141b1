from __future__ import annotations

import sys

from devprof import paths
from devprof.config import ProfilerSettings
from devprof.controller import SessionController
from devprof.errors import ViewerLaunchError
from devprof.modes import MeasureMode


def _work() -> int:
    return sum(len(str(i)) for i in range(200_000))


def main() -> int:
    settings = ProfilerSettings(root=paths.find_project_root())
    controller = SessionController(settings)

    with controller.profile(MeasureMode.WALL_TIME):
        _work()

    print(f"Report dir: {controller.report_dir}")
    try:
        launch = controller.open_latest_profile_report()
    except ViewerLaunchError as e:
        print(f"Skipping viewer: {e}", file=sys.stderr)
        return 0
    if launch is not None:
        print(f"Viewer pid: {launch.pid}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
