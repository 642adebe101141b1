from __future__ import annotations

import argparse
import json
import logging
import runpy
import sys
from pathlib import Path

import attrs

from . import report
from .config import ProfilerSettings
from .controller import SessionController
from .errors import DevprofError, NoReportFoundError
from .modes import MeasureMode


def _abs_path(p: str) -> Path:
    return Path(p).expanduser().resolve()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="devprof",
        description="Capture yappi profiles as callgrind reports and open them in a viewer.",
    )
    parser.add_argument("--root", type=_abs_path, default=None, help="Project root (reports go to <root>/tmp/ruby_prof_report).")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("open", help="Open the latest report in the configured viewer.")
    sub.add_parser("info", help="Print metadata of the latest report as JSON.")

    run = sub.add_parser("run", help="Run a Python script under the profiler and save a report.")
    run.add_argument("--mode", default=None, help="Measure mode, e.g. WALL_TIME or cpu (default: DEVPROF_MODE or WALL_TIME).")
    run.add_argument("--open", action="store_true", help="Open the report when the script finishes.")
    run.add_argument("script", help="Path to the script.")
    run.add_argument("script_args", nargs=argparse.REMAINDER, help="Arguments passed to the script.")

    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


def _exit_code(code: object) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    print(code, file=sys.stderr)
    return 1


def run_script(controller: SessionController, *, script: Path, script_args: list[str], mode: MeasureMode | None, open_report: bool) -> int:
    """Run `script` as `__main__` between start/stop and save the report.

    The report is saved even when the script exits via SystemExit; other
    exceptions propagate after the report is written.
    """
    if not script.is_file():
        print(f"Script not found: {script}", file=sys.stderr)
        return 2

    controller.start_profiling(mode)
    saved_argv = sys.argv[:]
    saved_path = sys.path[:]
    sys.argv = [str(script), *script_args]
    sys.path.insert(0, str(script.parent))
    exit_code = 0
    try:
        try:
            runpy.run_path(str(script), run_name="__main__")
        except SystemExit as e:
            exit_code = _exit_code(e.code)
        finally:
            report_path = controller.stop_profiling()
    finally:
        sys.argv = saved_argv
        sys.path[:] = saved_path

    print(report_path)
    if open_report:
        controller.open_latest_profile_report()
    return exit_code


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    _configure_logging(ns.verbose)

    settings = ProfilerSettings.from_env()
    if ns.root is not None:
        settings = attrs.evolve(settings, root=ns.root)
    controller = SessionController(settings)

    try:
        if ns.cmd == "open":
            return 0 if controller.open_latest_profile_report() is not None else 1
        if ns.cmd == "info":
            report.require_latest_report(controller.report_dir)
            meta = report.read_metadata(controller.report_dir)
            print(json.dumps(meta.to_dict(), indent=2, sort_keys=True))
            return 0
        if ns.cmd == "run":
            mode = None if ns.mode is None else MeasureMode.parse(ns.mode)
            return run_script(
                controller,
                script=_abs_path(ns.script),
                script_args=list(ns.script_args),
                mode=mode,
                open_report=ns.open,
            )
    except NoReportFoundError as e:
        print(str(e), file=sys.stderr)
        return 1
    except (DevprofError, ValueError) as e:
        print(str(e), file=sys.stderr)
        return 2

    raise AssertionError(f"Unhandled cmd: {ns.cmd}")


if __name__ == "__main__":
    raise SystemExit(main())
