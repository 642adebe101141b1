"""
Report directory management.

All reports live in a single directory (`<root>/tmp/ruby_prof_report/`). Saving a
new report wipes the directory first, so it only ever holds the outputs of the
most recent stop:

- `callgrind.out.<pid>`: the call graph, in callgrind format
- `meta.json`: session metadata (validated against `schemas/session_meta.schema.json` on read)
- `README.md`: how to open the report
"""

from __future__ import annotations

import json
import logging
import shlex
import shutil
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator, ValidationError
from mdutils.mdutils import MdUtils  # type: ignore[import-untyped]

from . import paths
from .backend import ReportWriter
from .errors import DirectoryAccessError, MetadataError, NoReportFoundError, ReportWriteError
from .model import SessionMetadata

logger = logging.getLogger(__name__)

_SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "session_meta.schema.json"


def clear_directory(path: Path) -> None:
    """Remove every entry of `path` (recursively). A missing directory is left alone."""
    if not path.exists():
        return
    for entry in path.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()
    logger.debug("Cleared report directory %s", path)


def prepare_report_dir(out_dir: Path) -> None:
    """Clear and (re)create the report directory."""
    try:
        clear_directory(out_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryAccessError(f"Cannot prepare report directory {out_dir}: {e}") from e


def save_profile_results(result: Any, *, out_dir: Path, writer: ReportWriter) -> Path:
    """Persist a profile result as the only report in `out_dir` and return its path."""
    prepare_report_dir(out_dir)
    try:
        report = writer.write(result, out_dir)
    except Exception as e:
        raise ReportWriteError(f"Failed to write report into {out_dir}: {e}") from e
    logger.info("Profile report written to %s", report)
    return report


def list_reports(out_dir: Path) -> list[Path]:
    if not out_dir.is_dir():
        return []
    return sorted(p for p in out_dir.glob(paths.REPORT_GLOB) if p.is_file())


def find_latest_report(out_dir: Path) -> Path | None:
    """Return the most recently modified callgrind report, or None.

    Ties on modification time are broken by file name so the choice is stable.
    """
    stamped: list[tuple[float, str, Path]] = []
    for p in list_reports(out_dir):
        try:
            mtime = p.stat().st_mtime
        except FileNotFoundError:
            # Removed by a concurrent save after the directory was listed.
            continue
        stamped.append((mtime, p.name, p))
    if not stamped:
        return None
    return max(stamped)[2]


def require_latest_report(out_dir: Path) -> Path:
    report = find_latest_report(out_dir)
    if report is None:
        raise NoReportFoundError(f"No profile report found in {out_dir}")
    return report


def _write_json(path: Path, obj: Any) -> None:
    """Write JSON with stable formatting (indent + sorted keys)."""
    path.write_text(json.dumps(obj, indent=2, sort_keys=True) + "\n")


def validate_metadata(payload: dict[str, Any], *, schema_path: Path | None = None) -> None:
    schema_path = _SCHEMA_PATH if schema_path is None else schema_path
    schema = json.loads(schema_path.read_text())
    Draft202012Validator(schema).validate(payload)


def write_metadata(out_dir: Path, meta: SessionMetadata) -> Path:
    path = out_dir / paths.METADATA_NAME
    _write_json(path, meta.to_dict())
    return path


def read_metadata(out_dir: Path) -> SessionMetadata:
    path = out_dir / paths.METADATA_NAME
    if not path.is_file():
        raise MetadataError(f"Missing report metadata: {path}")
    try:
        payload = json.loads(path.read_text())
        validate_metadata(payload)
    except (json.JSONDecodeError, ValidationError) as e:
        raise MetadataError(f"Invalid report metadata {path}: {e}") from e
    return SessionMetadata.from_dict(payload)


def write_readme(out_dir: Path, report: Path, *, meta: SessionMetadata, viewer: str) -> Path:
    """Write `README.md` describing the report and how to open it."""
    open_cmd = shlex.join([*shlex.split(viewer), str(report)])
    md = MdUtils(file_name=str(out_dir / "README"), title="Profile Report")
    md.new_paragraph(f"Call graph captured by {meta.tool.get('name')} in `{meta.mode}` mode (clock: `{meta.clock}`).")
    md.new_header(level=1, title="Open")
    md.new_paragraph(f"`{open_cmd}`")
    md.new_header(level=1, title="Session")
    md.new_list(
        [
            f"started: {meta.started_at}",
            f"finished: {meta.finished_at}",
            f"duration: {meta.duration_s:.3f} s",
            f"pid: {meta.pid}",
            f"command: `{shlex.join(meta.command)}`" if meta.command else "command: (none)",
        ]
    )
    md.new_header(level=1, title="Outputs")
    md.new_list(
        [
            f"`{report.name}`: call graph (callgrind)",
            f"`{paths.METADATA_NAME}`: session metadata",
        ]
    )
    md.create_md_file()
    return out_dir / "README.md"
