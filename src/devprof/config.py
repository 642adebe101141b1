from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

import attrs

from . import paths
from .modes import MeasureMode

DEFAULT_ENVIRONMENT = "development"
DEFAULT_VIEWER = "qcachegrind"
ENABLED_ENVIRONMENTS: tuple[str, ...] = ("development", "test")


@attrs.define(frozen=True, slots=True)
class ProfilerSettings:
    """Runtime settings, resolved once at application startup."""

    environment: str = DEFAULT_ENVIRONMENT
    root: Path = attrs.field(factory=paths.find_project_root, converter=Path)
    viewer: str = DEFAULT_VIEWER
    default_mode: MeasureMode = attrs.field(default=MeasureMode.WALL_TIME, converter=MeasureMode.parse)
    enabled_environments: tuple[str, ...] = ENABLED_ENVIRONMENTS

    @property
    def enabled(self) -> bool:
        return self.environment in self.enabled_environments

    @property
    def report_dir(self) -> Path:
        return paths.report_dir(self.root)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ProfilerSettings":
        """Build settings from `APP_ENV`, `DEVPROF_ROOT`, `DEVPROF_VIEWER` and `DEVPROF_MODE`."""
        env = os.environ if environ is None else environ
        root = env.get("DEVPROF_ROOT")
        return cls(
            environment=env.get("APP_ENV", DEFAULT_ENVIRONMENT).strip().lower(),
            root=Path(root).expanduser().resolve() if root else paths.find_project_root(),
            viewer=env.get("DEVPROF_VIEWER", DEFAULT_VIEWER),
            default_mode=env.get("DEVPROF_MODE", MeasureMode.WALL_TIME.name),
        )
