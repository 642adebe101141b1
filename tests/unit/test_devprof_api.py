from __future__ import annotations

from pathlib import Path

import pytest

import devprof
from conftest import FakeBackend
from devprof import api
from devprof.config import ProfilerSettings
from devprof.controller import SessionController
from devprof.errors import NoActiveSessionError
from devprof.modes import MeasureMode


def test_module_level_functions_use_default_controller(tmp_path: Path, fake_backend: FakeBackend) -> None:
    controller = SessionController(ProfilerSettings(root=tmp_path), backend=fake_backend)
    api.set_default_controller(controller)

    with pytest.raises(NoActiveSessionError):
        devprof.stop_profiling()

    devprof.start_profiling(MeasureMode.CPU_TIME)
    assert controller.is_active
    path = devprof.stop_profiling()
    assert path.parent == tmp_path / "tmp" / "ruby_prof_report"
    assert fake_backend.started == [MeasureMode.CPU_TIME]


def test_start_profiling_defaults_to_wall_time(tmp_path: Path, fake_backend: FakeBackend) -> None:
    api.set_default_controller(
        SessionController(ProfilerSettings(root=tmp_path, default_mode=MeasureMode.GC_RUNS), backend=fake_backend)
    )
    devprof.start_profiling()
    assert fake_backend.started == [MeasureMode.WALL_TIME]


def test_module_level_save_and_open(tmp_path: Path, fake_backend: FakeBackend) -> None:
    api.set_default_controller(SessionController(ProfilerSettings(root=tmp_path), backend=fake_backend))
    assert devprof.open_latest_profile_report() is None
    path = devprof.save_profile_results(fake_backend.stop())
    assert path.is_file()


def test_default_controller_is_built_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEVPROF_ROOT", str(tmp_path))
    monkeypatch.setenv("DEVPROF_VIEWER", "kcachegrind")
    c = api.get_default_controller()
    assert c is api.get_default_controller()
    assert c.settings.root == tmp_path.resolve()
    assert c.settings.viewer == "kcachegrind"


def test_set_default_controller_returns_previous(tmp_path: Path) -> None:
    a = SessionController(ProfilerSettings(root=tmp_path))
    assert api.set_default_controller(a) is None
    assert api.set_default_controller(None) is a
