from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from devprof import api
from devprof.backend import clock_for_mode
from devprof.modes import MeasureMode


class FakeStats:
    """Stand-in for yappi.YFuncStats: `save` writes a small callgrind-like file."""

    def __init__(self, label: str) -> None:
        self.label = label
        self.saved: list[tuple[str, str]] = []

    def save(self, path: str, type: str = "ystat") -> None:
        self.saved.append((path, type))
        Path(path).write_text(f"# {self.label}\nevents: Ticks\n")


class FakeBackend:
    name = "fake"

    def __init__(self, *, fail_start: Exception | None = None) -> None:
        self.fail_start = fail_start
        self.started: list[MeasureMode] = []
        self.stops = 0
        self.running = False

    def clock(self, mode: MeasureMode) -> str:
        return clock_for_mode(mode)

    def version(self) -> str | None:
        return "0.0"

    def start(self, mode: MeasureMode) -> None:
        if self.fail_start is not None:
            raise self.fail_start
        self.started.append(mode)
        self.running = True

    def stop(self) -> FakeStats:
        self.running = False
        self.stops += 1
        return FakeStats(f"stop-{self.stops}")


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture(autouse=True)
def _reset_default_controller() -> Iterator[None]:
    previous = api.set_default_controller(None)
    yield
    api.set_default_controller(previous)


@pytest.fixture(autouse=True)
def _clean_devprof_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("APP_ENV", "DEVPROF_ROOT", "DEVPROF_VIEWER", "DEVPROF_MODE"):
        monkeypatch.delenv(name, raising=False)
