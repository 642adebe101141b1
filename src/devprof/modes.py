from __future__ import annotations

import enum


class MeasureMode(str, enum.Enum):
    """Metric sampled by a profiling session."""

    WALL_TIME = "wall"
    CPU_TIME = "cpu"
    PROCESS_TIME = "process"
    ALLOCATIONS = "allocations"
    MEMORY = "memory"
    GC_TIME = "gc_time"
    GC_RUNS = "gc_runs"

    @classmethod
    def parse(cls, value: str | MeasureMode) -> MeasureMode:
        """Accept a member, a member name (`CPU_TIME`) or a value (`cpu`), case-insensitive."""
        if isinstance(value, MeasureMode):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Unknown measure mode {value!r}. Expected a mode name or value.")
        s = value.strip()
        by_name = cls.__members__.get(s.upper())
        if by_name is not None:
            return by_name
        try:
            return cls(s.lower())
        except ValueError:
            choices = ", ".join(m.name for m in cls)
            raise ValueError(f"Unknown measure mode {value!r}. Expected one of: {choices}.") from None
