"""Collecting per-task timings and summarising an execution."""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass, field
from typing import Optional

_NS = 1_000_000_000


def _to_ns(seconds: float) -> int:
    return round(seconds * _NS)


def format_duration(seconds: float) -> str:
    """Render a duration as ``1.5s``, ``100ms``, ``150µs`` or ``10ns``."""
    total_ns = _to_ns(seconds)
    if total_ns < 0:
        raise ValueError("duration must not be negative")
    if total_ns >= _NS:
        divisor, digits, unit = _NS, 9, "s"
    elif total_ns >= 1_000_000:
        divisor, digits, unit = 1_000_000, 6, "ms"
    elif total_ns >= 1_000:
        divisor, digits, unit = 1_000, 3, "µs"
    else:
        return f"{total_ns}ns"
    whole, frac = divmod(total_ns, divisor)
    frac_text = f"{frac:0{digits}d}".rstrip("0")
    return f"{whole}.{frac_text}{unit}" if frac_text else f"{whole}{unit}"


@dataclass
class TaskStats:
    """Timing of one executed task; times are in seconds."""

    task_id: int
    name: Optional[str]
    start_time: float
    duration: float
    worker_id: int
    num_dependencies: int


@dataclass
class ExecutionProfile:
    """Statistics of one run; times are in seconds."""

    start_time: float
    total_duration: float
    task_stats: list[TaskStats] = field(default_factory=list)
    num_workers: int = 1

    def critical_path_duration(self) -> float:
        """The longest single task duration."""
        return max((s.duration for s in self.task_stats), default=0.0)

    def average_task_duration(self) -> float:
        if not self.task_stats:
            return 0.0
        total_ns = sum(_to_ns(s.duration) for s in self.task_stats)
        return (total_ns // len(self.task_stats)) / _NS

    def longest_task(self) -> Optional[TaskStats]:
        """The task that ran longest; the last one on ties."""
        if not self.task_stats:
            return None
        return max(reversed(self.task_stats), key=lambda s: s.duration)

    def shortest_task(self) -> Optional[TaskStats]:
        """The task that ran shortest; the first one on ties."""
        if not self.task_stats:
            return None
        return min(self.task_stats, key=lambda s: s.duration)

    def parallelism_efficiency(self) -> float:
        """Work done as a percentage of the time all workers were available."""
        if self.total_duration == 0:
            return 0.0
        total_work = sum(s.duration for s in self.task_stats)
        capacity = self.total_duration * self.num_workers
        if capacity == 0:
            return math.inf if total_work > 0 else math.nan
        return total_work / capacity * 100.0

    def worker_timeline(self) -> dict[int, list[TaskStats]]:
        """Tasks grouped by worker, each group ordered by start time."""
        timeline: dict[int, list[TaskStats]] = {}
        for stats in self.task_stats:
            timeline.setdefault(stats.worker_id, []).append(stats)
        for tasks in timeline.values():
            tasks.sort(key=lambda s: s.start_time)
        return timeline

    def summary(self) -> str:
        lines = [
            "=== Execution Profile Summary ===",
            f"Total Duration: {format_duration(self.total_duration)}",
            f"Tasks Executed: {len(self.task_stats)}",
            f"Workers Used: {self.num_workers}",
            f"Average Task Duration: {format_duration(self.average_task_duration())}",
            f"Parallelism Efficiency: {self.parallelism_efficiency():.2f}%",
        ]
        longest = self.longest_task()
        if longest is not None:
            label = longest.name if longest.name is not None else f"task_{longest.task_id}"
            lines.append(f"Longest Task: {label} ({format_duration(longest.duration)})")
        shortest = self.shortest_task()
        if shortest is not None:
            label = shortest.name if shortest.name is not None else f"task_{shortest.task_id}"
            lines.append(f"Shortest Task: {label} ({format_duration(shortest.duration)})")
        return "\n".join(lines) + "\n"


class Profiler:
    """Thread-safe collector of task statistics; disabled until enabled."""

    def __init__(self, num_workers: int) -> None:
        self.num_workers = num_workers
        self._lock = threading.Lock()
        self._enabled = False
        self._stats: list[TaskStats] = []
        self._start_time: Optional[float] = None

    def enable(self) -> None:
        with self._lock:
            self._enabled = True

    def disable(self) -> None:
        with self._lock:
            self._enabled = False

    def is_enabled(self) -> bool:
        with self._lock:
            return self._enabled

    def start_run(self) -> None:
        """Mark the start of a run and drop earlier statistics."""
        with self._lock:
            if self._enabled:
                self._start_time = time.perf_counter()
                self._stats.clear()

    def record_task(
        self,
        task_id: int,
        name: Optional[str],
        start_time: float,
        duration: float,
        worker_id: int,
        num_dependencies: int,
    ) -> None:
        """Record one executed task; ignored while disabled."""
        with self._lock:
            if self._enabled:
                self._stats.append(
                    TaskStats(task_id, name, start_time, duration, worker_id, num_dependencies)
                )

    def get_profile(self) -> Optional[ExecutionProfile]:
        """The profile of the current run, or None if disabled, not started or empty."""
        with self._lock:
            if not self._enabled or self._start_time is None or not self._stats:
                return None
            start = self._start_time
            stats = list(self._stats)
        end_time = max(s.start_time + s.duration for s in stats)
        return ExecutionProfile(
            start_time=start,
            total_duration=max(0.0, end_time - start),
            task_stats=stats,
            num_workers=self.num_workers,
        )

    def reset(self) -> None:
        with self._lock:
            self._stats.clear()
            self._start_time = None