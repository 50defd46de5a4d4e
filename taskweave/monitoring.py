"""Lightweight performance counters for an executor run."""

from __future__ import annotations

import threading
import time
from typing import Optional

from .profiler import format_duration

_NS = 1_000_000_000


def _seconds_to_ns(seconds: float) -> int:
    if seconds < 0:
        raise ValueError("duration must not be negative")
    return round(seconds * _NS)


class PerformanceMetrics:
    """Task counts, steals and per-worker busy/idle time; durations in seconds."""

    def __init__(self, num_workers: int) -> None:
        self.num_workers = num_workers
        self._lock = threading.Lock()
        self._clear()

    def _clear(self) -> None:
        self._completed = 0
        self._stolen = 0
        self._failed = 0
        self._execution_ns = 0
        self._wait_ns = 0
        self._worker_idle_ns = [0] * self.num_workers
        self._worker_busy_ns = [0] * self.num_workers
        self._start_ns: Optional[int] = None

    def _valid_worker(self, worker_id: int) -> bool:
        return 0 <= worker_id < self.num_workers

    def start(self) -> None:
        with self._lock:
            self._start_ns = time.monotonic_ns()

    def record_task_completion(self, duration: float) -> None:
        duration_ns = _seconds_to_ns(duration)
        with self._lock:
            self._completed += 1
            self._execution_ns += duration_ns

    def record_task_steal(self) -> None:
        with self._lock:
            self._stolen += 1

    def record_task_failure(self) -> None:
        with self._lock:
            self._failed += 1

    def record_worker_idle(self, worker_id: int, duration: float) -> None:
        duration_ns = _seconds_to_ns(duration)
        with self._lock:
            if self._valid_worker(worker_id):
                self._worker_idle_ns[worker_id] += duration_ns

    def record_worker_busy(self, worker_id: int, duration: float) -> None:
        duration_ns = _seconds_to_ns(duration)
        with self._lock:
            if self._valid_worker(worker_id):
                self._worker_busy_ns[worker_id] += duration_ns

    def tasks_completed(self) -> int:
        with self._lock:
            return self._completed

    def tasks_stolen(self) -> int:
        with self._lock:
            return self._stolen

    def tasks_failed(self) -> int:
        with self._lock:
            return self._failed

    def total_execution_time(self) -> float:
        with self._lock:
            return self._execution_ns / _NS

    def average_task_duration(self) -> float:
        with self._lock:
            if self._completed == 0:
                return 0.0
            return (self._execution_ns // self._completed) / _NS

    def tasks_per_second(self) -> float:
        with self._lock:
            if self._start_ns is None:
                return 0.0
            elapsed = (time.monotonic_ns() - self._start_ns) / _NS
            return self._completed / elapsed if elapsed > 0 else 0.0

    def worker_utilization(self, worker_id: int) -> float:
        """Busy time as a percentage of the worker's recorded time."""
        with self._lock:
            return self._utilization(worker_id)

    def _utilization(self, worker_id: int) -> float:
        if not self._valid_worker(worker_id):
            return 0.0
        busy = self._worker_busy_ns[worker_id]
        total = busy + self._worker_idle_ns[worker_id]
        return 0.0 if total == 0 else (busy / total) * 100.0

    def average_worker_utilization(self) -> float:
        with self._lock:
            if self.num_workers == 0:
                return 0.0
            return sum(self._utilization(w) for w in range(self.num_workers)) / self.num_workers

    def steal_rate(self) -> float:
        """Stolen tasks as a percentage of completed tasks."""
        with self._lock:
            if self._completed == 0:
                return 0.0
            return (self._stolen / self._completed) * 100.0

    def reset(self) -> None:
        """Zero every counter and forget the start time."""
        with self._lock:
            self._clear()

    def summary(self) -> str:
        lines = [
            "=== Performance Metrics ===",
            f"Tasks Completed: {self.tasks_completed()}",
            f"Tasks Stolen: {self.tasks_stolen()} ({self.steal_rate():.2f}%)",
            f"Tasks Failed: {self.tasks_failed()}",
            f"Average Task Duration: {format_duration(self.average_task_duration())}",
            f"Tasks/Second: {self.tasks_per_second():.2f}",
            f"Average Worker Utilization: {self.average_worker_utilization():.2f}%",
            "",
            "Worker Utilization:",
        ]
        lines.extend(
            f"  Worker {worker_id}: {self.worker_utilization(worker_id):.2f}%"
            for worker_id in range(self.num_workers)
        )
        return "\n".join(lines) + "\n"