"""Known-good performance snapshots and their JSON form."""

from __future__ import annotations

import json
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

from .profiler import ExecutionProfile

_U64_MAX = 2**64 - 1
_DIGITS = re.compile(r"[0-9]+")


def _to_micros(seconds: float) -> int:
    return max(0, round(seconds * 1_000_000_000)) // 1000


def _durations_us(profile: ExecutionProfile) -> list[int]:
    return [_to_micros(stats.duration) for stats in profile.task_stats]


def _average(values: Sequence[int]) -> int:
    return sum(values) // len(values) if values else 0


def percentile_us(durations: Sequence[int], pct: int) -> int:
    """The nearest-rank percentile of ``durations``; 0 when empty."""
    if not durations:
        return 0
    ordered = sorted(durations)
    index = (pct * len(ordered)) // 100
    return ordered[min(index, len(ordered) - 1)]


def json_string(text: str) -> str:
    """Quote ``text`` as a JSON string, escaping backslash, quote, CR and LF."""
    escaped = (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f'"{escaped}"'


def _format_float(value: float) -> str:
    if value != value:
        return "NaN"
    return f"{value:.6f}"


def _raw_value(text: str, key: str) -> Optional[str]:
    needle = f'"{key}":'
    start = text.find(needle)
    if start < 0:
        return None
    rest = text[start + len(needle):].lstrip()
    end = len(rest)
    for stop in (",", "}", "\n"):
        position = rest.find(stop)
        if 0 <= position < end:
            end = position
    return rest[:end].strip()


def _require(text: str, key: str) -> str:
    raw = _raw_value(text, key)
    if raw is None:
        raise ValueError(f"missing key: {key}")
    return raw


def _parse_uint(key: str, raw: str, limit: Optional[int] = _U64_MAX) -> int:
    if not _DIGITS.fullmatch(raw):
        raise ValueError(f"parse error for {key}: invalid digit found in string")
    value = int(raw)
    if limit is not None and value > limit:
        raise ValueError(f"parse error for {key}: number too large to fit in target type")
    return value


def _parse_float(key: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"parse error for {key}: invalid float literal") from exc


def _parse_label(text: str) -> str:
    needle = '"label":'
    start = text.find(needle)
    if start < 0:
        raise ValueError("missing key: label")
    rest = text[start + len(needle):].lstrip()
    if rest.startswith('"'):
        try:
            label, _ = json.JSONDecoder().raw_decode(rest)
        except json.JSONDecodeError:
            pass
        else:
            if isinstance(label, str):
                return label
    return _require(text, "label").strip('"')


@dataclass
class Baseline:
    """A snapshot of known-good performance; durations are in microseconds."""

    label: str
    recorded_at_ms: int
    total_duration_us: int
    avg_task_us: int
    p50_us: int
    p95_us: int
    p99_us: int
    parallelism_efficiency: float
    steal_rate: float
    task_count: int

    @classmethod
    def from_profile(cls, profile: ExecutionProfile, label: str) -> "Baseline":
        """Derive a baseline from an execution profile."""
        durations = _durations_us(profile)
        return cls(
            label=str(label),
            recorded_at_ms=time.time_ns() // 1_000_000,
            total_duration_us=_to_micros(profile.total_duration),
            avg_task_us=_average(durations),
            p50_us=percentile_us(durations, 50),
            p95_us=percentile_us(durations, 95),
            p99_us=percentile_us(durations, 99),
            parallelism_efficiency=profile.parallelism_efficiency(),
            steal_rate=0.0,
            task_count=len(profile.task_stats),
        )

    def to_json(self) -> str:
        return (
            "{\n"
            '  "version": 1,\n'
            f'  "label": {json_string(self.label)},\n'
            f'  "recorded_at_ms": {self.recorded_at_ms},\n'
            f'  "total_duration_us": {self.total_duration_us},\n'
            f'  "avg_task_us": {self.avg_task_us},\n'
            f'  "p50_us": {self.p50_us},\n'
            f'  "p95_us": {self.p95_us},\n'
            f'  "p99_us": {self.p99_us},\n'
            f'  "parallelism_efficiency": {_format_float(self.parallelism_efficiency)},\n'
            f'  "steal_rate": {_format_float(self.steal_rate)},\n'
            f'  "task_count": {self.task_count}\n'
            "}"
        )

    @classmethod
    def from_json(cls, text: str) -> "Baseline":
        """Read a baseline from its JSON form; raises ValueError on bad input."""
        label = _parse_label(text)
        recorded_at_ms = _parse_uint(
            "recorded_at_ms", _require(text, "recorded_at_ms"), limit=2**128 - 1
        )

        def uint(key: str) -> int:
            return _parse_uint(key, _require(text, key).strip('"'))

        def real(key: str) -> float:
            return _parse_float(key, _require(text, key).strip('"'))

        return cls(
            label=label,
            recorded_at_ms=recorded_at_ms,
            total_duration_us=uint("total_duration_us"),
            avg_task_us=uint("avg_task_us"),
            p50_us=uint("p50_us"),
            p95_us=uint("p95_us"),
            p99_us=uint("p99_us"),
            parallelism_efficiency=real("parallelism_efficiency"),
            steal_rate=real("steal_rate"),
            task_count=uint("task_count"),
        )

    def save(self, path: Union[str, Path]) -> None:
        with open(path, "w", encoding="utf-8") as handle:
            handle.write(self.to_json())

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Baseline":
        """Load a saved baseline; raises OSError or ValueError."""
        with open(path, encoding="utf-8") as handle:
            return cls.from_json(handle.read())