"""Cache and CPU information read from sysfs, and OS-level thread binding."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union


@dataclass
class CacheInfo:
    """One CPU cache instance."""

    level: int
    size_kb: int
    line_size: int
    associativity: int
    shared_cpus: list[int] = field(default_factory=list)

    def is_unified(self) -> bool:
        """True for L2 and above, which usually hold instructions and data."""
        return self.level >= 2


@dataclass
class PackageInfo:
    """A physical CPU package (socket)."""

    id: int
    cpus: list[int] = field(default_factory=list)
    numa_nodes: list[int] = field(default_factory=list)


class BindError(Exception):
    """Pinning a thread to CPUs failed."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"CPU binding error: {self.message}"


def _parse_uint(text: str) -> Optional[int]:
    text = text.strip()
    if text.isascii() and text.isdigit():
        return int(text)
    return None


def _cpu_count() -> int:
    if hasattr(os, "sched_getaffinity"):
        try:
            return max(1, len(os.sched_getaffinity(0)))
        except OSError:
            pass
    return os.cpu_count() or 1


def parse_cpu_list(text: str) -> list[int]:
    """Parse a sysfs CPU list such as ``0-3,8``; malformed parts are skipped."""
    cpus: list[int] = []
    for part in text.strip().split(","):
        part = part.strip()
        if "-" in part:
            low_text, high_text = part.split("-", 1)
            low, high = _parse_uint(low_text), _parse_uint(high_text)
            if low is not None and high is not None:
                cpus.extend(range(low, high + 1))
        else:
            value = _parse_uint(part)
            if value is not None:
                cpus.append(value)
    return cpus


def parse_cache_size_kb(text: str) -> Optional[int]:
    """Parse a sysfs cache size (``32K``, ``8M`` or bytes) into kilobytes."""
    text = text.strip()
    if text.endswith("K"):
        return _parse_uint(text[:-1])
    if text.endswith("M"):
        value = _parse_uint(text[:-1])
        return None if value is None else value * 1024
    value = _parse_uint(text)
    return None if value is None else value // 1024


def _read_text(path: Path) -> Optional[str]:
    try:
        return path.read_text()
    except OSError:
        return None


def _read_uint(path: Path) -> Optional[int]:
    text = _read_text(path)
    return None if text is None else _parse_uint(text)


def probe_caches(
    sysfs_root: Union[str, Path] = "/sys", cpu_count: Optional[int] = None
) -> list[CacheInfo]:
    """Read the cache hierarchy, one entry per cache instance.

    Falls back to a single synthetic 8 MB L3 shared by all CPUs when
    nothing can be read.
    """
    if cpu_count is None:
        cpu_count = _cpu_count()
    cpu_dir = Path(sysfs_root) / "devices" / "system" / "cpu"
    caches: list[CacheInfo] = []

    for cpu in range(cpu_count):
        try:
            entries = sorted((cpu_dir / f"cpu{cpu}" / "cache").iterdir())
        except OSError:
            continue
        for entry in entries:
            level = _read_uint(entry / "level") or 0
            if level == 0:
                continue
            size_text = _read_text(entry / "size")
            size_kb = (parse_cache_size_kb(size_text) if size_text is not None else None) or 0
            line_size = _read_uint(entry / "coherency_line_size")
            shared_cpus = parse_cpu_list(_read_text(entry / "shared_cpu_list") or "")
            if not shared_cpus or shared_cpus[0] != cpu:
                continue
            caches.append(
                CacheInfo(
                    level=level,
                    size_kb=size_kb,
                    line_size=64 if line_size is None else line_size,
                    associativity=0,
                    shared_cpus=shared_cpus,
                )
            )

    caches.sort(key=lambda c: (c.level, c.shared_cpus[0] if c.shared_cpus else 0))

    if not caches:
        caches.append(
            CacheInfo(
                level=3,
                size_kb=8192,
                line_size=64,
                associativity=0,
                shared_cpus=list(range(cpu_count)),
            )
        )
    return caches


def bind_thread_os(cpus: Iterable[int]) -> None:
    """Pin the calling thread to ``cpus``; an empty set does nothing."""
    cpu_set = set(cpus)
    if not cpu_set:
        return
    if hasattr(os, "sched_setaffinity"):
        try:
            os.sched_setaffinity(0, cpu_set)
        except OSError as exc:
            raise BindError(f"sched_setaffinity failed: errno={exc.errno}") from exc
        except (ValueError, OverflowError) as exc:
            raise BindError(f"sched_setaffinity failed: {exc}") from exc
        return
    if sys.platform == "darwin":
        raise BindError("Thread affinity not supported on macOS")
    raise BindError("Thread affinity not implemented on this platform")