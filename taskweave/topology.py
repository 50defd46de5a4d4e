"""Hardware topology discovery behind one backend-agnostic interface."""

from __future__ import annotations

import abc
import copy
import logging
import os
from pathlib import Path
from typing import Iterable, Optional, Union

from .numa import NumaNode, NumaTopology
from .sysfs import CacheInfo, PackageInfo, bind_thread_os, probe_caches

logger = logging.getLogger(__name__)


def _cpu_count() -> int:
    if hasattr(os, "sched_getaffinity"):
        try:
            return max(1, len(os.sched_getaffinity(0)))
        except OSError:
            pass
    return os.cpu_count() or 1


def _packages_from_numa(numa: NumaTopology) -> list[PackageInfo]:
    """Without finer data, every NUMA node is treated as its own package."""
    return [
        PackageInfo(id=node.id, cpus=list(node.cpus), numa_nodes=[node.id])
        for node in numa.nodes
    ]


class HwTopology(abc.ABC):
    """What every topology backend can tell about the machine."""

    @abc.abstractmethod
    def numa_nodes(self) -> list[NumaNode]:
        """The NUMA nodes of the machine."""

    @abc.abstractmethod
    def cpu_count(self) -> int:
        """Total number of logical CPUs."""

    @abc.abstractmethod
    def packages(self) -> list[PackageInfo]:
        """Physical packages (sockets)."""

    @abc.abstractmethod
    def cache_info(self) -> list[CacheInfo]:
        """Cache instances ordered by level, then by first shared CPU."""

    @abc.abstractmethod
    def bind_thread(self, cpus: Iterable[int]) -> None:
        """Pin the calling thread to ``cpus``; raises BindError on failure."""

    @abc.abstractmethod
    def numa_node_for_cpu(self, cpu: int) -> Optional[int]:
        """The NUMA node owning ``cpu``, or None."""

    @abc.abstractmethod
    def is_hwloc_backed(self) -> bool:
        """True when the data comes from hwloc."""

    @abc.abstractmethod
    def backend_name(self) -> str:
        """A short name of the backend for diagnostics."""


class SysfsBackend(HwTopology):
    """Topology read from sysfs, with approximations where data is missing."""

    def __init__(
        self,
        numa: NumaTopology,
        caches: Iterable[CacheInfo],
        packages: Optional[Iterable[PackageInfo]] = None,
    ) -> None:
        self._numa = numa
        self._caches = list(caches)
        self._packages = (
            _packages_from_numa(numa) if packages is None else list(packages)
        )

    @classmethod
    def detect(cls, sysfs_root: Union[str, Path] = "/sys") -> "SysfsBackend":
        """Detect NUMA layout and caches from the system."""
        numa = NumaTopology.detect()
        return cls(numa, probe_caches(sysfs_root), _packages_from_numa(numa))

    def numa_nodes(self) -> list[NumaNode]:
        return self._numa.nodes

    def cpu_count(self) -> int:
        return _cpu_count()

    def packages(self) -> list[PackageInfo]:
        return copy.deepcopy(self._packages)

    def cache_info(self) -> list[CacheInfo]:
        return copy.deepcopy(self._caches)

    def bind_thread(self, cpus: Iterable[int]) -> None:
        bind_thread_os(cpus)

    def numa_node_for_cpu(self, cpu: int) -> Optional[int]:
        return self._numa.node_for_cpu(cpu)

    def is_hwloc_backed(self) -> bool:
        return False

    def backend_name(self) -> str:
        return "sysfs-fallback"


class TopologyProvider(HwTopology):
    """The selected topology backend; every call is passed to it."""

    def __init__(self, inner: HwTopology) -> None:
        self._inner = inner

    @classmethod
    def detect(cls) -> "TopologyProvider":
        """Pick the best backend available."""
        logger.info("Hardware topology: using sysfs fallback backend")
        return cls(SysfsBackend.detect())

    @classmethod
    def sysfs(cls) -> "TopologyProvider":
        """Always use the sysfs backend."""
        return cls(SysfsBackend.detect())

    def numa_nodes(self) -> list[NumaNode]:
        return self._inner.numa_nodes()

    def cpu_count(self) -> int:
        return self._inner.cpu_count()

    def packages(self) -> list[PackageInfo]:
        return self._inner.packages()

    def cache_info(self) -> list[CacheInfo]:
        return self._inner.cache_info()

    def bind_thread(self, cpus: Iterable[int]) -> None:
        self._inner.bind_thread(cpus)

    def numa_node_for_cpu(self, cpu: int) -> Optional[int]:
        return self._inner.numa_node_for_cpu(cpu)

    def is_hwloc_backed(self) -> bool:
        return self._inner.is_hwloc_backed()

    def backend_name(self) -> str:
        return self._inner.backend_name()