"""Placing worker threads on CPUs according to the hardware topology."""

from __future__ import annotations

import enum

from .topology import HwTopology


class AffinityStrategy(enum.Enum):
    """How workers are spread over hardware resources."""

    NONE = "None"
    NUMA_ROUND_ROBIN = "NUMARoundRobin"
    NUMA_DENSE = "NUMADense"
    PHYSICAL_CORES = "PhysicalCores"
    L3_CACHE_DOMAIN = "L3CacheDomain"


class WorkerAffinity:
    """Maps worker ids to CPU sets and pins threads to them."""

    def __init__(
        self, topology: HwTopology, strategy: AffinityStrategy, num_workers: int
    ) -> None:
        self.topology = topology
        self.strategy = strategy
        self.num_workers = num_workers

    def cpus_for_worker(self, worker_id: int) -> list[int]:
        """The CPUs worker ``worker_id`` should run on; empty means unbound."""
        strategy = self.strategy

        if strategy is AffinityStrategy.NONE:
            return []

        if strategy is AffinityStrategy.NUMA_ROUND_ROBIN:
            nodes = self.topology.numa_nodes()
            if not nodes:
                return []
            node = nodes[worker_id % len(nodes)]
            if not node.cpus:
                return []
            local = worker_id // len(nodes)
            return [node.cpus[local % len(node.cpus)]]

        if strategy is AffinityStrategy.NUMA_DENSE:
            offset = 0
            for node in self.topology.numa_nodes():
                if worker_id < offset + len(node.cpus):
                    return [node.cpus[worker_id - offset]]
                offset += len(node.cpus)
            return []

        if strategy is AffinityStrategy.PHYSICAL_CORES:
            # Heuristic: even logical CPUs are taken as physical cores.
            physical = list(range(0, self.topology.cpu_count(), 2))
            if not physical:
                return []
            return [physical[worker_id % len(physical)]]

        l3_caches = [c for c in self.topology.cache_info() if c.level == 3]
        if not l3_caches:
            return []
        return list(l3_caches[worker_id % len(l3_caches)].shared_cpus)

    def pin_current_thread(self, worker_id: int) -> None:
        """Pin the calling thread for ``worker_id``; raises BindError on failure."""
        cpus = self.cpus_for_worker(worker_id)
        if cpus:
            self.topology.bind_thread(cpus)

    def describe(self) -> str:
        """A one-line summary for logging."""
        return (
            f"WorkerAffinity {{ backend={self.topology.backend_name()}, "
            f"strategy={self.strategy.value}, workers={self.num_workers}, "
            f"numa_nodes={len(self.topology.numa_nodes())}, "
            f"cpus={self.topology.cpu_count()} }}"
        )