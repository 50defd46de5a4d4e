"""NUMA topology detection and NUMA-aware worker placement."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

_NODE_DIR = Path("/sys/devices/system/node")


def _available_cpus() -> int:
    """Number of logical CPUs this process may run on."""
    if hasattr(os, "sched_getaffinity"):
        try:
            return max(1, len(os.sched_getaffinity(0)))
        except OSError:
            pass
    return os.cpu_count() or 1


def _count_numa_nodes(node_dir: Path = _NODE_DIR) -> int:
    """Count ``node*`` entries under the sysfs node directory, 1 if none."""
    try:
        count = sum(1 for entry in node_dir.iterdir() if entry.name.startswith("node"))
    except OSError:
        return 1
    return count or 1


@dataclass
class NumaNode:
    """One NUMA node: its id, the CPUs on it and its memory, if known."""

    id: int
    cpus: list[int] = field(default_factory=list)
    memory_bytes: Optional[int] = None


@dataclass
class NumaTopology:
    """The NUMA layout of the machine."""

    num_nodes: int
    nodes: list[NumaNode]
    cpu_to_node: dict[int, int]

    @classmethod
    def detect(cls) -> "NumaTopology":
        """Detect a simplified topology, spreading CPUs evenly over the nodes."""
        num_cpus = _available_cpus()
        num_nodes = _count_numa_nodes()
        if num_nodes <= 1:
            return cls.uniform(num_cpus)

        cpus_per_node = -(-num_cpus // num_nodes)
        nodes: list[NumaNode] = []
        cpu_to_node: dict[int, int] = {}
        for node_id in range(num_nodes):
            start = node_id * cpus_per_node
            end = min((node_id + 1) * cpus_per_node, num_cpus)
            cpus = list(range(start, end))
            cpu_to_node.update((cpu, node_id) for cpu in cpus)
            nodes.append(NumaNode(id=node_id, cpus=cpus))
        return cls(num_nodes=num_nodes, nodes=nodes, cpu_to_node=cpu_to_node)

    @classmethod
    def uniform(cls, num_cpus: int) -> "NumaTopology":
        """A single-node topology holding ``num_cpus`` CPUs."""
        cpus = list(range(num_cpus))
        return cls(
            num_nodes=1,
            nodes=[NumaNode(id=0, cpus=cpus)],
            cpu_to_node={cpu: 0 for cpu in cpus},
        )

    def node_for_cpu(self, cpu: int) -> Optional[int]:
        """The node that owns ``cpu``, or None."""
        return self.cpu_to_node.get(cpu)

    def has_numa(self) -> bool:
        """True when there is more than one node."""
        return self.num_nodes > 1


class NumaPinning(enum.Enum):
    """How workers are spread over NUMA nodes."""

    NONE = "none"
    ROUND_ROBIN = "round_robin"
    DENSE = "dense"
    SPARSE = "sparse"


def pin_thread_to_cpus(cpus: list[int]) -> None:
    """Ask the OS to run the calling thread on ``cpus``; best effort, never fails."""
    if not cpus or not hasattr(os, "sched_setaffinity"):
        return
    try:
        os.sched_setaffinity(0, set(cpus))
    except (OSError, ValueError, OverflowError):
        pass


def get_worker_cpus(
    worker_id: int,
    num_workers: int,
    topology: NumaTopology,
    strategy: NumaPinning,
) -> list[int]:
    """The CPUs worker ``worker_id`` should be pinned to under ``strategy``."""
    if strategy is NumaPinning.NONE:
        return []

    if strategy is NumaPinning.ROUND_ROBIN:
        node_id = worker_id % topology.num_nodes
        if node_id >= len(topology.nodes):
            return []
        node = topology.nodes[node_id]
        if not node.cpus:
            return []
        return [node.cpus[(worker_id // topology.num_nodes) % len(node.cpus)]]

    if strategy is NumaPinning.DENSE:
        offset = 0
        for node in topology.nodes:
            if worker_id < offset + len(node.cpus):
                return [node.cpus[worker_id - offset]]
            offset += len(node.cpus)
        return []

    workers_per_node = -(-num_workers // topology.num_nodes)
    if workers_per_node == 0:
        raise ValueError("num_workers must be positive for sparse pinning")
    node_id = worker_id // workers_per_node
    local = worker_id % workers_per_node
    if node_id < len(topology.nodes):
        node = topology.nodes[node_id]
        if node.cpus:
            return [node.cpus[local % len(node.cpus)]]
    return []