"""Task nodes, the shared task graph and handles for wiring dependencies."""

from __future__ import annotations

import enum
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Optional


class TaskKind(enum.Enum):
    """What a task's work does."""

    STATIC = "static"
    SUBFLOW = "subflow"
    CONDITION = "condition"


@dataclass
class TaskNode:
    """One task in a graph and its edges."""

    id: int
    kind: TaskKind
    work: Optional[Callable[..., Any]]
    name: str = ""
    successors: set[int] = field(default_factory=set)
    dependents: set[int] = field(default_factory=set)
    num_dependents: int = 0

    def __post_init__(self) -> None:
        if not self.name:
            self.name = f"task_{self.id}"


class TaskGraph:
    """A thread-safe collection of task nodes that hands out ids."""

    def __init__(self) -> None:
        self._nodes: dict[int, TaskNode] = {}
        self._next_id = 0
        self._lock = threading.RLock()

    def add(self, kind: TaskKind, work: Optional[Callable[..., Any]]) -> TaskNode:
        """Create a node with the next free id."""
        with self._lock:
            node = TaskNode(id=self._next_id, kind=kind, work=work)
            self._next_id += 1
            self._nodes[node.id] = node
            return node

    def node(self, task_id: int) -> TaskNode:
        """The node with ``task_id``; raises KeyError if there is none."""
        with self._lock:
            return self._nodes[task_id]

    def nodes(self) -> list[TaskNode]:
        """All nodes in creation order."""
        with self._lock:
            return list(self._nodes.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._nodes)

    def _rename(self, task_id: int, name: str) -> None:
        with self._lock:
            node = self._nodes.get(task_id)
            if node is not None:
                node.name = name

    def _link(self, source: int, target: int) -> None:
        with self._lock:
            source_node = self._nodes.get(source)
            if source_node is not None:
                source_node.successors.add(target)
            target_node = self._nodes.get(target)
            if target_node is not None and source not in target_node.dependents:
                target_node.dependents.add(source)
                target_node.num_dependents += 1


class TaskHandle:
    """A reference to a task in a graph, used to name it and add edges."""

    def __init__(self, task_id: int, graph: TaskGraph) -> None:
        self._id = task_id
        self._graph = graph

    def id(self) -> int:
        return self._id

    def name(self, name: str) -> "TaskHandle":
        """Set the task's name and return this handle."""
        self._graph._rename(self._id, name)
        return self

    def precede(self, other: "TaskHandle") -> None:
        """Run this task before ``other``."""
        self._graph._link(self._id, other._id)

    def succeed(self, other: "TaskHandle") -> None:
        """Run this task after ``other``."""
        other.precede(self)

    def __repr__(self) -> str:
        return f"TaskHandle(id={self._id})"