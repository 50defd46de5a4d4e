"""A task dependency graph that tasks are added to and wired up in."""

from __future__ import annotations

from typing import Callable

from .subflow import Subflow
from .task import TaskGraph, TaskHandle, TaskKind


class Taskflow:
    """A graph of tasks and the dependencies between them."""

    def __init__(self) -> None:
        self._graph = TaskGraph()

    def _add(self, kind: TaskKind, work: Callable) -> TaskHandle:
        node = self._graph.add(kind, work)
        return TaskHandle(node.id, self._graph)

    def emplace(self, work: Callable[[], None]) -> TaskHandle:
        """Add a plain task running ``work``."""
        return self._add(TaskKind.STATIC, work)

    def emplace_subflow(self, work: Callable[[Subflow], None]) -> TaskHandle:
        """Add a subflow task; ``work`` receives a Subflow when run."""
        return self._add(TaskKind.SUBFLOW, work)

    def emplace_condition(self, condition: Callable[[], int]) -> TaskHandle:
        """Add a condition task whose result picks the successor to run."""
        return self._add(TaskKind.CONDITION, condition)

    def graph(self) -> TaskGraph:
        """The underlying task graph."""
        return self._graph

    def dump(self) -> str:
        """The graph in Graphviz DOT form."""
        lines = ["digraph Taskflow {"]
        for node in self._graph.nodes():
            lines.append(f'  {node.id} [label="{node.name}"];')
            lines.extend(f"  {node.id} -> {succ};" for succ in sorted(node.successors))
        lines.append("}")
        return "\n".join(lines) + "\n"

    def size(self) -> int:
        """Number of tasks."""
        return len(self._graph)

    def is_empty(self) -> bool:
        return len(self._graph) == 0