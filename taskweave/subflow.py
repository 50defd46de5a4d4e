"""Nested task graphs built from inside a running task."""

from __future__ import annotations

from typing import Callable

from .task import TaskGraph, TaskHandle, TaskKind


class Subflow:
    """Adds tasks to a graph on behalf of a subflow task."""

    def __init__(self, graph: TaskGraph) -> None:
        self._graph = graph

    @property
    def graph(self) -> TaskGraph:
        return self._graph

    def emplace(self, work: Callable[[], None]) -> TaskHandle:
        """Add a plain task running ``work``."""
        node = self._graph.add(TaskKind.STATIC, work)
        return TaskHandle(node.id, self._graph)

    def emplace_subflow(self, work: Callable[["Subflow"], None]) -> TaskHandle:
        """Add a nested subflow task; ``work`` receives a Subflow when run."""
        node = self._graph.add(TaskKind.SUBFLOW, work)
        return TaskHandle(node.id, self._graph)