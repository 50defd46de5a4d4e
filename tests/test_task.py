import pytest

from taskweave.task import TaskGraph, TaskHandle, TaskKind


def _handles(graph, count):
    return [TaskHandle(graph.add(TaskKind.STATIC, None).id, graph) for _ in range(count)]


def test_add_assigns_distinct_sequential_ids():
    graph = TaskGraph()
    first = graph.add(TaskKind.STATIC, None)
    second = graph.add(TaskKind.CONDITION, None)
    assert second.id == first.id + 1
    assert len(graph) == 2
    assert [n.id for n in graph.nodes()] == [first.id, second.id]


def test_default_name_uses_id():
    graph = TaskGraph()
    node = graph.add(TaskKind.STATIC, None)
    assert node.name == f"task_{node.id}"
    assert graph.node(0).name == "task_0"


def test_work_and_kind_are_stored():
    calls = []
    graph = TaskGraph()
    node = graph.add(TaskKind.SUBFLOW, lambda: calls.append("ran"))
    stored = graph.node(node.id)
    assert stored.kind is TaskKind.SUBFLOW
    stored.work()
    assert calls == ["ran"]


def test_missing_node_raises():
    graph = TaskGraph()
    with pytest.raises(KeyError):
        graph.node(42)


def test_name_returns_same_handle_and_renames():
    graph = TaskGraph()
    (handle,) = _handles(graph, 1)
    assert handle.name("A") is handle
    assert graph.node(handle.id()).name == "A"


def test_precede_records_edges():
    graph = TaskGraph()
    a, b = _handles(graph, 2)
    a.precede(b)
    assert graph.node(a.id()).successors == {b.id()}
    assert graph.node(b.id()).dependents == {a.id()}
    assert graph.node(b.id()).num_dependents == 1
    assert graph.node(a.id()).num_dependents == 0


def test_repeated_precede_counts_once():
    graph = TaskGraph()
    a, b = _handles(graph, 2)
    a.precede(b)
    a.precede(b)
    node = graph.node(b.id())
    assert node.num_dependents == len(node.dependents) == 1


def test_succeed_is_reverse_of_precede():
    graph = TaskGraph()
    a, b = _handles(graph, 2)
    b.succeed(a)
    assert graph.node(a.id()).successors == {b.id()}
    assert graph.node(b.id()).dependents == {a.id()}


def test_fan_in_counts_each_dependent():
    graph = TaskGraph()
    a, b, c = _handles(graph, 3)
    a.precede(c)
    b.precede(c)
    node = graph.node(c.id())
    assert node.dependents == {a.id(), b.id()}
    assert node.num_dependents == len(node.dependents)


def test_nodes_returns_copy():
    graph = TaskGraph()
    _handles(graph, 2)
    listing = graph.nodes()
    listing.clear()
    assert len(graph) == 2