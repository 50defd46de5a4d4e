import pytest

from taskweave.profiler import ExecutionProfile, TaskStats
from taskweave.visualization import (
    generate_dot_graph,
    generate_html_report,
    generate_timeline_svg,
    save_dot_graph,
    save_html_report,
    save_timeline_svg,
)


def _one_task_profile():
    return ExecutionProfile(
        start_time=0.0,
        total_duration=1.0,
        task_stats=[TaskStats(1, "task1", 0.0, 0.1, 0, 0)],
        num_workers=2,
    )


def test_dot_graph_generation():
    tasks = [(1, "Task A"), (2, "Task B"), (3, "Task C")]
    deps = [(1, 2), (1, 3)]
    dot = generate_dot_graph(tasks, deps)
    assert "digraph Taskflow" in dot
    assert "Task A" in dot
    assert "1 -> 2" in dot


def test_dot_graph_layout():
    dot = generate_dot_graph([(1, "A")], [(1, 2)])
    assert dot == (
        "digraph Taskflow {\n"
        "  rankdir=LR;\n"
        "  node [shape=box, style=rounded];\n"
        "\n"
        '  1 [label="A"];\n'
        "\n"
        "  1 -> 2;\n"
        "}\n"
    )


def test_timeline_svg_generation():
    svg = generate_timeline_svg(_one_task_profile())
    assert "<svg" in svg
    assert "Execution Timeline" in svg
    assert svg.endswith("</svg>\n")


def test_timeline_svg_task_bar():
    svg = generate_timeline_svg(_one_task_profile())
    assert '<svg width="1200" height="220"' in svg
    assert '<rect x="150" y="52" width="100" height="35" fill="#2ecc71" stroke="#333"/>' in svg
    assert '<text x="155" y="72" font-size="10" fill="white">task1</text>' in svg
    assert "Worker 0" in svg and "Worker 1" in svg
    assert "1.00s" in svg and "0.00s" in svg


def test_timeline_colors_and_labels():
    profile = ExecutionProfile(
        start_time=0.0,
        total_duration=1.0,
        task_stats=[
            TaskStats(7, None, 0.0, 0.5, 0, 0),
            TaskStats(8, "mid", 0.5, 0.2, 0, 0),
            TaskStats(9, "tiny", 0.7, 0.01, 0, 0),
        ],
        num_workers=1,
    )
    svg = generate_timeline_svg(profile)
    assert 'fill="#e74c3c"' in svg
    assert 'fill="#f39c12"' in svg
    assert ">T7</text>" in svg
    assert ">tiny</text>" not in svg


def test_timeline_zero_duration_profile():
    profile = ExecutionProfile(
        start_time=0.0,
        total_duration=0.0,
        task_stats=[TaskStats(1, "z", 0.0, 0.0, 0, 0)],
        num_workers=1,
    )
    svg = generate_timeline_svg(profile)
    assert '<rect x="150" y="52" width="2" height="35" fill="#2ecc71"' in svg


def test_html_report_contents():
    html = generate_html_report(_one_task_profile())
    assert html.startswith("<!DOCTYPE html>")
    assert "<title>TaskFlow Execution Report</title>" in html
    assert '<div class="stat-value">1.00s</div>' in html
    assert '<div class="stat-value">5.0%</div>' in html
    assert "<tr><td>1</td><td>task1</td><td>100.00ms</td><td>0</td></tr>" in html
    assert "<svg" in html


def test_html_report_sorted_by_start():
    profile = ExecutionProfile(
        start_time=0.0,
        total_duration=1.0,
        task_stats=[
            TaskStats(2, None, 0.5, 0.1, 0, 0),
            TaskStats(1, "first", 0.0, 0.1, 1, 0),
        ],
        num_workers=2,
    )
    html = generate_html_report(profile)
    assert html.index("<td>first</td>") < html.index("<td>-</td>")


@pytest.mark.parametrize(
    "save", [save_dot_graph, save_timeline_svg, save_html_report]
)
def test_save_writes_file(tmp_path, save):
    target = tmp_path / "out.txt"
    save("content <x>", str(target))
    assert target.read_text(encoding="utf-8") == "content <x>"


def test_save_into_missing_directory_fails(tmp_path):
    with pytest.raises(OSError):
        save_dot_graph("x", str(tmp_path / "missing" / "g.dot"))