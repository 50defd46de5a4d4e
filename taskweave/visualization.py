"""DOT graphs, SVG execution timelines and HTML reports."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Iterable, Union

from .profiler import ExecutionProfile

_I32_MAX = 2**31 - 1
_I32_MIN = -(2**31)

_WIDTH = 1200
_MARGIN_LEFT = 150
_MARGIN_TOP = 50
_LANE_HEIGHT = 60
_TIMELINE_WIDTH = _WIDTH - _MARGIN_LEFT - 50


def _saturating_int(value: float) -> int:
    """Truncate toward zero into the 32-bit range; NaN becomes 0."""
    if math.isnan(value):
        return 0
    if value >= _I32_MAX:
        return _I32_MAX
    if value <= _I32_MIN:
        return _I32_MIN
    return int(value)


def _ratio(value: float, total: float) -> float:
    if total == 0:
        return math.nan if value == 0 else math.copysign(math.inf, value)
    return value / total


def _write_text(text: str, filename: Union[str, Path]) -> None:
    with open(filename, "w", encoding="utf-8") as handle:
        handle.write(text)


def generate_dot_graph(
    tasks: Iterable[tuple[int, str]], dependencies: Iterable[tuple[int, int]]
) -> str:
    """A Graphviz DOT description of tasks and the edges between them."""
    lines = [
        "digraph Taskflow {",
        "  rankdir=LR;",
        "  node [shape=box, style=rounded];",
        "",
    ]
    lines.extend(f'  {task_id} [label="{name}"];' for task_id, name in tasks)
    lines.append("")
    lines.extend(f"  {source} -> {target};" for source, target in dependencies)
    lines.append("}")
    return "\n".join(lines) + "\n"


def save_dot_graph(dot: str, filename: Union[str, Path]) -> None:
    """Write a DOT graph to ``filename``."""
    _write_text(dot, filename)


def generate_timeline_svg(profile: ExecutionProfile) -> str:
    """An SVG chart with one lane per worker and a bar per task."""
    height = 100 + profile.num_workers * _LANE_HEIGHT
    out = [
        f'<svg width="{_WIDTH}" height="{height}" xmlns="http://www.w3.org/2000/svg">',
        f'  <text x="{_WIDTH // 2 - 80}" y="30" font-size="20" '
        f'font-weight="bold">Execution Timeline</text>',
    ]

    timeline = profile.worker_timeline()
    max_time = profile.total_duration

    for worker_id in range(profile.num_workers):
        y = _MARGIN_TOP + worker_id * _LANE_HEIGHT
        out.append(f'  <text x="10" y="{y + 25}" font-size="14">Worker {worker_id}</text>')
        out.append(
            f'  <rect x="{_MARGIN_LEFT}" y="{y}" width="{_TIMELINE_WIDTH}" '
            f'height="40" fill="#f0f0f0" stroke="#999"/>'
        )
        for task in timeline.get(worker_id, []):
            start_offset = max(0.0, task.start_time - profile.start_time)
            duration = task.duration
            x = _MARGIN_LEFT + _saturating_int(_ratio(start_offset, max_time) * _TIMELINE_WIDTH)
            task_width = max(
                _saturating_int(_ratio(duration, max_time) * _TIMELINE_WIDTH), 2
            )

            if duration > max_time * 0.3:
                color = "#e74c3c"
            elif duration > max_time * 0.1:
                color = "#f39c12"
            else:
                color = "#2ecc71"

            out.append(
                f'  <rect x="{x}" y="{y + 2}" width="{task_width}" height="35" '
                f'fill="{color}" stroke="#333"/>'
            )
            if task_width > 30:
                label = task.name if task.name is not None else f"T{task.task_id}"
                out.append(
                    f'  <text x="{x + 5}" y="{y + 22}" font-size="10" '
                    f'fill="white">{label}</text>'
                )

    axis_y = _MARGIN_TOP + profile.num_workers * _LANE_HEIGHT + 20
    out.append(
        f'  <line x1="{_MARGIN_LEFT}" y1="{axis_y}" x2="{_MARGIN_LEFT + _TIMELINE_WIDTH}" '
        f'y2="{axis_y}" stroke="#333" stroke-width="2"/>'
    )
    for i in range(11):
        x = _MARGIN_LEFT + i * _TIMELINE_WIDTH // 10
        time_mark = (i / 10.0) * max_time
        out.append(
            f'  <line x1="{x}" y1="{axis_y - 5}" x2="{x}" y2="{axis_y + 5}" stroke="#333"/>'
        )
        out.append(
            f'  <text x="{x}" y="{axis_y + 20}" font-size="10" '
            f'text-anchor="middle">{time_mark:.2f}s</text>'
        )
    out.append("</svg>")
    return "\n".join(out) + "\n"


def save_timeline_svg(svg: str, filename: Union[str, Path]) -> None:
    """Write a timeline SVG to ``filename``."""
    _write_text(svg, filename)


_STYLE = """\
  <style>
    body { font-family: Arial, sans-serif; margin: 20px; background: #f5f5f5; }
    .container { max-width: 1200px; margin: 0 auto; background: white; padding: 20px; box-shadow: 0 2px 4px rgba(0,0,0,0.1); }
    h1 { color: #333; border-bottom: 2px solid #2ecc71; padding-bottom: 10px; }
    .stats { display: grid; grid-template-columns: repeat(auto-fit, minmax(200px, 1fr)); gap: 20px; margin: 20px 0; }
    .stat-box { background: #ecf0f1; padding: 15px; border-radius: 5px; }
    .stat-label { font-size: 12px; color: #7f8c8d; }
    .stat-value { font-size: 24px; font-weight: bold; color: #2c3e50; }
    .timeline { margin: 20px 0; overflow-x: auto; }
    table { width: 100%; border-collapse: collapse; margin: 20px 0; }
    th, td { padding: 10px; text-align: left; border-bottom: 1px solid #ddd; }
    th { background: #34495e; color: white; }
  </style>
"""


def _stat_box(label: str, value: str) -> str:
    return (
        f'      <div class="stat-box"><div class="stat-label">{label}</div>'
        f'<div class="stat-value">{value}</div></div>\n'
    )


def generate_html_report(profile: ExecutionProfile) -> str:
    """A standalone HTML page with statistics, the timeline and a task table."""
    parts = [
        "<!DOCTYPE html>\n<html>\n<head>\n",
        '  <meta charset="UTF-8">\n',
        "  <title>TaskFlow Execution Report</title>\n",
        _STYLE,
        "</head>\n<body>\n",
        '  <div class="container">\n',
        "    <h1>TaskFlow Execution Report</h1>\n",
        '    <div class="stats">\n',
        _stat_box("Total Duration", f"{profile.total_duration:.2f}s"),
        _stat_box("Tasks Executed", str(len(profile.task_stats))),
        _stat_box("Workers Used", str(profile.num_workers)),
        _stat_box("Parallelism", f"{profile.parallelism_efficiency():.1f}%"),
        "    </div>\n",
        "    <h2>Execution Timeline</h2>\n",
        '    <div class="timeline">\n',
        generate_timeline_svg(profile),
        "    </div>\n",
        "    <h2>Task Details</h2>\n",
        "    <table>\n",
        "      <tr><th>Task ID</th><th>Name</th><th>Duration</th><th>Worker</th></tr>\n",
    ]
    for task in sorted(profile.task_stats, key=lambda s: s.start_time):
        name = task.name if task.name is not None else "-"
        parts.append(
            f"      <tr><td>{task.task_id}</td><td>{name}</td>"
            f"<td>{task.duration * 1000.0:.2f}ms</td><td>{task.worker_id}</td></tr>\n"
        )
    parts.append("    </table>\n")
    parts.append("  </div>\n")
    parts.append("</body>\n</html>\n")
    return "".join(parts)


def save_html_report(html: str, filename: Union[str, Path]) -> None:
    """Write an HTML report to ``filename``."""
    _write_text(html, filename)