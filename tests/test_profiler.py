import time

import pytest

from taskweave.profiler import ExecutionProfile, Profiler, TaskStats, format_duration


def sample_profile():
    start = 100.0
    return ExecutionProfile(
        start_time=start,
        total_duration=1.0,
        task_stats=[
            TaskStats(1, "task1", start, 0.1, 0, 0),
            TaskStats(2, "task2", start, 0.2, 1, 1),
        ],
        num_workers=4,
    )


def test_profiler_enable_disable():
    profiler = Profiler(4)
    assert not profiler.is_enabled()
    profiler.enable()
    assert profiler.is_enabled()
    profiler.disable()
    assert not profiler.is_enabled()


def test_execution_profile():
    profiler = Profiler(4)
    profiler.enable()
    profiler.start_run()
    start = time.perf_counter()
    profiler.record_task(1, "task1", start, 0.1, 0, 0)
    profiler.record_task(2, "task2", start, 0.05, 1, 1)

    profile = profiler.get_profile()
    assert len(profile.task_stats) == 2
    assert profile.num_workers == 4
    assert profile.total_duration >= 0.1


def test_profile_statistics():
    profile = sample_profile()
    assert profile.longest_task().task_id == 2
    assert profile.shortest_task().task_id == 1
    assert profile.average_task_duration() == 0.15


def test_disabled_profiler_records_nothing():
    profiler = Profiler(2)
    profiler.start_run()
    profiler.record_task(1, None, time.perf_counter(), 0.01, 0, 0)
    assert profiler.get_profile() is None
    profiler.enable()
    assert profiler.get_profile() is None


def test_reset_clears_run():
    profiler = Profiler(2)
    profiler.enable()
    profiler.start_run()
    profiler.record_task(1, None, time.perf_counter(), 0.01, 0, 0)
    profiler.reset()
    assert profiler.get_profile() is None


def test_empty_profile_statistics():
    profile = ExecutionProfile(start_time=0.0, total_duration=0.0, num_workers=2)
    assert profile.critical_path_duration() == 0.0
    assert profile.average_task_duration() == 0.0
    assert profile.longest_task() is None
    assert profile.shortest_task() is None
    assert profile.parallelism_efficiency() == 0.0


def test_critical_path_and_efficiency():
    profile = sample_profile()
    assert profile.critical_path_duration() == 0.2
    assert profile.parallelism_efficiency() == pytest.approx(7.5)


def test_worker_timeline_sorted_by_start():
    profile = ExecutionProfile(
        start_time=0.0,
        total_duration=1.0,
        task_stats=[
            TaskStats(1, None, 0.5, 0.1, 0, 0),
            TaskStats(2, None, 0.1, 0.1, 0, 0),
            TaskStats(3, None, 0.2, 0.1, 1, 0),
        ],
        num_workers=2,
    )
    timeline = profile.worker_timeline()
    assert [s.task_id for s in timeline[0]] == [2, 1]
    assert [s.task_id for s in timeline[1]] == [3]


def test_summary():
    text = sample_profile().summary()
    assert text == (
        "=== Execution Profile Summary ===\n"
        "Total Duration: 1s\n"
        "Tasks Executed: 2\n"
        "Workers Used: 4\n"
        "Average Task Duration: 150ms\n"
        "Parallelism Efficiency: 7.50%\n"
        "Longest Task: task2 (200ms)\n"
        "Shortest Task: task1 (100ms)\n"
    )


def test_summary_uses_default_name():
    profile = ExecutionProfile(
        start_time=0.0,
        total_duration=1.0,
        task_stats=[TaskStats(7, None, 0.0, 0.5, 0, 0)],
        num_workers=1,
    )
    assert "Longest Task: task_7 (500ms)" in profile.summary()


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (0.0, "0ns"),
        (1e-8, "10ns"),
        (0.00015, "150µs"),
        (0.1, "100ms"),
        (1.5, "1.5s"),
        (2.0, "2s"),
    ],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def test_format_duration_rejects_negative():
    with pytest.raises(ValueError):
        format_duration(-1.0)