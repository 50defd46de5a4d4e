# taskweave

Building blocks for programs that run task graphs. Pure Python with no
dependencies at runtime.

- **Task graphs**: `Taskflow`, `TaskHandle` and `Subflow` build dependency
  graphs of static, subflow and condition tasks. `Taskflow.dump()` renders a
  graph as DOT.
- **Schedulers**: `FifoScheduler`, `PriorityScheduler` (highest `Priority`
  first, FIFO among equals) and `RoundRobinScheduler`.
- **Pipelines**: `ConcurrentPipeline`, a bounded, thread-safe token queue with
  backpressure.
- **Hardware topology**: `NumaTopology`, `TopologyProvider` (built on sysfs
  where available) and `WorkerAffinity`, which maps workers to CPUs.
- **Profiling and metrics**: `Profiler`, `ExecutionProfile`, `Metrics` and
  `PerformanceMetrics`.
- **Visualisation**: DOT graphs, SVG timelines and HTML reports.
- **Regression detection**: `Baseline`, `RegressionDetector` and
  `RegressionThresholds`.

## Installation

```
pip install taskweave
```

## Building a task graph

```python
from taskweave.taskflow import Taskflow

flow = Taskflow()
a = flow.emplace(lambda: print("A")).name("A")
b = flow.emplace(lambda: print("B")).name("B")
a.precede(b)

print(flow.size())   # 2
print(flow.dump())   # digraph Taskflow { ... }
```

## Scheduling

```python
from taskweave.scheduler import PriorityScheduler, Priority

sched = PriorityScheduler()
sched.push(1, Priority.NORMAL)
sched.push(2, Priority.CRITICAL)
assert sched.pop() == 2
```

## Profiling and regression checks

```python
import time
from taskweave.profiler import Profiler
from taskweave.baseline import Baseline
from taskweave.comparison import RegressionThresholds
from taskweave.regression import RegressionDetector

profiler = Profiler(4)
profiler.enable()
profiler.start_run()
profiler.record_task(1, "load", time.monotonic(), 0.1, 0, 0)
profile = profiler.get_profile()

baseline = Baseline.from_profile(profile, "main")
baseline.save("baseline.json")

detector = RegressionDetector(Baseline.load("baseline.json"), RegressionThresholds.strict())
report = detector.detect(profile)
print(report.summary())
```

## Hardware topology

```python
from taskweave.topology import TopologyProvider
from taskweave.affinity import WorkerAffinity, AffinityStrategy

topo = TopologyProvider.detect()
print(topo.backend_name(), topo.cpu_count())

affinity = WorkerAffinity(topo, AffinityStrategy.NUMA_ROUND_ROBIN, 8)
print(affinity.cpus_for_worker(0))
print(affinity.describe())
```

## Running the tests

```
pip install -e ".[test]"
pytest
```