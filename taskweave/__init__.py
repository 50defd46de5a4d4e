"""Task graphs, schedulers, pipelines, topology discovery, profiling and regression detection."""

__version__ = "0.1.1"

__all__ = ["__version__"]