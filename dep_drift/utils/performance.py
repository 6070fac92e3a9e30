"""Timing helpers for DepDrift pipeline phases."""

import functools
import inspect
import logging
import os
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, TypeVar
from rich.console import Console
from rich.table import Table

F = TypeVar('F', bound=Callable[..., Any])

BENCHMARK_ENV_VAR = "DEPDRIFT_VERBOSE_BENCHMARK"


@dataclass
class PhaseTiming:
    """Wall-clock duration of one measured phase."""

    name: str
    execution_time: float


class PerformanceMonitor:
    """Collects phase timings for a pipeline run."""

    def __init__(self) -> None:
        self.metrics: List[PhaseTiming] = []

    @contextmanager
    def measure(self, name: str) -> Iterator[None]:
        """Context manager for measuring a phase.

        Args:
            name: Name of the phase being measured
        """
        start_time = time.perf_counter()
        try:
            yield
        finally:
            self.metrics.append(PhaseTiming(name, time.perf_counter() - start_time))

    def get_summary(self) -> Dict[str, Any]:
        """Aggregate the recorded timings per phase.

        Returns:
            Dictionary with totals and a per-phase breakdown, empty when
            nothing was measured
        """
        if not self.metrics:
            return {}

        phases: Dict[str, Dict[str, float]] = {}
        for metric in self.metrics:
            phase = phases.setdefault(metric.name, {"calls": 0, "total_time": 0.0})
            phase["calls"] += 1
            phase["total_time"] += metric.execution_time

        total_time = sum(m.execution_time for m in self.metrics)
        return {
            "total_executions": len(self.metrics),
            "total_time": total_time,
            "average_time": total_time / len(self.metrics),
            "phases": phases,
        }

    def print_summary(self, console: Optional[Console] = None) -> None:
        """Print the timing summary as a table."""
        summary = self.get_summary()
        if not summary:
            return

        table = Table(title="Performance Summary")
        table.add_column("Phase", style="cyan")
        table.add_column("Calls", style="magenta", justify="right")
        table.add_column("Time", style="green", justify="right")

        for name, phase in summary["phases"].items():
            table.add_row(name, str(int(phase["calls"])), f"{phase['total_time']:.4f}s")
        table.add_row("total", str(summary["total_executions"]), f"{summary['total_time']:.4f}s")

        (console or Console(stderr=True)).print(table)


def _log_timing(name: str, elapsed: float) -> None:
    if os.environ.get(BENCHMARK_ENV_VAR):
        logging.getLogger("dep_drift.performance").info(f"{name} took {elapsed:.4f} seconds")


def benchmark(func: F) -> F:
    """Log a function's duration when ``DEPDRIFT_VERBOSE_BENCHMARK`` is set.

    Works for plain functions and coroutine functions alike.
    """
    if inspect.iscoroutinefunction(func):
        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            start_time = time.perf_counter()
            try:
                return await func(*args, **kwargs)
            finally:
                _log_timing(func.__name__, time.perf_counter() - start_time)
        return async_wrapper  # type: ignore[return-value]

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        start_time = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            _log_timing(func.__name__, time.perf_counter() - start_time)
    return wrapper  # type: ignore[return-value]
