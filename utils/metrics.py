"""
Per-run metrics for the MCP visual tester.

Request round trips are timed per JSON-RPC method by the client, test steps
are timed by the runner. The summary is logged once the run is over.
"""

import time
from collections import defaultdict, Counter
from contextlib import contextmanager
from typing import Dict, Any, Iterator, List


class Metrics:
    """In-memory metrics for a single visual test run."""

    def __init__(self):
        self.start_time = time.monotonic()
        self.counters: Dict[str, int] = defaultdict(int)
        self.timers: Dict[str, list] = defaultdict(list)
        self.errors: Counter = Counter()
        self.completed_steps: List[str] = []

    def increment(self, name: str, value: int = 1) -> None:
        """Increment a counter."""
        self.counters[name] += value

    def record_time(self, name: str, duration: float) -> None:
        """Record a timing measurement."""
        self.timers[name].append(duration)

    def record_error(self, error_type: str) -> None:
        """Record an error occurrence."""
        self.errors[error_type] += 1

    @contextmanager
    def step(self, name: str) -> Iterator[None]:
        """
        Time one test step under ``step_<name>``.

        The step is timed whether or not it raises, but only a step that
        returns normally counts as completed.
        """
        started = time.monotonic()
        try:
            yield
        finally:
            self.record_time(f"step_{name}", time.monotonic() - started)
        self.completed_steps.append(name)
        self.increment("steps_completed")

    def get_summary(self) -> Dict[str, Any]:
        """Get metrics summary."""
        timer_stats = {}
        for name, times in self.timers.items():
            if times:
                timer_stats[f"{name}_avg"] = sum(times) / len(times)
                timer_stats[f"{name}_count"] = len(times)
                timer_stats[f"{name}_max"] = max(times)

        return {
            "elapsed_seconds": time.monotonic() - self.start_time,
            "counters": dict(self.counters),
            "timers": timer_stats,
            "errors": dict(self.errors),
            "total_requests": self.counters.get("requests_total", 0),
            "completed_steps": list(self.completed_steps),
        }
