"""
Stage timing for the render pipeline.

Each render creates its own ``PerformanceMetrics`` so timings never leak from
one cycle into the next.
"""

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional


class PerformanceMetrics:
    """
    Wall-clock durations of named render stages, in milliseconds.

    Stages are started and ended explicitly, or wrapped with ``measure``.
    """

    def __init__(self) -> None:
        self._started: dict[str, float] = {}
        self._durations: dict[str, float] = {}

    def start_operation(self, operation_name: str) -> None:
        """
        Start timing a stage.

        Args:
            operation_name: Name of the stage to time
        """
        self._started[operation_name] = time.perf_counter() * 1000

    def end_operation(self, operation_name: str) -> float:
        """
        Stop timing a stage and record its duration.

        Args:
            operation_name: Name of the stage

        Returns:
            Duration of the stage in milliseconds

        Raises:
            KeyError: If operation_name was not started
        """
        if operation_name not in self._started:
            raise KeyError(f"Operation '{operation_name}' was not started")

        duration = time.perf_counter() * 1000 - self._started.pop(operation_name)
        self._durations[operation_name] = duration
        return duration

    @contextmanager
    def measure(self, operation_name: str) -> Iterator[None]:
        """Time the enclosed block. The duration is recorded even if the block raises."""
        self.start_operation(operation_name)
        try:
            yield
        finally:
            self.end_operation(operation_name)

    def get_operation_time(self, operation_name: str) -> Optional[float]:
        """Duration of a completed stage in milliseconds, or None."""
        return self._durations.get(operation_name)

    def get_summary(self) -> dict[str, float]:
        """Copy of all completed stage durations."""
        return self._durations.copy()

    def log_summary(self, logger: logging.Logger, level: int = logging.DEBUG) -> None:
        """Log every completed stage on one line."""
        if not self._durations:
            return
        stages = ", ".join(f"{name}={ms:.1f}ms" for name, ms in self._durations.items())
        logger.log(level, f"Render timings: {stages}")

    def reset(self) -> None:
        """Forget all running and completed stages."""
        self._started.clear()
        self._durations.clear()
