"""
Performance Profiling Utilities for WaveScape

Usage:
    from wavescape.profiling import TickProfiler

    profiler = TickProfiler(slow_tick_threshold=0.016)
    profiler.start()
    with profiler.measure():
        controller.tick()
    profiler.stop()
    profiler.report()
"""

import time
import logging
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class TickProfiler:
    """
    Lightweight profiler for animation ticks.
    Tracks tick count, total and worst tick time, and warns about slow ticks.
    """

    def __init__(self, slow_tick_threshold: float = 0.016, warn_slow_ticks: bool = True):
        self.slow_tick_threshold = slow_tick_threshold
        self.warn_slow_ticks = warn_slow_ticks
        self.start_time = None
        self.end_time = None
        self.total_ticks = 0
        self.total_tick_time = 0.0
        self.max_tick_time = 0.0
        self.slow_ticks = 0
        self.enabled = False

    def start(self):
        """Start profiling session."""
        self.start_time = time.perf_counter()
        self.end_time = None
        self.total_ticks = 0
        self.total_tick_time = 0.0
        self.max_tick_time = 0.0
        self.slow_ticks = 0
        self.enabled = True
        logger.info("Profiler started")

    def stop(self):
        """Stop profiling session."""
        self.end_time = time.perf_counter()
        self.enabled = False
        logger.info("Profiler stopped")

    def record_tick(self, elapsed: float):
        """Record the duration of one tick."""
        if not self.enabled:
            return
        self.total_ticks += 1
        self.total_tick_time += elapsed
        self.max_tick_time = max(self.max_tick_time, elapsed)
        if elapsed > self.slow_tick_threshold:
            self.slow_ticks += 1
            if self.warn_slow_ticks:
                logger.warning(f"Slow tick: {elapsed * 1000:.2f} ms "
                               f"(threshold {self.slow_tick_threshold * 1000:.1f} ms)")

    @contextmanager
    def measure(self):
        """Context manager timing the enclosed tick."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record_tick(time.perf_counter() - start)

    @property
    def average_tick_time(self) -> float:
        return self.total_tick_time / self.total_ticks if self.total_ticks else 0.0

    def report(self) -> str:
        """
        Generate and return profiling report.
        Also logs the report.
        """
        if self.start_time is None:
            return "No profiling data available"

        wall_time = (self.end_time or time.perf_counter()) - self.start_time

        lines = []
        lines.append("=" * 60)
        lines.append("TICK PROFILING REPORT")
        lines.append("=" * 60)
        lines.append(f"Wall time: {wall_time:.3f} seconds")
        lines.append(f"Total ticks: {self.total_ticks}")
        if self.total_ticks > 0:
            lines.append(f"Average time per tick: {self.average_tick_time * 1000:.3f} ms")
            lines.append(f"Slowest tick: {self.max_tick_time * 1000:.3f} ms")
            lines.append(f"Slow ticks (> {self.slow_tick_threshold * 1000:.1f} ms): {self.slow_ticks}")
        lines.append("=" * 60)

        report = "\n".join(lines)
        logger.info("\n" + report)
        return report
