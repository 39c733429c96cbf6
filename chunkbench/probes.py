"""
Timing and memory probes.

Strategies measure elapsed time and memory delta around their work. The
probes are injected so the statistics stay testable without sampling the
real wall clock or process memory.

    Clock       () -> float   milliseconds, monotonic
    MemoryProbe () -> int     bytes currently in use by the process
"""

import time
from typing import Callable

import psutil

Clock = Callable[[], float]
MemoryProbe = Callable[[], int]


def perf_clock() -> float:
    """Monotonic clock in milliseconds."""
    return time.perf_counter() * 1000


def rss_memory() -> int:
    """Resident set size of the current process in bytes."""
    return psutil.Process().memory_info().rss
