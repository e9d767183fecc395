"""Process-level memory diagnostics for the status report."""

import gc
import sys

import psutil


def _peak_rss_bytes() -> int:
    """Peak resident set size of this process, 0 where unavailable."""
    if sys.platform == "win32":
        return 0

    import resource

    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # ru_maxrss is kilobytes on Linux, bytes on macOS
    return peak if sys.platform == "darwin" else peak * 1024


def process_memory_stats() -> dict[str, int]:
    """Collect memory figures for the running process.

    Returns:
        alloc_bytes: current resident set size
        total_alloc_bytes: peak resident set size
        sys_bytes: virtual memory size
        gc_cycles: garbage collector runs over all generations
    """
    memory = psutil.Process().memory_info()
    return {
        "alloc_bytes": memory.rss,
        "total_alloc_bytes": max(_peak_rss_bytes(), memory.rss),
        "sys_bytes": memory.vms,
        "gc_cycles": sum(generation["collections"] for generation in gc.get_stats()),
    }
