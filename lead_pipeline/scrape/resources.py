"""Sizing the number of sites crawled in parallel from the task's resources."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

RESERVED_MEMORY_MIB = 500
HTTP_MIB_PER_SITE = 50
BROWSER_MIB_PER_SITE = 300
FAST_MODE_CEILING = 50
BROWSER_FLOOR = 3


def calculate_optimal_concurrency(fast_mode: bool, memory_mib: int, cpu_units: int) -> int:
    """Parallel site budget for ``memory_mib`` of RAM and ``cpu_units`` (1024 = 1 vCPU).

    HTTP-only crawling is I/O bound (~50 MiB per site, up to 30 per vCPU,
    never above 50). With the browser fallback each site may hold a
    ~300 MiB page, 4 per vCPU, never below 3.
    """
    available = memory_mib - RESERVED_MEMORY_MIB
    if fast_mode:
        concurrency = min(available // HTTP_MIB_PER_SITE, int(cpu_units / 1024 * 30), FAST_MODE_CEILING)
    else:
        concurrency = max(min(available // BROWSER_MIB_PER_SITE, int(cpu_units / 1024 * 4)), BROWSER_FLOOR)
    logger.debug(
        "Concurrency %d (fast_mode=%s, memory=%dMiB, cpu=%d)",
        concurrency, fast_mode, memory_mib, cpu_units,
    )
    return max(concurrency, 1)
