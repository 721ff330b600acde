"""Merge per-process samples into ranked per-name groups."""

import math
from collections.abc import Iterable

from itop.models import PROCESS_LIMIT, ProcessGroup, ProcessSample, SortMode


def group_processes(samples: Iterable[ProcessSample]) -> list[ProcessGroup]:
    """
    Coalesce processes sharing a name into one group each.

    Groups come out in the order their name was first seen.
    """
    totals: dict[str, list] = {}
    for sample in samples:
        entry = totals.get(sample.name)
        if entry is None:
            totals[sample.name] = [sample.cpu_usage, sample.memory_bytes, 1]
        else:
            entry[0] += sample.cpu_usage
            entry[1] += sample.memory_bytes
            entry[2] += 1

    return [
        ProcessGroup(name=name, cpu_usage=cpu, memory_bytes=memory, count=count)
        for name, (cpu, memory, count) in totals.items()
    ]


def sort_key(mode: SortMode):
    """Return the ranking key for a sort mode."""
    if mode is SortMode.MEMORY:
        return lambda group: group.memory_bytes
    # Hundredths of a percent, matching the two-decimal display
    return lambda group: math.floor(group.cpu_usage * 100)


def aggregate_processes(
    samples: Iterable[ProcessSample],
    mode: SortMode = SortMode.CPU,
    limit: int = PROCESS_LIMIT,
) -> tuple[ProcessGroup, ...]:
    """
    Build a snapshot: group by name, rank descending, keep the top ``limit``.

    Ties keep first-seen order.
    """
    groups = group_processes(samples)
    groups.sort(key=sort_key(mode), reverse=True)
    return tuple(groups[:limit])
