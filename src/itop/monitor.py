"""psutil-backed metrics source for itop."""

import socket
from typing import Protocol

import psutil

from itop.models import MemoryReading, ProcessSample


class MetricsSource(Protocol):
    """What the controller needs from the host."""

    def refresh_processes(self) -> list[ProcessSample]: ...

    def refresh_cpu(self) -> list[float]: ...

    def refresh_memory(self) -> MemoryReading: ...


class PsutilMetricsSource:
    """
    Metrics source that reads the host through psutil.

    CPU and memory reads are cheap. Process enumeration walks every process on
    the host and is the expensive call the controller throttles.
    """

    # Attributes to fetch per process in one pass
    ATTRS = ["pid", "name", "cpu_percent", "memory_info"]

    def __init__(self) -> None:
        """Prime psutil's CPU counters (the first call always returns 0.0)."""
        psutil.cpu_percent(percpu=True)

    def refresh_cpu(self) -> list[float]:
        """Per-core CPU usage since the previous call."""
        return psutil.cpu_percent(percpu=True)

    def refresh_memory(self) -> MemoryReading:
        """Current used and total memory."""
        mem = psutil.virtual_memory()
        return MemoryReading(used_bytes=mem.used, total_bytes=mem.total)

    def refresh_processes(self) -> list[ProcessSample]:
        """
        Collect samples of all running processes.

        Processes that exit mid-poll, deny access or are zombies are skipped.
        """
        processes: list[ProcessSample] = []

        for proc in psutil.process_iter(attrs=self.ATTRS):
            try:
                with proc.oneshot():
                    info = proc.info

                    mem_info = info.get("memory_info")
                    memory_bytes = mem_info.rss if mem_info else 0

                    processes.append(
                        ProcessSample(
                            pid=info.get("pid", 0),
                            name=info.get("name") or "",
                            cpu_usage=info.get("cpu_percent") or 0.0,
                            memory_bytes=memory_bytes,
                        )
                    )

            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue

        return processes


def cpu_percent(per_core: list[float]) -> int:
    """Average per-core usage as a truncated percentage."""
    if not per_core:
        return 0
    return int(sum(per_core) / len(per_core))


def load_average() -> tuple[float, float, float] | None:
    """1, 5 and 15 minute load averages, or None where unsupported."""
    try:
        return psutil.getloadavg()
    except (AttributeError, OSError):
        return None


def hostname() -> str | None:
    """Name of this host, or None if it cannot be determined."""
    try:
        return socket.gethostname() or None
    except OSError:
        return None
