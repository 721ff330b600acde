"""Shared fixtures for itop tests."""

import pytest

from itop.models import MemoryReading, ProcessSample

GIB = 1024**3


class FakeMetricsSource:
    """In-memory metrics source that counts how often each call is made."""

    def __init__(
        self,
        processes: list[ProcessSample] | None = None,
        per_core: list[float] | None = None,
        memory: MemoryReading | None = None,
    ) -> None:
        self.processes = processes if processes is not None else []
        self.per_core = per_core if per_core is not None else [20.0, 40.0]
        self.memory = memory or MemoryReading(used_bytes=4 * GIB, total_bytes=16 * GIB)
        self.process_calls = 0
        self.cpu_calls = 0
        self.memory_calls = 0
        self.fail_cpu: Exception | None = None
        self.fail_memory: Exception | None = None
        self.fail_processes: Exception | None = None

    def refresh_processes(self) -> list[ProcessSample]:
        self.process_calls += 1
        if self.fail_processes is not None:
            raise self.fail_processes
        return list(self.processes)

    def refresh_cpu(self) -> list[float]:
        self.cpu_calls += 1
        if self.fail_cpu is not None:
            raise self.fail_cpu
        return list(self.per_core)

    def refresh_memory(self) -> MemoryReading:
        self.memory_calls += 1
        if self.fail_memory is not None:
            raise self.fail_memory
        return self.memory


@pytest.fixture
def sample_processes() -> list[ProcessSample]:
    """A small process list where two names repeat."""
    return [
        ProcessSample(pid=1, name="init", cpu_usage=0.1, memory_bytes=10_000),
        ProcessSample(pid=100, name="firefox", cpu_usage=12.5, memory_bytes=800_000_000),
        ProcessSample(pid=101, name="firefox", cpu_usage=7.25, memory_bytes=400_000_000),
        ProcessSample(pid=200, name="python", cpu_usage=30.0, memory_bytes=50_000_000),
        ProcessSample(pid=300, name="bash", cpu_usage=0.0, memory_bytes=5_000_000),
        ProcessSample(pid=301, name="bash", cpu_usage=0.0, memory_bytes=5_000_000),
        ProcessSample(pid=302, name="bash", cpu_usage=0.5, memory_bytes=5_000_000),
    ]


@pytest.fixture
def fake_source(sample_processes) -> FakeMetricsSource:
    """Fake metrics source preloaded with sample_processes."""
    return FakeMetricsSource(processes=sample_processes)
