"""Tests for the psutil metrics source."""

import psutil

from itop.models import MemoryReading, ProcessSample
from itop.monitor import PsutilMetricsSource, cpu_percent, hostname, load_average


class TestPsutilMetricsSource:
    """Tests against the real host."""

    def test_refresh_cpu(self):
        source = PsutilMetricsSource()

        per_core = source.refresh_cpu()

        assert isinstance(per_core, list)
        assert len(per_core) == psutil.cpu_count()
        for usage in per_core:
            assert 0.0 <= usage <= 100.0

    def test_refresh_memory(self):
        source = PsutilMetricsSource()

        reading = source.refresh_memory()

        assert isinstance(reading, MemoryReading)
        assert reading.total_bytes > 0
        assert 0 <= reading.used_bytes <= reading.total_bytes
        assert 0 <= reading.percent <= 100

    def test_refresh_processes(self):
        source = PsutilMetricsSource()

        processes = source.refresh_processes()

        assert len(processes) > 0
        for proc in processes:
            assert isinstance(proc, ProcessSample)
            assert isinstance(proc.name, str)
            assert isinstance(proc.cpu_usage, float)
            assert isinstance(proc.memory_bytes, int)
            assert proc.memory_bytes >= 0

    def test_includes_current_process(self):
        source = PsutilMetricsSource()
        pids = {proc.pid for proc in source.refresh_processes()}
        assert psutil.Process().pid in pids


def test_cpu_percent_average():
    assert cpu_percent([10.0, 20.0, 35.0]) == 21


def test_cpu_percent_no_cores():
    assert cpu_percent([]) == 0


def test_load_average():
    load = load_average()
    if load is not None:
        assert len(load) == 3
        assert all(value >= 0 for value in load)


def test_hostname():
    name = hostname()
    assert name is None or isinstance(name, str)
