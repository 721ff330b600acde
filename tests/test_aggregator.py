"""Tests for grouping and ranking processes."""

from itop.aggregator import aggregate_processes, group_processes, sort_key
from itop.models import PROCESS_LIMIT, ProcessGroup, ProcessSample, SortMode


def _by_name(groups):
    return {group.name: group for group in groups}


class TestGroupProcesses:
    """Tests for group_processes."""

    def test_sums_match_members(self, sample_processes):
        groups = _by_name(group_processes(sample_processes))

        assert groups["firefox"].cpu_usage == 12.5 + 7.25
        assert groups["firefox"].memory_bytes == 1_200_000_000
        assert groups["firefox"].count == 2
        assert groups["bash"].count == 3
        assert groups["bash"].memory_bytes == 15_000_000
        assert groups["init"].count == 1

    def test_one_group_per_distinct_name(self, sample_processes):
        groups = group_processes(sample_processes)

        assert len(groups) == len({sample.name for sample in sample_processes})
        assert len({group.name for group in groups}) == len(groups)

    def test_first_seen_order(self, sample_processes):
        names = [group.name for group in group_processes(sample_processes)]
        assert names == ["init", "firefox", "python", "bash"]

    def test_empty(self):
        assert group_processes([]) == []


class TestAggregateProcesses:
    """Tests for aggregate_processes."""

    def test_sorted_by_cpu_descending(self, sample_processes):
        snapshot = aggregate_processes(sample_processes, SortMode.CPU)

        assert [group.name for group in snapshot] == ["python", "firefox", "bash", "init"]

    def test_sorted_by_memory_descending(self, sample_processes):
        snapshot = aggregate_processes(sample_processes, SortMode.MEMORY)

        assert [group.name for group in snapshot] == ["firefox", "python", "bash", "init"]

    def test_returns_tuple(self, sample_processes):
        assert isinstance(aggregate_processes(sample_processes), tuple)

    def test_empty_input(self):
        assert aggregate_processes([], SortMode.CPU) == ()

    def test_truncates_to_limit(self):
        samples = [
            ProcessSample(pid=pid, name=f"proc{pid}", cpu_usage=pid / 10, memory_bytes=pid)
            for pid in range(250)
        ]

        snapshot = aggregate_processes(samples, SortMode.CPU)

        assert len(snapshot) == PROCESS_LIMIT == 100
        # Highest CPU users survive the cut
        assert snapshot[0].name == "proc249"
        assert snapshot[-1].name == "proc150"

    def test_custom_limit(self, sample_processes):
        snapshot = aggregate_processes(sample_processes, SortMode.MEMORY, limit=2)
        assert [group.name for group in snapshot] == ["firefox", "python"]

    def test_cpu_ties_compare_hundredths(self):
        """Values equal to two decimals tie and keep first-seen order."""
        samples = [
            ProcessSample(pid=1, name="first", cpu_usage=1.231, memory_bytes=0),
            ProcessSample(pid=2, name="second", cpu_usage=1.239, memory_bytes=0),
            ProcessSample(pid=3, name="third", cpu_usage=1.25, memory_bytes=0),
        ]

        snapshot = aggregate_processes(samples, SortMode.CPU)

        assert [group.name for group in snapshot] == ["third", "first", "second"]

    def test_is_sorted_descending(self, sample_processes):
        for mode in SortMode:
            key = sort_key(mode)
            snapshot = aggregate_processes(sample_processes, mode)
            values = [key(group) for group in snapshot]
            assert values == sorted(values, reverse=True)


def test_sort_key_memory():
    group = ProcessGroup(name="x", cpu_usage=0.0, memory_bytes=42, count=1)
    assert sort_key(SortMode.MEMORY)(group) == 42


def test_sort_key_cpu_floors():
    group = ProcessGroup(name="x", cpu_usage=12.349, memory_bytes=0, count=1)
    assert sort_key(SortMode.CPU)(group) == 1234
