"""Data models for itop."""

from dataclasses import dataclass
from enum import Enum

# Maximum number of samples kept per sparkline
BUFFER_CAPACITY = 1000

# Rows kept in a snapshot, enough for a reasonably large screen
PROCESS_LIMIT = 100

# Seconds between ticks
TICK_RATE = 0.3

# Full process refresh runs every N ticks
REFRESH_EVERY = 8


class SortMode(Enum):
    """Sort keys for the process table."""

    CPU = "cpu"
    MEMORY = "memory"


@dataclass(slots=True, frozen=True)
class ProcessSample:
    """Raw reading of a single OS process."""

    pid: int
    name: str
    cpu_usage: float  # 0.0 - 100.0 * core_count
    memory_bytes: int


@dataclass(slots=True, frozen=True)
class ProcessGroup:
    """All processes sharing one executable name, summed."""

    name: str
    cpu_usage: float
    memory_bytes: int
    count: int


@dataclass(slots=True, frozen=True)
class MemoryReading:
    """System memory usage in bytes."""

    used_bytes: int
    total_bytes: int

    @property
    def percent(self) -> int:
        """Used memory as a truncated percentage."""
        if self.total_bytes <= 0:
            return 0
        return int(self.used_bytes / self.total_bytes * 100)


@dataclass(slots=True, frozen=True)
class DashboardState:
    """
    Everything the renderer needs to draw one frame.

    Built by the controller after every event. All sequences are tuples so the
    renderer can hold on to a state while the controller keeps mutating its own.
    """

    processes: tuple[ProcessGroup, ...]
    total_memory: int
    cpu_history: tuple[int, ...]  # newest first
    memory_history: tuple[int, ...]  # newest first
    sort_mode: SortMode
    highlighted: str | None = None
    selected: str | None = None
    hostname: str | None = None
    title: str = "itop"

    def memory_percent(self, group: ProcessGroup) -> float:
        """Share of total memory used by a process group."""
        if self.total_memory <= 0:
            return 0.0
        return group.memory_bytes / self.total_memory * 100

    def find(self, name: str | None) -> ProcessGroup | None:
        """Look up a process group by name."""
        if name is None:
            return None
        for group in self.processes:
            if group.name == name:
                return group
        return None

    def row_style(self, name: str) -> str | None:
        """Return "selected", "highlighted" or None; selected wins."""
        if name == self.selected:
            return "selected"
        if name == self.highlighted:
            return "highlighted"
        return None
