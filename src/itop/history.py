"""Bounded sample history for the sparklines."""

from collections import deque
from collections.abc import Iterator

from itop.models import BUFFER_CAPACITY


class HistoryBuffer:
    """
    Fixed-capacity history of percentage samples, newest first.

    Pushing onto a full buffer silently drops the oldest sample.
    """

    def __init__(self, capacity: int = BUFFER_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._samples: deque[int] = deque(maxlen=capacity)

    def __len__(self) -> int:
        """Return number of samples in buffer."""
        return len(self._samples)

    def __iter__(self) -> Iterator[int]:
        """Iterate from newest to oldest."""
        return iter(self._samples)

    @property
    def capacity(self) -> int:
        """Return maximum number of samples the buffer can hold."""
        return self._samples.maxlen or 0

    def push_front(self, sample: int) -> None:
        """Add a sample as the newest entry."""
        self._samples.appendleft(sample)

    def snapshot(self) -> tuple[int, ...]:
        """Return an immutable copy for the renderer."""
        return tuple(self._samples)
