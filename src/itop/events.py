"""Tick and keyboard events merged into one ordered queue."""

import threading
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from queue import Queue

from itop.models import TICK_RATE

INTERRUPT_KEY = "ctrl+c"


@dataclass(slots=True, frozen=True)
class Tick:
    """Periodic sampling signal."""


@dataclass(slots=True, frozen=True)
class Input:
    """A single keypress, named the way Textual names keys ("q", "up", "enter")."""

    key: str


Event = Tick | Input


class EventSource:
    """
    Merges a fixed-rate ticker and a keyboard producer into one FIFO queue.

    Each producer runs in its own daemon thread and talks to the consumer only
    through the queue. Keys can also be fed with send_key() by a UI whose own
    input thread already reads the terminal.
    """

    def __init__(
        self,
        tick_rate: float = TICK_RATE,
        exit_keys: Iterable[str] = ("q",),
        key_reader: Callable[[], str] | None = None,
    ) -> None:
        """
        Initialize the EventSource.

        Args:
            tick_rate: Seconds between Tick events.
            exit_keys: Keys that end the session, in addition to ctrl+c.
            key_reader: Optional blocking callable returning the next key.
                When given, it is polled from a dedicated reader thread.
        """
        self._queue: Queue[Event] = Queue()
        self._tick_rate = tick_rate
        self._exit_keys = frozenset(exit_keys) | {INTERRUPT_KEY}
        self._key_reader = key_reader
        self._stop_event = threading.Event()
        self._ticker: threading.Thread | None = None
        self._reader: threading.Thread | None = None

    @property
    def tick_rate(self) -> float:
        """Get the tick period in seconds."""
        return self._tick_rate

    @property
    def exit_keys(self) -> frozenset[str]:
        """Keys that terminate the consumer loop."""
        return self._exit_keys

    @property
    def is_running(self) -> bool:
        """Check if the ticker thread is running."""
        return self._ticker is not None and self._ticker.is_alive()

    @property
    def _reader_alive(self) -> bool:
        return self._reader is not None and self._reader.is_alive()

    def is_exit(self, event: Event) -> bool:
        """Return True if the event is an exit keypress."""
        return isinstance(event, Input) and event.key in self._exit_keys

    def start(self) -> None:
        """Start the producer threads."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._ticker = threading.Thread(
            target=self._tick_loop,
            daemon=True,
            name="EventSourceTicker",
        )
        self._ticker.start()

        if self._key_reader is not None and not self._reader_alive:
            self._reader = threading.Thread(
                target=self._read_loop,
                daemon=True,
                name="EventSourceInput",
            )
            self._reader.start()

    def stop(self, timeout: float | None = 1.0) -> None:
        """
        Stop the ticker.

        A reader blocked in key_reader cannot be interrupted; it is a daemon
        thread and is left behind.

        Args:
            timeout: How long to wait for the ticker to stop (seconds).
        """
        self._stop_event.set()
        if self._ticker is not None:
            self._ticker.join(timeout=timeout)
            self._ticker = None

    def send_key(self, key: str) -> None:
        """Enqueue a keypress read elsewhere."""
        self._queue.put(Input(key))

    def send_tick(self) -> None:
        """Enqueue a Tick out of cadence."""
        self._queue.put(Tick())

    def next(self, timeout: float | None = None) -> Event:
        """
        Block until the next event arrives.

        Raises:
            queue.Empty: If timeout is given and nothing arrives in time.
        """
        return self._queue.get(timeout=timeout)

    def __iter__(self) -> Iterator[Event]:
        """Yield events until an exit key has been yielded."""
        while True:
            event = self.next()
            yield event
            if self.is_exit(event):
                return

    def _tick_loop(self) -> None:
        """Emit a Tick every tick_rate seconds until stopped."""
        while not self._stop_event.wait(timeout=self._tick_rate):
            self._queue.put(Tick())

    def _read_loop(self) -> None:
        """Forward keys from key_reader until an exit key is read."""
        while not self._stop_event.is_set():
            key = self._key_reader()
            self._queue.put(Input(key))
            if key in self._exit_keys:
                break
