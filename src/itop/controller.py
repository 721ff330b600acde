"""Update loop: turns events into data model changes."""

from collections.abc import Callable, Iterable

import psutil

from itop.aggregator import aggregate_processes
from itop.config import KeysConfig
from itop.events import INTERRUPT_KEY, EventSource, Input, Tick
from itop.history import HistoryBuffer
from itop.logging import get_logger
from itop.models import (
    BUFFER_CAPACITY,
    PROCESS_LIMIT,
    REFRESH_EVERY,
    DashboardState,
    ProcessGroup,
    SortMode,
)
from itop.monitor import MetricsSource, cpu_percent
from itop.selection import SelectionState

log = get_logger("controller")

# Errors a metrics read may raise; the affected sample is skipped for that tick
SAMPLE_ERRORS = (psutil.Error, OSError)

Renderer = Callable[[DashboardState], None]


class Controller:
    """
    Owns the dashboard state and applies one event at a time.

    Everything here is touched only by the thread calling handle(); the
    renderer gets an immutable DashboardState after each event.
    """

    def __init__(
        self,
        source: MetricsSource,
        keys: KeysConfig | None = None,
        *,
        capacity: int = BUFFER_CAPACITY,
        process_limit: int = PROCESS_LIMIT,
        hostname: str | None = None,
        title: str = "itop",
    ) -> None:
        self._source = source
        self._keys = keys or KeysConfig()
        self._process_limit = process_limit
        self._hostname = hostname
        self._title = title

        self.cpu = HistoryBuffer(capacity)
        self.memory = HistoryBuffer(capacity)
        self.processes: tuple[ProcessGroup, ...] = ()
        self.total_memory = 0
        self.selection = SelectionState()
        self.sort_mode = SortMode.CPU
        self.requested_sort = SortMode.CPU
        self.ticks = 0
        self.refreshes = 0
        self.running = True

    @property
    def exit_keys(self) -> frozenset[str]:
        """Keys that end the loop."""
        return frozenset({self._keys.exit, INTERRUPT_KEY})

    def handle(self, event: Tick | Input) -> bool:
        """
        Apply one event.

        Returns:
            False once an exit key has been handled, True otherwise.
        """
        if isinstance(event, Tick):
            self._on_tick()
        elif isinstance(event, Input):
            self._on_key(event.key)
        return self.running

    def state(self) -> DashboardState:
        """Copy of the current data model for the renderer."""
        return DashboardState(
            processes=self.processes,
            total_memory=self.total_memory,
            cpu_history=self.cpu.snapshot(),
            memory_history=self.memory.snapshot(),
            sort_mode=self.sort_mode,
            highlighted=self.selection.highlighted,
            selected=self.selection.selected,
            hostname=self._hostname,
            title=self._title,
        )

    def run(self, events: EventSource | Iterable[Tick | Input], render: Renderer) -> None:
        """Consume events until an exit key, rendering after each one."""
        log.info("loop_started", sort=self.sort_mode.value)
        for event in events:
            if not self.handle(event):
                break
            render(self.state())
        log.info("loop_stopped", ticks=self.ticks, refreshes=self.refreshes)

    def _on_key(self, key: str) -> None:
        keys = self._keys
        if key in self.exit_keys:
            self.running = False
        elif key in keys.up:
            self.selection.move_up(self.processes)
        elif key in keys.down:
            self.selection.move_down(self.processes)
        elif key == keys.confirm:
            self.selection.confirm()
        elif key == keys.cpu_sort:
            self.requested_sort = SortMode.CPU
        elif key == keys.memory_sort:
            self.requested_sort = SortMode.MEMORY

    def _on_tick(self) -> None:
        sort_changed = self.sort_mode is not self.requested_sort
        full_refresh = self.ticks % REFRESH_EVERY == 0 or sort_changed
        if sort_changed:
            log.info(
                "sort_changed",
                previous=self.sort_mode.value,
                current=self.requested_sort.value,
            )
            self.sort_mode = self.requested_sort

        if full_refresh:
            self._refresh_processes()
        self._sample_memory()
        self._sample_cpu()
        self.ticks += 1

    def _refresh_processes(self) -> None:
        """Replace the snapshot; keep the old one if enumeration fails."""
        try:
            samples = self._source.refresh_processes()
        except SAMPLE_ERRORS as e:
            log.warning("sample_failed", metric="processes", error=str(e))
            return

        self.processes = aggregate_processes(samples, self.sort_mode, self._process_limit)
        self.refreshes += 1

        # Keep the previous denominator if only the memory read fails
        try:
            self.total_memory = self._source.refresh_memory().total_bytes
        except SAMPLE_ERRORS as e:
            log.warning("sample_failed", metric="total_memory", error=str(e))

        log.debug(
            "processes_refreshed",
            processes=len(samples),
            groups=len(self.processes),
            sort=self.sort_mode.value,
        )

    def _sample_cpu(self) -> None:
        try:
            per_core = self._source.refresh_cpu()
        except SAMPLE_ERRORS as e:
            log.warning("sample_failed", metric="cpu", error=str(e))
            return
        self.cpu.push_front(cpu_percent(per_core))

    def _sample_memory(self) -> None:
        try:
            reading = self._source.refresh_memory()
        except SAMPLE_ERRORS as e:
            log.warning("sample_failed", metric="memory", error=str(e))
            return
        self.memory.push_front(reading.percent)
