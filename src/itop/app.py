"""itop - Main Textual application."""

import threading
from collections.abc import Sequence
from datetime import datetime

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.message import Message
from textual.reactive import reactive
from textual.widgets import DataTable, Static

from itop.config import Config
from itop.controller import Controller
from itop.events import INTERRUPT_KEY, EventSource
from itop.logging import get_logger
from itop.models import DashboardState
from itop.monitor import MetricsSource, PsutilMetricsSource, hostname, load_average

log = get_logger("app")

SPARK_CHARS = " ▁▂▃▄▅▆▇█"
LEVELS_PER_ROW = 8

ROW_STYLES = {
    "selected": "bold green",
    "highlighted": "bold",
}


def sparkline_rows(
    samples: Sequence[int],
    width: int,
    height: int = 1,
    max_value: float = 100,
) -> list[str]:
    """
    Draw samples as block-character rows, top row first.

    Samples are newest first; the newest lands in the rightmost column and
    older ones scroll off to the left.
    """
    if width <= 0 or height <= 0:
        return []

    total_levels = height * LEVELS_PER_ROW
    visible = list(reversed(samples[:width]))
    padding = width - len(visible)

    columns: list[list[str]] = []
    for value in visible:
        normalized = max(0.0, min(1.0, value / max_value)) if max_value > 0 else 0.0
        level = int(normalized * total_levels)
        column = []
        for row in range(height):
            remaining = level - row * LEVELS_PER_ROW
            column.append(SPARK_CHARS[max(0, min(LEVELS_PER_ROW, remaining))])
        columns.append(column)

    rows = []
    for row in reversed(range(height)):
        rows.append(" " * padding + "".join(column[row] for column in columns))
    return rows


def process_row(state: DashboardState, index: int) -> list[Text]:
    """Cells for one process table row, styled by selection."""
    group = state.processes[index]
    style = ROW_STYLES.get(state.row_style(group.name), "")

    return [
        Text(group.name, style=style),
        Text(f"{group.cpu_usage:.2f}", style=style, justify="right"),
        Text(str(group.count), style=style, justify="right"),
        Text(f"{state.memory_percent(group):.2f}", style=style, justify="right"),
    ]


class StateChanged(Message):
    """Posted from the controller thread with a fresh frame to draw."""

    def __init__(self, state: DashboardState) -> None:
        super().__init__()
        self.state = state


class HeaderBar(Horizontal):
    """Title, host, load average and clock."""

    DEFAULT_CSS = """
    HeaderBar {
        height: 1;
    }

    HeaderBar > Static {
        width: 1fr;
    }

    #clock {
        text-align: right;
    }
    """

    def compose(self) -> ComposeResult:
        """Compose the header layout."""
        yield Static(id="title")
        yield Static(id="load")
        yield Static(id="clock")

    def update_header(self, state: DashboardState) -> None:
        """Redraw the header for a new frame."""
        title = Text(state.title, style="bold blue")
        if state.hostname:
            title.append(f" for {state.hostname}")
        self.query_one("#title", Static).update(title)

        load = load_average()
        if load is not None:
            self.query_one("#load", Static).update(
                f"Load Average: {load[0]:.2f} {load[1]:.2f} {load[2]:.2f}"
            )

        self.query_one("#clock", Static).update(datetime.now().strftime("%H:%M:%S"))


class HistorySparkline(Static):
    """Sparkline scaled to 0-100 that fills its container."""

    DEFAULT_CSS = """
    HistorySparkline {
        width: 1fr;
        height: 1fr;
    }
    """

    samples: reactive[tuple[int, ...]] = reactive(tuple, always_update=True)

    def render(self) -> Text:
        """Render samples across the full widget area."""
        rows = sparkline_rows(self.samples, self.size.width, self.size.height)
        return Text("\n".join(rows))


class ProcessTable(Container):
    """Container for the grouped process table."""

    DEFAULT_CSS = """
    ProcessTable {
        height: 1fr;
        border: solid cyan;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize ProcessTable."""
        super().__init__(*args, **kwargs)
        self._names: list[str] = []

    @property
    def names(self) -> list[str]:
        """Process names in display order."""
        return list(self._names)

    def compose(self) -> ComposeResult:
        """Compose the process table."""
        yield DataTable(id="process-table", cursor_type="none")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        self.border_title = " Process List "
        table = self.query_one("#process-table", DataTable)
        # Keys belong to the controller, not the table cursor
        table.can_focus = False

        table.add_column(" Command", key="command")
        table.add_column("CPU %", key="cpu", width=8)
        table.add_column("Count", key="count", width=6)
        table.add_column("Memory %", key="mem", width=9)

    def update_processes(self, state: DashboardState) -> None:
        """
        Replace the table contents with a new frame.

        Snapshots are replaced wholesale upstream, so rows are rebuilt rather
        than patched.
        """
        table = self.query_one("#process-table", DataTable)
        table.clear()
        for index, group in enumerate(state.processes):
            table.add_row(*process_row(state, index), key=group.name)

        self._names = [group.name for group in state.processes]
        self.border_subtitle = f"sorted by {state.sort_mode.value}"


class ItopApp(App):
    """Main itop application."""

    TITLE = "itop"

    CSS = """
    Screen {
        layout: vertical;
    }

    #cpu-panel {
        height: 1fr;
        border: solid cyan;
        color: red;
    }

    #bottom {
        height: 1fr;
    }

    #memory-panel {
        width: 1fr;
        border: solid cyan;
    }

    ProcessTable {
        width: 1fr;
    }
    """

    # ctrl+c would otherwise be claimed by Textual itself
    BINDINGS = [
        Binding("ctrl+c", "interrupt", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        config: Config | None = None,
        source: MetricsSource | None = None,
        event_source: EventSource | None = None,
    ) -> None:
        """Initialize the ItopApp."""
        super().__init__()
        self._config = config or Config()
        self._events = event_source or EventSource(exit_keys=[self._config.keys.exit])
        self._controller = Controller(
            source or PsutilMetricsSource(),
            self._config.keys,
            hostname=hostname(),
            title=self.TITLE,
        )
        self._state: DashboardState | None = None
        self._consumer: threading.Thread | None = None

    @property
    def state(self) -> DashboardState | None:
        """Last frame drawn."""
        return self._state

    @property
    def controller(self) -> Controller:
        """The controller driving this app."""
        return self._controller

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield HeaderBar(id="header")
        with Container(id="cpu-panel"):
            yield HistorySparkline(id="cpu-sparkline")
        with Horizontal(id="bottom"):
            with Container(id="memory-panel"):
                yield HistorySparkline(id="memory-sparkline")
            yield ProcessTable()

    def on_mount(self) -> None:
        """Start producing events and consume them on the controller thread."""
        self.query_one("#cpu-panel").border_title = " CPU Usage "
        self.query_one("#memory-panel").border_title = " Memory Usage "
        self._events.start()
        self._consumer = threading.Thread(target=self._consume, daemon=True, name="Controller")
        self._consumer.start()
        log.info("app_started", exit_key=self._config.keys.exit)

    def on_unmount(self) -> None:
        """Stop the ticker and unblock the controller if it is still waiting."""
        self._events.stop()
        if self._controller.running:
            self._events.send_key(INTERRUPT_KEY)

    def _consume(self) -> None:
        """Controller loop; runs on its own thread. A crash ends the app."""
        try:
            self._controller.run(
                self._events, lambda state: self.post_message(StateChanged(state))
            )
        except Exception:
            log.exception("controller_failed")
            self.call_from_thread(self.exit, return_code=1)

    def on_key(self, event: events.Key) -> None:
        """Forward every keypress to the controller."""
        self._events.send_key(event.key)
        if event.key in self._events.exit_keys:
            self.exit()

    def action_interrupt(self) -> None:
        """Handle ctrl+c."""
        self._events.send_key(INTERRUPT_KEY)
        self.exit()

    def on_state_changed(self, message: StateChanged) -> None:
        """Draw a frame produced by the controller."""
        self.update_view(message.state)

    def update_view(self, state: DashboardState) -> None:
        """Push a frame into every widget."""
        self._state = state
        self.query_one(HeaderBar).update_header(state)

        cpu_panel = self.query_one("#cpu-panel")
        cpu_sparkline = self.query_one("#cpu-sparkline", HistorySparkline)
        pinned = state.find(state.selected)
        if pinned is not None:
            cpu_panel.border_title = f" CPU Usage: {pinned.name} {pinned.cpu_usage:.2f}% "
            cpu_sparkline.samples = (min(100, int(pinned.cpu_usage)),)
        else:
            cpu_panel.border_title = " CPU Usage "
            cpu_sparkline.samples = state.cpu_history

        self.query_one("#memory-sparkline", HistorySparkline).samples = state.memory_history
        self.query_one(ProcessTable).update_processes(state)
