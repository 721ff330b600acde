"""Keyboard-driven highlight and selection over the process table."""

from collections.abc import Sequence
from dataclasses import dataclass

from itop.models import ProcessGroup


def _index_of(processes: Sequence[ProcessGroup], name: str) -> int | None:
    for index, group in enumerate(processes):
        if group.name == name:
            return index
    return None


@dataclass(slots=True)
class SelectionState:
    """
    Cursor (highlighted) and pinned (selected) rows, held by process name.

    Snapshots are replaced wholesale on every refresh, so rows are never held
    directly. A name that disappears from the table is left alone until the
    next move, which then resets the cursor.
    """

    highlighted: str | None = None
    selected: str | None = None

    def move_up(self, processes: Sequence[ProcessGroup]) -> None:
        """Move the cursor one row up, or drop it if there is no row above."""
        if self.highlighted is None:
            return

        index = _index_of(processes, self.highlighted)
        if index is None or index == 0:
            self.highlighted = None
        else:
            self.highlighted = processes[index - 1].name

    def move_down(self, processes: Sequence[ProcessGroup]) -> None:
        """Move the cursor one row down, starting at the top if unset."""
        if self.highlighted is None:
            self.highlighted = processes[0].name if processes else None
            return

        index = _index_of(processes, self.highlighted)
        if index is None or index + 1 >= len(processes):
            self.highlighted = None
        else:
            self.highlighted = processes[index + 1].name

    def confirm(self) -> None:
        """Pin the highlighted process, or unpin it if it already is."""
        if self.highlighted is None:
            return
        if self.highlighted == self.selected:
            self.selected = None
        else:
            self.selected = self.highlighted

