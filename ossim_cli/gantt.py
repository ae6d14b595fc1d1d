from __future__ import annotations

from typing import Dict, List, Sequence

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import MemoryBlock, ScheduledSlice

COLORS = ["red", "green", "yellow", "blue", "magenta", "cyan"]


class _Palette:
    """Hands out a stable color per key, cycling through COLORS."""

    def __init__(self) -> None:
        self._assigned: Dict[object, str] = {}

    def __call__(self, key: object) -> str:
        if key not in self._assigned:
            self._assigned[key] = COLORS[len(self._assigned) % len(COLORS)]
        return self._assigned[key]


def build_rich_gantt(slices: List[ScheduledSlice]) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.
    """
    if not slices:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    slices = sorted(slices, key=lambda s: (s.start_time, s.end_time))
    pid_color = _Palette()

    timeline = Text()
    labels = Text()
    time_marks = "0"
    last_time = 0

    for sl in slices:
        idle_gap = sl.start_time - last_time
        if idle_gap > 0:
            timeline.append(" " * idle_gap)
            labels.append(" " * idle_gap)
            last_time = sl.start_time
            time_marks += f"{last_time:>3}"

        width = max(1, sl.length)

        timeline.append(" " * width, style=f"on {pid_color(sl.pid)}")
        labels.append(f"P{sl.pid}"[:width].ljust(width), style="bold")

        last_time = sl.end_time
        time_marks += f"{last_time:>3}"

    table = Table.grid(padding=(0, 0))
    table.add_row(timeline)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, time_marks


def build_memory_map(blocks: Sequence[MemoryBlock], width: int = 60) -> Panel:
    """
    Render the block layout as a proportional bar. Free space is dimmed.
    """
    if not blocks:
        return Panel("Empty pool", title="Memory Map")

    capacity = sum(b.size for b in blocks)
    owner_color = _Palette()
    bar = Text()
    used = 0

    for i, block in enumerate(blocks):
        # The last block takes whatever width rounding left over.
        if i == len(blocks) - 1:
            cells = max(1, width - used)
        else:
            cells = max(1, round(block.size * width / capacity))
        used += cells

        if block.free:
            bar.append("." * cells, style="dim")
        else:
            label = str(block.owner_id)[:cells].center(cells)
            bar.append(label, style=f"bold on {owner_color(block.owner_id)}")

    return Panel.fit(bar, title=f"Memory Map (capacity {capacity})")
