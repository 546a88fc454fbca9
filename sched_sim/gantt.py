from __future__ import annotations

from typing import Dict, List, Tuple

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import ScheduledSlice

_COLORS = ["red", "green", "yellow", "blue", "magenta", "cyan"]


def time_marks(slices: List[ScheduledSlice]) -> str:
    """
    Boundary ticks of the chart, right-aligned to three columns each.
    Gaps (idle CPU or context switches) get their own mark.
    """
    marks = "0"
    last_time = 0
    for sl in sorted(slices, key=lambda s: s.start_time):
        if sl.start_time > last_time:
            marks += f"{sl.start_time:>3}"
        marks += f"{sl.end_time:>3}"
        last_time = sl.end_time
    return marks if slices else ""


def build_rich_gantt(slices: List[ScheduledSlice]) -> Tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.
    """
    if not slices:
        return Panel("No execution", title="Gantt Chart"), ""

    slices = sorted(slices, key=lambda s: s.start_time)
    name_to_color: Dict[str, str] = {}

    def color_for(name: str) -> str:
        if name not in name_to_color:
            name_to_color[name] = _COLORS[len(name_to_color) % len(_COLORS)]
        return name_to_color[name]

    bar = Text()
    labels = Text()
    last_time = 0

    for sl in slices:
        gap = sl.start_time - last_time
        if gap > 0:
            bar.append("." * gap, style="dim")
            labels.append(" " * gap)

        width = sl.end_time - sl.start_time
        bar.append(" " * width, style=f"on {color_for(sl.name)}")
        labels.append(sl.name[:width].ljust(width), style="bold")
        last_time = sl.end_time

    table = Table.grid(padding=(0, 0))
    table.add_row(bar)
    table.add_row(labels)

    return Panel.fit(table, title="Gantt Chart"), time_marks(slices)
