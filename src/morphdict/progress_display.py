"""
Live progress panel for scanning large wordlists.

Uses Rich's Live display so the counters update in place instead of
scrolling. A disabled display accepts the same calls and draws nothing,
which keeps library callers (and tests) quiet by default.
"""

import time
from typing import Any, Dict, Optional

from rich import box
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text


class ProgressDisplay:
    """
    Context manager showing counters such as lines read and entries built.

    Usage:
        with ProgressDisplay("Compiling en.txt", enabled=True) as progress:
            for raw in scanner:
                progress.update(Lines=raw.line, Entries=len(entries))
    """

    def __init__(
        self,
        title: str = "Progress",
        enabled: bool = True,
        update_interval: int = 10000,
        refresh_per_second: int = 4
    ):
        """
        Args:
            title: Panel title (usually the input file name)
            enabled: Draw the panel at all
            update_interval: Redraw every N calls to update()
            refresh_per_second: Rich refresh rate while live
        """
        self.title = title
        self.enabled = enabled
        self.update_interval = update_interval
        self.refresh_per_second = refresh_per_second

        self.metrics: Dict[str, Any] = {}
        self.live: Optional[Live] = None
        self.start_time = 0.0
        self.calls = 0
        self._rate_metric: Optional[str] = None

    def __enter__(self):
        self.start_time = time.time()
        if self.enabled:
            self.live = Live(self._render(), refresh_per_second=self.refresh_per_second)
            self.live.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.live:
            self.live.update(self._render())
            self.live.__exit__(exc_type, exc_val, exc_tb)
            self.live = None
        return False

    def update(self, **metrics):
        """Record the latest counter values; the first one drives the rate."""
        self.calls += 1
        self.metrics.update(metrics)
        if self._rate_metric is None and metrics:
            self._rate_metric = next(iter(metrics))

        if self.live and self.calls % self.update_interval == 0:
            self.live.update(self._render())

    def elapsed(self) -> float:
        return time.time() - self.start_time if self.start_time else 0.0

    def _render(self) -> Panel:
        grid = Table.grid(padding=(0, 2))
        grid.add_column(justify="left", no_wrap=True)
        grid.add_column(justify="right", no_wrap=True)

        rows = dict(self.metrics)
        elapsed = self.elapsed()
        rows["Elapsed"] = elapsed
        count = rows.get(self._rate_metric) if self._rate_metric else None
        if elapsed > 0 and isinstance(count, (int, float)):
            rows["Rate"] = count / elapsed

        for key, value in rows.items():
            grid.add_row(
                Text(f"{key}:", style="bold grey50"),
                Text(format_metric(key, value), style="bright_cyan")
            )

        return Panel(grid, title=self.title, box=box.SIMPLE, border_style="bright_black")


def format_metric(key: str, value: Any) -> str:
    """Format a counter for display."""
    if key == "Elapsed":
        minutes, seconds = divmod(int(value), 60)
        hours, minutes = divmod(minutes, 60)
        if hours:
            return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
        return f"{minutes:02d}:{seconds:02d}"
    if key == "Rate":
        return f"{value:,.1f}/s"
    if isinstance(value, float):
        return f"{value:,.2f}"
    if isinstance(value, int):
        return f"{value:,}"
    return str(value)
