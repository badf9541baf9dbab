"""
Table output for pairwise benchmark comparisons
"""

import io
import logging
import sys
from typing import List, Optional, TextIO

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .benchmark import Comparison, ComparisonGroup, Show, should_show
from .errors import BenchcmpError
from .utils import fmt_percent, fmt_thousands_sep

logger = logging.getLogger(__name__)

REGRESSION_STYLE = "red"
IMPROVEMENT_STYLE = "green"


class ComparisonTable:
    """Collects comparisons between two sources and renders them as text"""

    def __init__(self, fst_label: str, snd_label: str, variance: bool = False,
                 threshold: Optional[int] = None, show: Show = Show.BOTH):
        self.fst_label = fst_label
        self.snd_label = snd_label
        self.variance = variance
        self.threshold = threshold
        self.show = show
        self.comparisons: List[Comparison] = []

    def add_groups(self, groups: List[ComparisonGroup]) -> int:
        """Compare the first two entries of every group, keep those passing the filters"""
        added = 0
        for group in groups:
            comparison = group.compare(0, 1)
            if should_show(comparison, self.threshold, self.show):
                self.comparisons.append(comparison)
                added += 1
        logger.debug("%d of %d comparisons pass the filters", added, len(groups))
        return added

    def to_row(self, comparison: Comparison) -> List[str]:
        return [
            comparison.baseline.name,
            comparison.baseline.fmt_ns(self.variance),
            comparison.candidate.fmt_ns(self.variance),
            fmt_thousands_sep(comparison.diff_ns),
            fmt_percent(comparison.diff_ratio),
        ]

    def build(self, color: bool = True) -> Table:
        table = Table(box=None, show_edge=False, pad_edge=False, header_style="bold")
        table.add_column("name")
        table.add_column(Text(f"{self.fst_label} ns/iter"))
        table.add_column(Text(f"{self.snd_label} ns/iter"))
        table.add_column("diff ns/iter", justify="right")
        table.add_column("diff %", justify="right")

        for comparison in self.comparisons:
            style = None
            if color and comparison.is_regression:
                style = REGRESSION_STYLE
            elif color and comparison.is_improvement:
                style = IMPROVEMENT_STYLE
            table.add_row(*[Text(cell) for cell in self.to_row(comparison)], style=style)
        return table

    def render(self, color: bool = False) -> str:
        """Render the whole table into a string"""
        buffer = io.StringIO()
        console = Console(
            file=buffer,
            force_terminal=color,
            no_color=not color,
            highlight=False,
            markup=False,
            emoji=False,
            width=10_000,
            color_system="standard" if color else None,
        )
        console.print(self.build(color), crop=False, overflow="ignore")
        return "\n".join(line.rstrip() for line in buffer.getvalue().splitlines()) + "\n"

    def write(self, out_file: Optional[str] = None, color: bool = True,
              stream: Optional[TextIO] = None) -> None:
        """Write the table to ``out_file`` or to ``stream`` (stdout by default).

        Files never get color codes. The text is rendered before the file
        is opened so a failed render leaves nothing behind.
        """
        if out_file:
            text = self.render(color=False)
            try:
                with open(out_file, "w", encoding="utf-8") as f:
                    f.write(text)
            except OSError as exc:
                raise BenchcmpError(f"could not write {out_file}: {exc}") from exc
            logger.info("wrote %d comparisons to %s", len(self.comparisons), out_file)
            return

        stream = stream if stream is not None else sys.stdout
        stream.write(self.render(color=color and stream.isatty()))
        stream.flush()
