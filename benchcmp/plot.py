"""
Bar charts of benchmarks found in several files or modules
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import List

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from .benchmark import ComparisonGroup
from .errors import BenchcmpError, PlotterUnavailable
from .settings import OutputFormat, PlotBackend, PlotSettings

logger = logging.getLogger(__name__)

NEUTRAL_COLOR = "#7F7F7F"

GNUPLOT_TERMINALS = {
    OutputFormat.PNG: "pngcairo",
    OutputFormat.SVG: "svg",
    OutputFormat.PDF: "pdfcairo",
    OutputFormat.EPS: "epscairo",
}


def plot_file_name(bench_name: str) -> str:
    """File system safe stem for a benchmark name"""
    return bench_name.replace("::", "..").replace("/", "_")


def gnuplot_quote(s: str) -> str:
    return "'" + s.replace("'", "''") + "'"


def to_frame(group: ComparisonGroup) -> pd.DataFrame:
    """One row per source: label, ns/iter and variance"""
    return pd.DataFrame(
        {
            "source": [source for source, _ in group.assocs],
            "ns": [bench.ns for _, bench in group.assocs],
            "variance": [bench.variance for _, bench in group.assocs],
        }
    )


class BenchmarkPlotter:
    """Writes one chart per benchmark name into the output directory"""

    def __init__(self, settings: PlotSettings):
        self.settings = settings
        self.output_dir = Path(settings.output_dir)

        plt.style.use("default")
        sns.set_palette("husl")

    def output_path(self, group: ComparisonGroup) -> Path:
        ext = self.settings.format.value
        return self.output_dir / f"{plot_file_name(group.bench_name)}.{ext}"

    def image_path(self, group: ComparisonGroup) -> Path:
        # gnuplot scripts still point at a png, the script is the artifact
        fmt = self.settings.format
        ext = OutputFormat.PNG.value if fmt is OutputFormat.GNUPLOT else fmt.value
        return self.output_dir / f"{plot_file_name(group.bench_name)}.{ext}"

    def plot_all(self, groups: List[ComparisonGroup]) -> List[Path]:
        """Render every group, returns the written files"""
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise BenchcmpError(f"could not create {self.output_dir}: {exc}") from exc
        logger.info("Writing %d plots to %s", len(groups), self.output_dir)

        if self.settings.backend is PlotBackend.GNUPLOT and self.settings.format is not OutputFormat.GNUPLOT:
            if shutil.which("gnuplot") is None:
                raise PlotterUnavailable("couldn't find gnuplot, make sure it is installed and available in PATH")

        written = []
        for group in groups:
            if self.settings.format is OutputFormat.GNUPLOT:
                path = self.write_gnuplot_script(group)
            elif self.settings.backend is PlotBackend.GNUPLOT:
                path = self.run_gnuplot(group)
            else:
                path = self.create_bar_chart(group)
            logger.debug("saved %s", path)
            written.append(path)
        return written

    def create_bar_chart(self, group: ComparisonGroup) -> Path:
        """Bar chart with variance error bars, one bar per source"""
        df = to_frame(group)
        fig, ax = plt.subplots(1, 1, figsize=(max(6, 1.5 * len(df) + 3), 6))

        x = np.arange(len(df))
        if self.settings.color:
            colors = sns.color_palette("husl", len(df))
        else:
            colors = [NEUTRAL_COLOR] * len(df)

        bars = ax.bar(x, df["ns"], yerr=df["variance"], color=colors, alpha=0.8,
                      capsize=6, edgecolor="black", linewidth=1)
        ax.set_title(group.bench_name, fontweight="bold")
        ax.set_ylabel("ns/iter")
        ax.set_xticks(x)
        ax.set_xticklabels(df["source"], rotation=15, ha="right")
        ax.grid(axis="y", alpha=0.3)

        if self.settings.log_scale:
            ax.set_yscale("log")
        else:
            y_max = (df["ns"] + df["variance"]).max() * 1.02
            ax.set_ylim(0, y_max if y_max > 0 else 1)

        for bar, val in zip(bars, df["ns"]):
            ax.text(bar.get_x() + bar.get_width() / 2, bar.get_height(),
                    f"{int(val):,}", ha="center", va="bottom", fontweight="bold")

        plt.tight_layout()

        output_file = self.output_path(group)
        fmt = self.settings.format.value
        plt.savefig(output_file, format=fmt, dpi=300 if fmt == "png" else None, bbox_inches="tight")
        plt.close(fig)
        return output_file

    def gnuplot_script(self, group: ComparisonGroup) -> str:
        """A self-contained gnuplot script with the data inlined"""
        fmt = self.settings.format
        terminal = GNUPLOT_TERMINALS.get(fmt, GNUPLOT_TERMINALS[OutputFormat.PNG])
        count = len(group.assocs)

        lines = [
            f"set terminal {terminal} noenhanced",
            f"set output {gnuplot_quote(str(self.image_path(group)))}",
            f"set title {gnuplot_quote(group.bench_name)}",
            "set ylabel 'ns/iter'",
            "set boxwidth 0.9",
            "set style data histograms",
            "set style fill solid 1.0 border -1",
            "set bars fullwidth",
            "set style histogram errorbars gap 2 lw 1",
            "unset xtics",
            # a little over three bars fit between 0 and 0.5, leave room for the legend
            f"set xrange [{-(count // 2 * 2) / 12:.2f}:{((count + 5) // 2 * 2) / 12:.2f}]",
            "set ytics border mirror norotate",
        ]
        if self.settings.log_scale:
            lines.append("set logscale y")
        else:
            y_max = max(bench.ns + bench.variance for _, bench in group.assocs) * 1.02
            lines.append(f"set yrange [0:{y_max if y_max > 0 else 1:.12e}]")

        series = []
        for source, _ in group.assocs:
            spec = f"'-' using 1:2 title {gnuplot_quote(source)}"
            if not self.settings.color:
                spec += f" lc rgb '{NEUTRAL_COLOR}'"
            series.append(spec)
        lines.append("plot " + ", ".join(series))

        for _, bench in group.assocs:
            lines.append(f"{bench.ns} {bench.variance}")
            lines.append("e")
        return "\n".join(lines) + "\n"

    def write_gnuplot_script(self, group: ComparisonGroup) -> Path:
        output_file = self.output_path(group)
        output_file.write_text(self.gnuplot_script(group), encoding="utf-8")
        return output_file

    def run_gnuplot(self, group: ComparisonGroup) -> Path:
        """Pipe the script for ``group`` into a gnuplot process"""
        script = self.gnuplot_script(group)
        try:
            subprocess.run(["gnuplot"], input=script, text=True, check=True)
        except FileNotFoundError as exc:
            raise PlotterUnavailable(
                "couldn't spawn gnuplot, make sure it is installed and available in PATH"
            ) from exc
        except subprocess.CalledProcessError as exc:
            raise BenchcmpError(f"gnuplot failed for {group.bench_name} (exit status {exc.returncode})") from exc
        return self.image_path(group)
