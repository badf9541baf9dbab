#!/usr/bin/env python3
"""
benchcmp - compare Rust micro-benchmark results

Reads ``cargo bench`` output files and prints a comparison table or
writes a bar chart for every benchmark found more than once.
"""

import logging
import os
import sys
from typing import List, Optional, Sequence

from .benchmark import ComparisonGroup, SourceGroup, parse_benchmarks
from .errors import BenchcmpError
from .grouping import by_bench_name, by_module_name, select_groups, strip_names
from .settings import PlotSettings, Settings, TableSettings, parse_settings
from .table import ComparisonTable

logger = logging.getLogger("benchcmp")


def setup_logging(verbosity: int = 0) -> None:
    """Send diagnostics to stderr, never to the table output"""
    if verbosity < 0:
        level = logging.ERROR
    elif verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.handlers = [handler]
    logger.setLevel(level)


def silence_stdout() -> None:
    """Point stdout at devnull so the interpreter does not fail flushing it"""
    try:
        fd = sys.stdout.fileno()
    except (OSError, ValueError):
        return
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, fd)
    os.close(devnull)


def read_benchmarks(files: List[str]) -> List[SourceGroup]:
    return [parse_benchmarks(path) for path in files]


def filter_benchmarks(groups: List[SourceGroup], settings: TableSettings) -> List[SourceGroup]:
    """Pick the two sides of the table and strip their names"""
    if settings.modules:
        fst, snd = select_groups(groups, settings.modules)
    else:
        fst, snd = groups
    return [strip_names(fst, settings.strip_fst), strip_names(snd, settings.strip_snd)]


def run_table(groups: List[SourceGroup], settings: TableSettings) -> ComparisonTable:
    groups = filter_benchmarks(groups, settings)
    pairs = by_bench_name(groups)

    table = ComparisonTable(
        fst_label=groups[0].name,
        snd_label=groups[1].name,
        variance=settings.variance,
        threshold=settings.threshold,
        show=settings.show,
    )
    table.add_groups(pairs)
    table.write(settings.out_file, color=settings.color)
    return table


def run_plot(groups: List[SourceGroup], settings: PlotSettings) -> List[ComparisonGroup]:
    # matplotlib is only needed here
    from .plot import BenchmarkPlotter

    pairs = by_bench_name(groups)
    BenchmarkPlotter(settings).plot_all(pairs)
    return pairs


def run(settings: Settings) -> None:
    # file -> benchmarks
    groups = read_benchmarks(settings.files)
    # maybe module -> benchmarks
    groups = by_module_name(groups, settings.compare_by)

    if isinstance(settings.tool_mode, PlotSettings):
        run_plot(groups, settings.tool_mode)
    else:
        run_table(groups, settings.tool_mode)


def main(argv: Optional[Sequence[str]] = None) -> int:
    setup_logging()
    try:
        settings = parse_settings(argv)
        setup_logging(settings.verbosity)
        run(settings)
    except BenchcmpError as exc:
        logger.error("%s", exc)
        return exc.exit_code
    except BrokenPipeError:
        # stdout reader closed early, as with `| head`
        silence_stdout()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
