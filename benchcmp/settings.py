"""
Command line definition and the settings derived from it
"""

import argparse
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from .benchmark import Show
from .errors import ConfigError, UsageError
from .grouping import CompareBy

DEFAULT_PLOT_DIR = "target/benchcmp"


class OutputFormat(Enum):
    PNG = "png"
    SVG = "svg"
    PDF = "pdf"
    EPS = "eps"
    GNUPLOT = "gp"

    def __str__(self):
        return self.value


class PlotBackend(Enum):
    MATPLOTLIB = "matplotlib"
    GNUPLOT = "gnuplot"

    def __str__(self):
        return self.value


@dataclass
class TableSettings:
    """Settings of the ``table`` command"""
    modules: Optional[Tuple[str, str]] = None
    out_file: Optional[str] = None
    variance: bool = False
    threshold: Optional[int] = None
    show: Show = Show.BOTH
    strip_fst: Optional[re.Pattern] = None
    strip_snd: Optional[re.Pattern] = None
    color: bool = True

    @property
    def compare_by(self) -> CompareBy:
        return CompareBy.MODULE if self.modules else CompareBy.FILE


@dataclass
class PlotSettings:
    """Settings of the ``plot`` command"""
    compare_by: CompareBy = CompareBy.MODULE
    format: OutputFormat = OutputFormat.PNG
    backend: PlotBackend = PlotBackend.MATPLOTLIB
    log_scale: bool = False
    output_dir: str = DEFAULT_PLOT_DIR
    color: bool = True


@dataclass
class Settings:
    files: List[str] = field(default_factory=list)
    tool_mode: Union[TableSettings, PlotSettings] = field(default_factory=TableSettings)
    verbosity: int = 0

    @property
    def compare_by(self) -> CompareBy:
        return self.tool_mode.compare_by


def compile_pattern(pattern: Optional[str], option: str) -> Optional[re.Pattern]:
    """Compile a strip pattern, reporting bad ones as configuration errors"""
    if pattern is None:
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ConfigError(f"invalid regex for {option} {pattern!r}: {exc}") from exc


def resolve_show(regressions: bool, improvements: bool) -> Show:
    """Both flags or neither flag mean both kinds are shown"""
    if regressions and not improvements:
        return Show.REGRESSIONS
    if improvements and not regressions:
        return Show.IMPROVEMENTS
    return Show.BOTH


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="benchcmp",
        description="Compares Rust micro-benchmark results",
    )
    general = argparse.ArgumentParser(add_help=False)
    general.add_argument("--no-color", action="store_true",
                         help="suppress coloring of improvements/regressions")
    general.add_argument("-v", "--verbose", action="count", default=0,
                         help="show debug output")
    general.add_argument("-q", "--quiet", action="store_true",
                         help="only report errors")

    subparsers = parser.add_subparsers(dest="command", metavar="{table,plot}")

    table_parser = subparsers.add_parser(
        "table", parents=[general],
        help="output a table that compares benchmark results",
    )
    table_parser.add_argument("files", nargs="*", metavar="FILE", help="benchmark output files")
    table_parser.add_argument("--by-module", nargs=2, metavar="NAME",
                              help="compare benchmarks between the two modules")
    table_parser.add_argument("--output", metavar="FILE", help="write to file instead of stdout")
    table_parser.add_argument("--variance", action="store_true", help="show variance")
    table_parser.add_argument("--threshold", type=int, metavar="N",
                              help="only show comparisons with a percentage change of at least N")
    table_parser.add_argument("--regressions", action="store_true", help="show only regressions")
    table_parser.add_argument("--improvements", action="store_true", help="show only improvements")
    table_parser.add_argument("--strip-fst", metavar="RE",
                              help="a regex to strip from the first benchmarks' names")
    table_parser.add_argument("--strip-snd", metavar="RE",
                              help="a regex to strip from the second benchmarks' names")

    plot_parser = subparsers.add_parser(
        "plot", parents=[general],
        help="plot a bar chart for every benchmark found more than once",
    )
    plot_parser.add_argument("files", nargs="*", metavar="FILE", help="benchmark output files")
    plot_parser.add_argument("--by", type=CompareBy, choices=list(CompareBy), default=CompareBy.MODULE,
                             metavar="{file,module}", help="plot benchmarks by file or module (default: module)")
    plot_parser.add_argument("--format", type=OutputFormat, choices=list(OutputFormat),
                             default=OutputFormat.PNG, help="output format (default: png)")
    plot_parser.add_argument("--backend", type=PlotBackend, choices=list(PlotBackend),
                             default=PlotBackend.MATPLOTLIB, help="renderer to use (default: matplotlib)")
    plot_parser.add_argument("--log-scale", action="store_true", help="use a logarithmic ns/iter axis")
    plot_parser.add_argument("--output-dir", default=DEFAULT_PLOT_DIR,
                             help=f"directory for the charts (default: {DEFAULT_PLOT_DIR})")

    return parser


def into_settings(args: argparse.Namespace) -> Settings:
    """Validate parsed arguments and turn them into Settings"""
    if not args.command:
        raise UsageError("missing command, expected one of: table, plot")
    if not args.files:
        raise UsageError("missing argument: FILE")

    verbosity = -1 if args.quiet else args.verbose
    color = not args.no_color

    if args.command == "plot":
        return Settings(
            files=list(args.files),
            tool_mode=PlotSettings(
                compare_by=args.by,
                format=args.format,
                backend=args.backend,
                log_scale=args.log_scale,
                output_dir=args.output_dir,
                color=color,
            ),
            verbosity=verbosity,
        )

    modules = tuple(args.by_module) if args.by_module else None
    if modules is None and len(args.files) != 2:
        raise UsageError(f"comparing by file needs exactly two files, got {len(args.files)}")

    if args.threshold is not None and not 0 <= args.threshold <= 100:
        raise ConfigError(f"threshold must be between 0 and 100, got {args.threshold}")

    return Settings(
        files=list(args.files),
        tool_mode=TableSettings(
            modules=modules,
            out_file=args.output,
            variance=args.variance,
            threshold=args.threshold,
            show=resolve_show(args.regressions, args.improvements),
            strip_fst=compile_pattern(args.strip_fst, "--strip-fst"),
            strip_snd=compile_pattern(args.strip_snd, "--strip-snd"),
            color=color,
        ),
        verbosity=verbosity,
    )


def parse_settings(argv: Optional[Sequence[str]] = None) -> Settings:
    return into_settings(build_parser().parse_args(argv))
