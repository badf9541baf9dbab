"""
Benchmark records, comparisons and the libtest report parser
"""

import logging
import math
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .errors import InputError
from .utils import drop_commas_and_parse, fmt_thousands_sep

logger = logging.getLogger(__name__)

BENCHMARK_REGEX = re.compile(
    r"""
    test\s+(?P<name>\S+)                            # test   mod::test_name
    \s+\S+\s+bench:\s+(?P<ns>[0-9,]+)\s+ns/iter     #   ... bench: 1234   ns/iter
    \s+\(\+/-\s+(?P<variance>[0-9,]+)\)             #   (+/- 4321)
    (?:\s+=\s+(?P<throughput>[0-9,]+)\s+MB/s)?      #   = 2314 MB/s
    """,
    re.VERBOSE,
)


class Show(Enum):
    """Which comparisons end up in the table"""
    REGRESSIONS = "regressions"
    IMPROVEMENTS = "improvements"
    BOTH = "both"


@dataclass(frozen=True)
class BenchmarkRecord:
    """All extractable data from a single micro-benchmark"""
    name: str
    ns: int
    variance: int
    throughput: Optional[int] = None

    def fmt_ns(self, variance: bool) -> str:
        """Format the measurement as shown in a table cell"""
        res = fmt_thousands_sep(self.ns)
        if variance:
            res += f" (+/- {self.variance})"
        if self.throughput is not None:
            res += f" ({self.throughput} MB/s)"
        return res


@dataclass
class SourceGroup:
    """Benchmarks sharing one provenance label.

    The label is the file the benchmarks were read from or, after
    regrouping, the module they all belong to.
    """
    name: str
    benchmarks: List[BenchmarkRecord] = field(default_factory=list)


@dataclass(frozen=True)
class Comparison:
    """A comparison between a baseline and a candidate benchmark.

    Positive differences are regressions (the candidate is slower),
    negative differences are improvements.
    """
    baseline: BenchmarkRecord
    candidate: BenchmarkRecord
    diff_ns: int
    diff_ratio: float

    @property
    def is_regression(self) -> bool:
        return self.diff_ns > 0

    @property
    def is_improvement(self) -> bool:
        return self.diff_ns < 0


@dataclass
class ComparisonGroup:
    """Benchmarks with the same name, each tagged with its source label"""
    bench_name: str
    assocs: List[Tuple[str, BenchmarkRecord]] = field(default_factory=list)

    def compare(self, i1: int = 0, i2: int = 1) -> Comparison:
        return compare(self.assocs[i1][1], self.assocs[i2][1])


def parse_line(line: str) -> Optional[BenchmarkRecord]:
    """Parse a single benchmark line, None if the line is not one"""
    match = BENCHMARK_REGEX.search(line)
    if not match:
        return None

    ns = drop_commas_and_parse(match.group("ns"))
    variance = drop_commas_and_parse(match.group("variance"))
    if ns is None or variance is None:
        return None

    throughput = None
    if match.group("throughput") is not None:
        throughput = drop_commas_and_parse(match.group("throughput"))
        if throughput is None:
            return None

    return BenchmarkRecord(
        name=match.group("name"),
        ns=ns,
        variance=variance,
        throughput=throughput,
    )


def parse_benchmarks(path: Union[str, Path]) -> SourceGroup:
    """Read every benchmark line of a report file into a SourceGroup"""
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            lines = f.read().splitlines()
    except OSError as exc:
        raise InputError(f"could not read {path}: {exc}") from exc

    # skip the blank lines cargo prints before the first result
    start = 0
    while start < len(lines) and not lines[start].strip():
        start += 1

    group = SourceGroup(name=str(path))
    for line in lines[start:]:
        record = parse_line(line)
        if record is not None:
            group.benchmarks.append(record)

    logger.debug("parsed %d benchmarks from %s", len(group.benchmarks), path)
    return group


def compare(baseline: BenchmarkRecord, candidate: BenchmarkRecord) -> Comparison:
    """Compare a baseline benchmark with a candidate one"""
    diff_ns = candidate.ns - baseline.ns
    if baseline.ns:
        diff_ratio = diff_ns / baseline.ns
    elif diff_ns:
        diff_ratio = math.copysign(math.inf, diff_ns)
    else:
        diff_ratio = math.nan
    return Comparison(
        baseline=baseline,
        candidate=candidate,
        diff_ns=diff_ns,
        diff_ratio=diff_ratio,
    )


def abs_percent(comparison: Comparison) -> float:
    """Absolute change in whole percent, truncated toward zero"""
    ratio = comparison.diff_ratio
    if math.isnan(ratio):
        return 0
    if math.isinf(ratio):
        return math.inf
    return math.trunc(abs(ratio) * 100)


def should_show(comparison: Comparison, threshold: Optional[int] = None,
                show: Show = Show.BOTH) -> bool:
    """Decide whether a comparison passes the threshold and show filters"""
    if threshold is not None and abs_percent(comparison) < threshold:
        return False
    if show is Show.REGRESSIONS and comparison.diff_ns <= 0:
        return False
    if show is Show.IMPROVEMENTS and comparison.diff_ns >= 0:
        return False
    return True
