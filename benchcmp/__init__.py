"""
benchcmp - compare Rust micro-benchmark results across files or modules
"""

from .benchmark import (
    BenchmarkRecord,
    Comparison,
    ComparisonGroup,
    Show,
    SourceGroup,
    compare,
    parse_benchmarks,
    parse_line,
    should_show,
)
from .errors import BenchcmpError, ConfigError, InputError, PlotterUnavailable, UsageError
from .grouping import CompareBy, by_bench_name, by_module_name, strip_names

__version__ = "0.1.0"
