import math

import pytest

from benchcmp.benchmark import (
    BenchmarkRecord,
    ComparisonGroup,
    Show,
    abs_percent,
    compare,
    parse_benchmarks,
    parse_line,
    should_show,
)
from benchcmp.errors import InputError
from benchcmp.utils import drop_commas_and_parse, fmt_percent, fmt_thousands_sep


def bench(ns, name="x", variance=0, throughput=None):
    return BenchmarkRecord(name=name, ns=ns, variance=variance, throughput=throughput)


class TestParseLine:
    def test_plain_line(self):
        record = parse_line("test mod::bench ... bench: 1,234 ns/iter (+/- 56)")
        assert record == BenchmarkRecord(name="mod::bench", ns=1234, variance=56, throughput=None)

    def test_throughput(self):
        record = parse_line("test a::b ... bench: 10 ns/iter (+/- 1) = 2,000 MB/s")
        assert record.throughput == 2000
        assert record.ns == 10
        assert record.variance == 1

    def test_cargo_padding_and_surrounding_text(self):
        line = "   test    sorting::quick_1k    ...   bench:     12,345,678 ns/iter (+/- 1,001)   trailing"
        record = parse_line(line)
        assert record.name == "sorting::quick_1k"
        assert record.ns == 12345678
        assert record.variance == 1001

    def test_name_without_module(self):
        assert parse_line("test toplevel ... bench: 5 ns/iter (+/- 0)").name == "toplevel"

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "running 3 tests",
            "test a::b ... ok",
            "test a::b ... 10 ns/iter (+/- 1)",
            "test a::b ... bench: fast ns/iter (+/- 1)",
            "test a::b ... bench: 10 ns/iter",
            "test a::b ... bench: , ns/iter (+/- 1)",
            "test result: ok. 0 passed; 0 failed; 0 ignored; 3 measured",
        ],
    )
    def test_rejects_non_benchmark_lines(self, line):
        assert parse_line(line) is None


class TestParseBenchmarks:
    def test_reads_all_records(self, variable_file):
        group = parse_benchmarks(variable_file)
        assert group.name == str(variable_file)
        assert [b.name for b in group.benchmarks] == ["a::one", "a::two", "b::only_variable"]

    def test_keeps_duplicates(self, tmp_path):
        path = tmp_path / "dup.txt"
        path.write_text(
            "test a::x ... bench: 1 ns/iter (+/- 0)\n"
            "test a::x ... bench: 2 ns/iter (+/- 0)\n"
        )
        assert [b.ns for b in parse_benchmarks(path).benchmarks] == [1, 2]

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.txt"
        path.write_text("\n\n\n")
        assert parse_benchmarks(path).benchmarks == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(InputError, match="could not read"):
            parse_benchmarks(tmp_path / "nope.txt")


class TestCompare:
    def test_regression(self):
        comparison = compare(bench(100), bench(150))
        assert comparison.diff_ns == 50
        assert comparison.diff_ratio == 0.5
        assert comparison.is_regression
        assert not comparison.is_improvement

    def test_improvement(self):
        comparison = compare(bench(150), bench(100))
        assert comparison.diff_ns == -50
        assert comparison.diff_ratio == pytest.approx(-1 / 3)
        assert comparison.is_improvement

    def test_zero_baseline(self):
        assert compare(bench(0), bench(10)).diff_ratio == math.inf
        assert math.isnan(compare(bench(0), bench(0)).diff_ratio)

    def test_group_compare_uses_columns(self):
        group = ComparisonGroup(
            bench_name="x",
            assocs=[("f1", bench(10)), ("f2", bench(20)), ("f3", bench(5))],
        )
        assert group.compare(0, 2).diff_ns == -5
        assert group.compare().diff_ns == 10


class TestShouldShow:
    def test_threshold(self):
        comparison = compare(bench(100), bench(105))
        assert abs_percent(comparison) == 5
        assert not should_show(comparison, threshold=10)
        assert should_show(comparison, threshold=4)
        assert should_show(comparison, threshold=5)

    def test_threshold_truncates(self):
        comparison = compare(bench(1000), bench(1099))
        assert abs_percent(comparison) == 9
        assert not should_show(comparison, threshold=10)

    def test_show_modes(self):
        regression = compare(bench(100), bench(200))
        improvement = compare(bench(200), bench(100))
        assert should_show(regression, show=Show.REGRESSIONS)
        assert not should_show(regression, show=Show.IMPROVEMENTS)
        assert should_show(improvement, show=Show.IMPROVEMENTS)
        assert not should_show(improvement, show=Show.REGRESSIONS)

    def test_zero_delta_only_shown_for_both(self):
        same = compare(bench(100), bench(100))
        assert not should_show(same, show=Show.REGRESSIONS)
        assert not should_show(same, show=Show.IMPROVEMENTS)
        assert should_show(same, show=Show.BOTH)

    def test_non_finite_ratios(self):
        assert should_show(compare(bench(0), bench(1)), threshold=100)
        assert not should_show(compare(bench(0), bench(0)), threshold=1)


class TestFormatting:
    def test_drop_commas_and_parse(self):
        assert drop_commas_and_parse("1,234,567") == 1234567
        assert drop_commas_and_parse(",") is None
        assert drop_commas_and_parse("12a") is None

    def test_thousands_sep(self):
        assert fmt_thousands_sep(0) == "0"
        assert fmt_thousands_sep(999) == "999"
        assert fmt_thousands_sep(1000) == "1,000"
        assert fmt_thousands_sep(-1234567) == "-1,234,567"

    def test_percent(self):
        assert fmt_percent(0.5) == "50.00%"
        assert fmt_percent(-1 / 3) == "-33.33%"
        assert fmt_percent(math.inf) == "inf%"
        assert fmt_percent(-math.inf) == "-inf%"
        assert fmt_percent(math.nan) == "nan%"

    def test_fmt_ns(self):
        record = bench(12345, variance=67, throughput=800)
        assert record.fmt_ns(variance=False) == "12,345 (800 MB/s)"
        assert record.fmt_ns(variance=True) == "12,345 (+/- 67) (800 MB/s)"
        assert bench(5, variance=1).fmt_ns(variance=True) == "5 (+/- 1)"
