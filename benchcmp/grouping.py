"""
Regrouping of benchmarks: by module, by stripped name and by benchmark name
"""

import dataclasses
import logging
import re
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .benchmark import BenchmarkRecord, ComparisonGroup, SourceGroup

logger = logging.getLogger(__name__)

MODULE_SEPARATOR = "::"


class CompareBy(Enum):
    FILE = "file"
    MODULE = "module"


def split_module(name: str) -> Tuple[str, str]:
    """Split ``module::leaf`` at the first separator, ("", name) without one"""
    module, sep, leaf = name.partition(MODULE_SEPARATOR)
    if not sep:
        return "", name
    return module, leaf


def by_module_name(groups: List[SourceGroup], compare_by: CompareBy) -> List[SourceGroup]:
    """Regroup benchmarks per module instead of per file.

    Every record is renamed to its leaf name and filed under its module;
    the resulting groups are sorted by module name.
    """
    if compare_by is CompareBy.FILE:
        return groups

    modules: Dict[str, List[BenchmarkRecord]] = {}
    for group in groups:
        for bench in group.benchmarks:
            module, leaf = split_module(bench.name)
            modules.setdefault(module, []).append(dataclasses.replace(bench, name=leaf))

    return [SourceGroup(name=module, benchmarks=modules[module]) for module in sorted(modules)]


def strip_names(group: SourceGroup, pattern: Optional[re.Pattern]) -> SourceGroup:
    """Remove every match of ``pattern`` from the benchmark names of a group"""
    if pattern is None:
        return group
    return SourceGroup(
        name=group.name,
        benchmarks=[dataclasses.replace(b, name=pattern.sub("", b.name)) for b in group.benchmarks],
    )


def select_groups(groups: List[SourceGroup], names: Tuple[str, str]) -> List[SourceGroup]:
    """Pick the two named groups, an empty group stands in for a missing name"""
    selected = []
    for name in names:
        match = next((g for g in groups if g.name == name), None)
        if match is None:
            logger.debug("no benchmarks found for %r", name)
            match = SourceGroup(name=name)
        selected.append(match)
    return selected


def join_by_bench_name(groups: List[SourceGroup]) -> Tuple[List[ComparisonGroup], List[ComparisonGroup]]:
    """Pivot source groups into comparison groups keyed by benchmark name.

    Returns ``(matched, unmatched)``, both sorted by benchmark name.
    Every group contributes at most one entry per name, its first record
    of that name, and entries keep the order of ``groups``.
    """
    by_name: Dict[str, Dict[int, Tuple[str, BenchmarkRecord]]] = {}
    for index, group in enumerate(groups):
        for bench in group.benchmarks:
            entries = by_name.setdefault(bench.name, {})
            if index in entries:
                logger.debug("ignoring duplicate %r in %r", bench.name, group.name)
                continue
            entries[index] = (group.name, bench)

    matched: List[ComparisonGroup] = []
    unmatched: List[ComparisonGroup] = []
    for name in sorted(by_name):
        entries = by_name[name]
        comparison_group = ComparisonGroup(bench_name=name, assocs=[entries[i] for i in sorted(entries)])
        if len(comparison_group.assocs) < 2:
            unmatched.append(comparison_group)
        else:
            matched.append(comparison_group)
    return matched, unmatched


def warn_missing(singles: List[ComparisonGroup]) -> Dict[str, List[str]]:
    """Log one warning per source for benchmarks that have nothing to compare with"""
    missing: Dict[str, List[str]] = {}
    for group in singles:
        missing.setdefault(group.assocs[0][0], []).append(group.bench_name)

    for source in sorted(missing):
        logger.warning("ignoring test(s) %s that were only found in %r", missing[source], source)
    return missing


def by_bench_name(groups: List[SourceGroup]) -> List[ComparisonGroup]:
    """Join benchmarks across sources, warning about the ones found only once"""
    matched, unmatched = join_by_bench_name(groups)
    if unmatched:
        warn_missing(unmatched)
    return matched
