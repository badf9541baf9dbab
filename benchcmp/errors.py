"""
Exceptions raised by benchcmp
"""


class BenchcmpError(Exception):
    """Base class for all fatal benchcmp errors"""
    exit_code = 1


class InputError(BenchcmpError):
    """A benchmark source could not be read"""


class ConfigError(BenchcmpError):
    """Invalid option value, e.g. a strip pattern that does not compile"""


class UsageError(BenchcmpError):
    """Missing or inconsistent positional arguments"""
    exit_code = 2


class PlotterUnavailable(BenchcmpError):
    """The external plotting program could not be started"""
