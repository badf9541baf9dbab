"""
Number parsing and formatting helpers
"""

from typing import Optional


def drop_commas(s: str) -> str:
    """Drop every thousands separator from a digit group"""
    return s.replace(",", "")


def drop_commas_and_parse(s: str) -> Optional[int]:
    """Parse a digit group like ``1,234`` into an int, None when it is not a number"""
    digits = drop_commas(s)
    if not (digits.isascii() and digits.isdigit()):
        return None
    return int(digits)


def fmt_thousands_sep(n: int) -> str:
    """Format an integer with comma thousands separators, keeping the sign"""
    return f"{n:,}"


def fmt_percent(ratio: float) -> str:
    """Format a ratio as a percentage with two decimals.

    Non-finite ratios (baseline of 0 ns) come out as ``inf%``, ``-inf%``
    or ``nan%``.
    """
    return f"{ratio * 100:.2f}%"
