"""Locale-tolerant parsing of numeric table cells.

Plate-reader and spreadsheet exports mix ``.`` and ``,`` as either the
decimal or the thousands separator.  The rules below only look at the
punctuation of the value itself; no locale detection is attempted.

A value with exactly three characters after its last separator is always
read as a thousands grouping (``"-185,789"`` -> ``-185789``), even when
that was meant as a fraction.
"""

from __future__ import annotations

import math
import numbers
import re
from typing import Any

NOT_A_NUMBER = math.nan

# Longest leading decimal literal; trailing text such as overflow markers
# ("1234*") or units is ignored.
_LEADING_NUMBER = re.compile(r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _chars_after(text: str, index: int) -> int:
    return len(text) - index - 1


def normalise_separators(text: str) -> str:
    """Return ``text`` rewritten so that ``.`` is the only decimal mark."""

    has_comma = "," in text
    has_period = "." in text

    if has_comma and has_period:
        last_comma = text.rfind(",")
        last_period = text.rfind(".")
        if last_comma > last_period:
            if _chars_after(text, last_comma) == 3:
                return text.replace(".", "").replace(",", "")
            return text.replace(".", "").replace(",", ".", 1)
        return text.replace(",", "")

    if has_comma:
        if _chars_after(text, text.rfind(",")) == 3:
            return text.replace(",", "")
        return text.replace(",", ".", 1)

    return text


def parse_number(value: Any) -> float:
    """Parse ``value`` into a float, returning NaN when it is not numeric."""

    if isinstance(value, bool):
        return NOT_A_NUMBER
    if isinstance(value, numbers.Real):
        return float(value)
    if not isinstance(value, str):
        return NOT_A_NUMBER

    match = _LEADING_NUMBER.match(normalise_separators(value.strip()))
    if match is None:
        return NOT_A_NUMBER
    return float(match.group(0).replace("Infinity", "inf"))


def is_number(value: Any) -> bool:
    return not math.isnan(parse_number(value))


def coerce_cell(value: Any) -> Any:
    """Numeric value of ``value`` when parseable, otherwise ``value`` itself."""

    parsed = parse_number(value)
    return value if math.isnan(parsed) else parsed
