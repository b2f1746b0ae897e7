"""
Suffix increment extraction from free-text descriptions.

This is a heuristic. Descriptions are matched against three patterns, first
hit wins:

1. four digits followed by ``_<n>``, delimited by ``_``/``-`` or end
   (``..._0033_2-...`` -> ``0033_2``)
2. four digits delimited by ``_``/``-`` or end (``..._0033-...`` -> ``0033``)
3. two or three trailing digits, left-padded to four (``...N12`` -> ``0012``)
"""

import re
from typing import Optional

_FOUR_DIGIT_WITH_INDEX = re.compile(r"[_\-](\d{4}_\d+)(?:[_\-]|$)")
_FOUR_DIGIT = re.compile(r"[_\-](\d{4})(?:[_\-]|$)")
_TRAILING_DIGITS = re.compile(r"(\d{2,3})$")


def extract_increment(description: Optional[str]) -> str:
    """Return the increment found in ``description`` or an empty string."""
    if not description:
        return ""
    text = description.strip()

    match = _FOUR_DIGIT_WITH_INDEX.search(text)
    if match:
        return match.group(1)

    match = _FOUR_DIGIT.search(text)
    if match:
        return match.group(1)

    match = _TRAILING_DIGITS.search(text)
    if match:
        return match.group(1).zfill(4)

    return ""
