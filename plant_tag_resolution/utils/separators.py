"""
Separator policy shared by tokenization, naming and suffix assembly.

Three separator classes are in play:

- structural (``.``): joins base tokens and prefixes positional increments
- normalized (``_``): joins sibling values inside the suffix block
- suffix (``-``): introduces the suffix block after the base name
"""

import re
from typing import Dict, Iterable, List

STRUCTURAL = "."
NORMALIZED = "_"
SUFFIX = "-"

# Token definitions whose value carries its own leading separator.
TOKEN_SEPARATORS: Dict[str, str] = {
    "TagIncremental": STRUCTURAL,
    "TagComposite": SUFFIX,
}

_SPLIT_PATTERN = re.compile(r"[\s\-\./\\:;]+")


def normalize(text: str) -> str:
    """Upper-case ``text`` and fold every separator run into ``_``."""
    if not text:
        return ""
    folded = _SPLIT_PATTERN.sub(NORMALIZED, text.strip().upper())
    folded = re.sub(r"_+", NORMALIZED, folded)
    return folded.strip(NORMALIZED)


def split_normalized(text: str) -> List[str]:
    return [part for part in normalize(text).split(NORMALIZED) if part]


def normalize_name(name: str) -> str:
    """Unify punctuation of a composed name into the normalized separator."""
    return name.replace(STRUCTURAL, NORMALIZED).replace(SUFFIX, NORMALIZED)


def separator_for(token_key: str) -> str:
    for key, separator in TOKEN_SEPARATORS.items():
        if key.lower() == token_key.lower():
            return separator
    return ""


def with_custom_separator(token_key: str, value: str) -> str:
    """Prepend the token's custom separator once, never doubling it."""
    separator = separator_for(token_key)
    if not separator or not value:
        return value
    stripped = value.lstrip(STRUCTURAL + SUFFIX + NORMALIZED)
    return f"{separator}{stripped}"


def join_base(values: Iterable[str]) -> str:
    return STRUCTURAL.join(v for v in values if v)


def assemble_suffix(values: Iterable[str]) -> str:
    """
    Build a suffix block from ordered values.

    Values that start with the structural separator stay in front of the
    suffix separator; everything else is joined with ``_`` after it.

    >>> assemble_suffix([".0033", "ME", "SDE"])
    '.0033-ME_SDE'
    >>> assemble_suffix(["ME", "SDE"])
    '-ME_SDE'
    """
    prefix_parts: List[str] = []
    core_parts: List[str] = []
    for value in values:
        if not value:
            continue
        if value.startswith(STRUCTURAL):
            prefix_parts.append(value)
        else:
            core_parts.append(value.lstrip(SUFFIX + NORMALIZED))

    prefix = "".join(prefix_parts)
    core = NORMALIZED.join(p for p in core_parts if p)
    if not core:
        return prefix
    return f"{prefix}{SUFFIX}{core}"
