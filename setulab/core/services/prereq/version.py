"""
Version parsing and comparison (pure).

Tool versions are compared on ``MAJOR.MINOR`` only: the patch level is
discarded and each component is compared as an integer, so ``9.9`` is
below ``20.10``.  No I/O, no subprocess.
"""

from __future__ import annotations

import re

_TRIPLE_RE = re.compile(r"(\d+\.\d+\.\d+)")
_PAIR_RE = re.compile(r"(\d+\.\d+)")
_MAJOR_MINOR_RE = re.compile(r"^v?(\d+)(?:\.(\d+))?")


def extract_version(text: str) -> str | None:
    """First ``MAJOR.MINOR.PATCH`` in ``text``, else the first ``MAJOR.MINOR``.

    >>> extract_version("Docker version 24.0.7, build afdd53b")
    '24.0.7'
    >>> extract_version("jq-1.6")
    '1.6'
    """
    if not text:
        return None
    match = _TRIPLE_RE.search(text) or _PAIR_RE.search(text)
    return match.group(1) if match else None


def normalize_major_minor(version: str) -> tuple[int, int] | None:
    """``"20.10.5"`` → ``(20, 10)``.  A bare major gets minor 0.

    Returns None when ``version`` does not start with a number.
    """
    match = _MAJOR_MINOR_RE.match(version.strip())
    if not match:
        return None
    major, minor = match.group(1), match.group(2)
    return int(major), int(minor or 0)


def version_at_least(actual: str, required: str) -> bool:
    """Whether ``actual`` meets the inclusive ``required`` floor.

    An unparseable ``actual`` never satisfies a floor.

    Raises:
        ValueError: ``required`` is not a version.
    """
    floor = normalize_major_minor(required)
    if floor is None:
        raise ValueError(f"Invalid minimum version: {required!r}")

    found = normalize_major_minor(actual)
    if found is None:
        return False
    return found >= floor
