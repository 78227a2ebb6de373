"""Tolerant ``major.minor.patch`` parsing and comparison.

Version strings that do not look like semver (branch names such as ``main``,
commit hashes, empty strings) are not errors: they parse to ``None`` and never
compare as older or newer than anything.
"""

from __future__ import annotations

import re
from typing import NamedTuple

SEMVER_PATTERN = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)")


class ParsedVersion(NamedTuple):
    major: int
    minor: int
    patch: int


def parse_semver(raw: str) -> ParsedVersion | None:
    if not (match := SEMVER_PATTERN.match(raw.strip())):
        return None
    try:
        return ParsedVersion(*(int(group) for group in match.groups()))
    except ValueError:
        return None


def looks_like_semver(name: str) -> bool:
    return SEMVER_PATTERN.match(name) is not None


def compare_versions(current: str, latest: str) -> int:
    """Return -1 if ``current`` is older than ``latest``, 1 if newer, else 0."""
    current_parsed = parse_semver(current)
    latest_parsed = parse_semver(latest)
    if current_parsed is None or latest_parsed is None:
        return 0

    for current_part, latest_part in zip(current_parsed, latest_parsed, strict=True):
        if current_part < latest_part:
            return -1
        if current_part > latest_part:
            return 1
    return 0
