"""Parsing and comparing semantic versions by major, minor and patch."""

from __future__ import annotations

import re
from dataclasses import dataclass

_SEMVER_PATTERN = (
    r"v?([0-9]+)(\.[0-9]+)?(\.[0-9]+)?"
    r"(-([0-9A-Za-z\-]+(\.[0-9A-Za-z\-]+)*))?"
    r"(\+([0-9A-Za-z\-]+(\.[0-9A-Za-z\-]+)*))?"
)
_VERSION_RE = re.compile(_SEMVER_PATTERN)
_UINT64_MAX = 2**64 - 1


@dataclass(frozen=True, order=True)
class Version:
    """A semantic version reduced to its numeric X.Y.Z parts."""

    major: int = 0
    minor: int = 0
    patch: int = 0

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def compare(self, other: Version) -> int:
        """Return -1, 0 or 1 as this version is lower, equal or higher."""
        mine = (self.major, self.minor, self.patch)
        theirs = (other.major, other.minor, other.patch)
        return (mine > theirs) - (mine < theirs)

    def greater_than(self, other: Version) -> bool:
        return self.compare(other) > 0

    def greater_than_or_equal(self, other: Version) -> bool:
        return self.compare(other) >= 0


def _segment(text: str) -> int:
    value = int(text.removeprefix("."))
    if value > _UINT64_MAX:
        raise ValueError(f"version segment out of range: {text}")
    return value


def parse_version(v: str) -> Version:
    """Parse ``v`` into a Version, raising ValueError if it is not a semantic version."""
    match = _VERSION_RE.fullmatch(v)
    if match is None:
        raise ValueError(f"the {v}, it's not a semantic version")
    major, minor, patch = match.group(1, 2, 3)
    return Version(
        major=_segment(major),
        minor=_segment(minor) if minor else 0,
        patch=_segment(patch) if patch else 0,
    )