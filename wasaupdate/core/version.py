"""Semantic version parsing and ordering.

Implements the SemVer 2.0.0 grammar strictly: ``MAJOR.MINOR.PATCH`` with an
optional ``-prerelease`` and ``+build`` suffix, no leading ``v`` and no
leading zeros in numeric identifiers. Precedence follows SemVer section 11.
Build metadata is ignored for precedence and only used as a final tie-break,
so ordering stays total and consistent with structural equality.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering
from typing import Tuple, Union

# Official pattern from semver.org, with named groups
_SEMVER_RE = re.compile(
    r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$",
    re.ASCII,
)

Identifier = Union[int, str]


def _split_identifiers(value: str) -> Tuple[Identifier, ...]:
    if not value:
        return ()
    return tuple(int(part) if part.isdigit() else part for part in value.split("."))


def _compare_identifiers(left: Tuple[Identifier, ...], right: Tuple[Identifier, ...]) -> int:
    for a, b in zip(left, right):
        if a == b:
            continue
        # Numeric identifiers always have lower precedence than alphanumeric ones
        if isinstance(a, int) and isinstance(b, int):
            return -1 if a < b else 1
        if isinstance(a, int):
            return -1
        if isinstance(b, int):
            return 1
        return -1 if a < b else 1
    if len(left) == len(right):
        return 0
    return -1 if len(left) < len(right) else 1


@total_ordering
@dataclass(frozen=True)
class SemanticVersion:
    """A parsed semantic version."""

    major: int
    minor: int
    patch: int
    prerelease: str = ""
    build: str = ""

    @classmethod
    def parse(cls, text: str) -> "SemanticVersion":
        """Parse ``text``; raise ``ValueError`` with a diagnostic on failure."""
        if not isinstance(text, str):
            raise ValueError(f"expected a string, got {type(text).__name__}")
        if not text:
            raise ValueError("empty string, expected MAJOR.MINOR.PATCH")
        match = _SEMVER_RE.fullmatch(text)
        if match is None:
            raise ValueError(_diagnose(text))
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            prerelease=match.group("prerelease") or "",
            build=match.group("build") or "",
        )

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def _compare(self, other: "SemanticVersion") -> int:
        core_self = (self.major, self.minor, self.patch)
        core_other = (other.major, other.minor, other.patch)
        if core_self != core_other:
            return -1 if core_self < core_other else 1
        # A pre-release version has lower precedence than the normal version
        if self.prerelease != other.prerelease:
            if not self.prerelease:
                return 1
            if not other.prerelease:
                return -1
            result = _compare_identifiers(
                _split_identifiers(self.prerelease), _split_identifiers(other.prerelease)
            )
            if result:
                return result
        if self.build == other.build:
            return 0
        result = _compare_identifiers(_split_identifiers(self.build), _split_identifiers(other.build))
        if result:
            return result
        # "01" and "1" are distinct build identifiers
        return -1 if self.build < other.build else 1

    def precedence_equals(self, other: "SemanticVersion") -> bool:
        """Return True when both versions have the same precedence (build ignored)."""
        return (self.major, self.minor, self.patch, self.prerelease) == (
            other.major,
            other.minor,
            other.patch,
            other.prerelease,
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self._compare(other) < 0

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.build:
            text += f"+{self.build}"
        return text


def _diagnose(text: str) -> str:
    """Return a short explanation of why ``text`` is not a semantic version."""
    if text != text.strip():
        return "unexpected leading or trailing whitespace"
    if text[:1] in ("v", "V"):
        return "unexpected leading 'v'"
    core = re.split(r"[-+]", text, maxsplit=1)[0]
    parts = core.split(".")
    if len(parts) != 3:
        return f"expected MAJOR.MINOR.PATCH, found {len(parts)} component(s)"
    for name, part in zip(("major", "minor", "patch"), parts):
        if not (part.isascii() and part.isdigit()):
            return f"invalid {name} version number '{part}'"
        if len(part) > 1 and part.startswith("0"):
            return f"invalid leading zero in {name} version number"
    return "invalid pre-release or build metadata"
