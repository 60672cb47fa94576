"""
Semantic Version Utilities

Shared version-numbering convention for every client app and every
migration header: ``vX.Y.Z`` strings compared component-wise.

Parsing is deliberately lenient. A missing or non-numeric component is
treated as 0 so that a sloppy version string never breaks a client or a
release pipeline:

    >>> parse("v1.4")
    SemVer(major=1, minor=4, patch=0)
    >>> parse("")
    SemVer(major=0, minor=0, patch=0)
    >>> meets_minimum("1.3.9", "1.4.0")
    False

Author: Khalil_Bannouri
Version: 1.0.0
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True, order=True)
class SemVer:
    """
    Immutable (major, minor, patch) triple.

    Field order drives the generated comparison methods, so ordering is
    lexicographic over major, minor, patch.
    """
    major: int = 0
    minor: int = 0
    patch: int = 0

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def bump(self, part: str = "patch") -> "SemVer":
        """
        Return the next version for a release of the given kind.

        Args:
            part: One of "major", "minor", "patch"

        Returns:
            SemVer: Bumped version with lower components reset to 0

        Raises:
            ValueError: If part is not a known component
        """
        if part == "major":
            return SemVer(self.major + 1, 0, 0)
        if part == "minor":
            return SemVer(self.major, self.minor + 1, 0)
        if part == "patch":
            return SemVer(self.major, self.minor, self.patch + 1)
        raise ValueError(
            f"Invalid version part '{part}'. Must be one of: major, minor, patch"
        )


VersionLike = Union[str, SemVer]


def _to_int(component: str) -> int:
    """Coerce a single version component, falling back to 0."""
    component = component.strip()
    if not component.isdecimal():
        return 0
    return int(component)


def parse(version: VersionLike) -> SemVer:
    """
    Parse a version string into a SemVer.

    Never raises. A leading "v" or "V" is stripped, components beyond
    patch are ignored and anything non-numeric becomes 0.
    """
    if isinstance(version, SemVer):
        return version

    text = (version or "").strip()
    if text[:1] in ("v", "V"):
        text = text[1:]

    parts = [_to_int(p) for p in text.split(".")[:3]] if text else []
    parts += [0] * (3 - len(parts))

    return SemVer(*parts)


def compare(a: VersionLike, b: VersionLike) -> int:
    """
    Compare two versions.

    Returns:
        int: -1 if a < b, 0 if a == b, 1 if a > b
    """
    va = parse(a)
    vb = parse(b)

    for left, right in (
        (va.major, vb.major),
        (va.minor, vb.minor),
        (va.patch, vb.patch),
    ):
        if left != right:
            return 1 if left > right else -1

    return 0


def meets_minimum(current: VersionLike, minimum: VersionLike) -> bool:
    """Check whether current is at least minimum."""
    return compare(current, minimum) >= 0


__all__ = ["SemVer", "VersionLike", "parse", "compare", "meets_minimum"]
