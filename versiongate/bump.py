"""
Version Bump CLI

Bumps the ``version = "X.Y.Z"`` line of a project file by release kind
and prints the new version. When GITHUB_OUTPUT is set, ``version=<new>``
is appended to it for later pipeline steps.

Usage:
    bump-version            # patch: 1.0.0 -> 1.0.1
    bump-version minor      # 1.0.0 -> 1.1.0
    bump-version major --file=pyproject.toml

Exit codes:
    0 - Version bumped
    1 - File missing or has no version line

Author: Khalil Bannouri
Version: 1.0.0
"""

import argparse
import os
import re
import sys
from pathlib import Path
from typing import Optional

from versiongate.semver import SemVer, parse

VERSION_LINE = re.compile(r'^(version\s*=\s*")([^"]*)(")', re.MULTILINE)
BUMP_PARTS = ("patch", "minor", "major")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bump-version",
        description="Bump the project version",
    )
    parser.add_argument(
        "part",
        nargs="?",
        default="patch",
        choices=BUMP_PARTS,
        help="patch - bug fixes, minor - new features, major - breaking changes",
    )
    parser.add_argument(
        "--file",
        default="pyproject.toml",
        help="File holding the version line (default: pyproject.toml)",
    )
    return parser


def bump_file(path: Path, part: str) -> tuple[SemVer, SemVer]:
    """
    Rewrite the first version line in a file.

    Returns:
        tuple: (current, new) versions

    Raises:
        ValueError: If the file has no version line
    """
    content = path.read_text(encoding="utf-8")
    match = VERSION_LINE.search(content)
    if match is None:
        raise ValueError(f"No version line found in {path}")

    current = parse(match.group(2))
    new = current.bump(part)

    updated = (
        content[:match.start()]
        + f"{match.group(1)}{new}{match.group(3)}"
        + content[match.end():]
    )
    path.write_text(updated, encoding="utf-8")
    return current, new


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    path = Path(args.file)

    if not path.is_file():
        print(f"File not found: {args.file}", file=sys.stderr)
        return 1

    try:
        current, new = bump_file(path, args.part)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1

    print(f"Bumping version: {current} -> {new}")
    print(f"Updated {path.name}")
    print(f"\nNew version: {new}")

    github_output = os.environ.get("GITHUB_OUTPUT")
    if github_output:
        with open(github_output, "a", encoding="utf-8") as f:
            f.write(f"version={new}\n")

    return 0


if __name__ == "__main__":
    sys.exit(main())
