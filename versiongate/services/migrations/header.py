"""
Migration Header Parser

Reads the ``-- @key: value`` comment block at the top of a SQL migration:

    -- @requires_version: 1.4.0
    -- @affects: customer, business
    -- @breaking: true
    -- @description: Renames orders.total to orders.grand_total

Only the first 30 lines are scanned and unknown keys are ignored. A
missing header never blocks an otherwise safe migration.

``@requires_version`` is parsed leniently (``1.4.0-rc.1`` reads as
``1.4.0``). A value with no usable version number is kept in
``invalid_requires_version`` so the checker can refuse it.

Author: Khalil Bannouri
Version: 1.0.0
"""

import re
from dataclasses import dataclass, field
from typing import Optional

from versiongate.schemas import ALL_APP_NAMES
from versiongate.semver import SemVer, parse

HEADER_SCAN_LINES = 30
HEADER_PATTERN = re.compile(r"--\s*@(\w+):\s*(.+)")
VERSION_PATTERN = re.compile(r"^[vV]?\d+(?:\.\d+)*(?:[-+\s].*)?$")

DEFAULT_REQUIRES_VERSION = SemVer(1, 0, 0)


@dataclass
class MigrationHeader:
    """
    Compatibility metadata declared by a migration.

    Attributes:
        requires_version: Minimum client version the migration needs
        affects: App names whose deployed version must meet it
        breaking: Whether older clients break once this ships
        description: Free-text summary for the report
        invalid_requires_version: Raw @requires_version when unparseable
    """
    requires_version: SemVer = DEFAULT_REQUIRES_VERSION
    affects: list[str] = field(default_factory=lambda: list(ALL_APP_NAMES))
    breaking: bool = False
    description: str = ""
    invalid_requires_version: Optional[str] = None


def parse_migration_headers(content: str) -> MigrationHeader:
    """
    Parse the header block of a migration file.

    Args:
        content: Full text of the migration

    Returns:
        MigrationHeader: Declared metadata, defaults where absent
    """
    headers = MigrationHeader()

    for line in content.splitlines()[:HEADER_SCAN_LINES]:
        match = HEADER_PATTERN.search(line)
        if not match:
            continue

        key, value = match.group(1), match.group(2).strip()

        if key == "requires_version":
            headers.requires_version = parse(value)
            headers.invalid_requires_version = (
                None if VERSION_PATTERN.match(value) else value
            )
        elif key == "affects":
            apps = [a.strip().lower() for a in value.split(",")]
            apps = [a for a in apps if a]
            if apps:
                headers.affects = apps
        elif key == "breaking":
            headers.breaking = value.lower() == "true"
        elif key == "description":
            headers.description = value

    return headers
