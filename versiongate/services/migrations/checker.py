"""
Migration Compatibility Checker

Release-time gate that stops schema changes which would break client
builds already in users' hands.

For every pending migration:
    1. Parse its header block
    2. Non-breaking migrations pass immediately
    3. Breaking migrations must have every affected app's deployed
       version at or above ``@requires_version``

A single incompatible or unreadable migration fails the whole run. There
are no retries and no partial success.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

from versiongate.core.config import MigrationSettings
from versiongate.semver import SemVer, parse, meets_minimum
from versiongate.services.migrations.header import (
    MigrationHeader,
    parse_migration_headers,
)

logger = logging.getLogger(__name__)

MIGRATION_EXTENSION = ".sql"
DEFAULT_TEMPLATE_NAME = "MIGRATION_TEMPLATE.sql"

PathLike = Union[str, Path]


@dataclass
class DeployedVersionTable:
    """
    Version currently deployed to production, per app name.

    Maintained by hand at release time; this tool never discovers it.
    """
    versions: dict[str, SemVer] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> "DeployedVersionTable":
        """Build from plain version strings, e.g. {"web": "1.3.0"}."""
        return cls({app.lower(): parse(v) for app, v in mapping.items()})

    @classmethod
    def from_settings(cls, settings: MigrationSettings) -> "DeployedVersionTable":
        """Build from DEPLOYED_*_VERSION settings."""
        return cls.from_mapping(settings.deployed_versions)

    def get(self, app: str) -> Optional[SemVer]:
        """Deployed version for an app, or None if the app is unknown."""
        return self.versions.get(app)


@dataclass
class MigrationCheckResult:
    """
    Outcome of checking one migration file.

    Attributes:
        file: File name, for display
        path: Full path that was read
        headers: Parsed header block
        compatible: False if the migration must not ship
        issues: Human-readable problems found
        error: Read/decode error, if the file could not be checked
    """
    file: str
    path: Path
    headers: MigrationHeader = field(default_factory=MigrationHeader)
    compatible: bool = True
    issues: list[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class CheckReport:
    """Aggregate of every checked migration, in check order."""
    results: list[MigrationCheckResult] = field(default_factory=list)

    @property
    def breaking(self) -> list[MigrationCheckResult]:
        return [r for r in self.results if r.headers.breaking]

    @property
    def incompatible(self) -> list[MigrationCheckResult]:
        return [r for r in self.results if not r.compatible]

    @property
    def unreadable(self) -> list[MigrationCheckResult]:
        return [r for r in self.results if r.error is not None]

    @property
    def passed(self) -> bool:
        """True iff every checked migration is compatible."""
        return all(r.compatible for r in self.results)


class MigrationCompatibilityChecker:
    """
    Cross-checks migration headers against deployed app versions.

    Example:
        >>> deployed = DeployedVersionTable.from_mapping(
        ...     {"web": "1.3.0", "customer": "1.2.0", "business": "1.2.0"}
        ... )
        >>> checker = MigrationCompatibilityChecker(deployed)
        >>> report = checker.check_files(checker.discover(
        ...     "supabase/migrations", "supabase/safe_migrations"
        ... ))
        >>> report.passed
        False
    """

    def __init__(
        self,
        deployed: DeployedVersionTable,
        template_name: str = DEFAULT_TEMPLATE_NAME,
    ):
        """
        Args:
            deployed: Deployed version per app
            template_name: File in the safe migrations directory to skip
        """
        self.deployed = deployed
        self.template_name = template_name

    @staticmethod
    def _list_sql(directory: Path, exclude: Optional[str] = None) -> list[Path]:
        """Sorted *.sql files directly inside a directory."""
        if not directory.is_dir():
            logger.debug(f"Migrations directory not found: {directory}")
            return []

        return sorted(
            p for p in directory.iterdir()
            if p.is_file()
            and p.name.endswith(MIGRATION_EXTENSION)
            and p.name != exclude
        )

    def discover(
        self,
        migrations_dir: PathLike,
        safe_migrations_dir: PathLike,
    ) -> list[Path]:
        """
        Every migration to check: the primary directory first, then the
        safe migrations directory without its template.

        Missing directories contribute no files.
        """
        files = self._list_sql(Path(migrations_dir))
        files += self._list_sql(Path(safe_migrations_dir), exclude=self.template_name)
        return files

    def check_file(self, path: PathLike) -> MigrationCheckResult:
        """
        Check a single migration file.

        A file that cannot be read or decoded is reported incompatible.
        """
        path = Path(path)
        result = MigrationCheckResult(file=path.name, path=path)

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeError) as e:
            logger.error(f"Unable to read migration {path}: {e}")
            result.compatible = False
            result.error = str(e)
            result.issues.append(f"Unable to read migration: {e}")
            return result

        headers = parse_migration_headers(content)
        result.headers = headers

        if not headers.breaking:
            return result

        if headers.invalid_requires_version is not None:
            result.compatible = False
            result.issues.append(
                f"Invalid @requires_version: {headers.invalid_requires_version}"
            )

        for app in headers.affects:
            deployed_version = self.deployed.get(app)

            if deployed_version is None:
                result.issues.append(f"Unknown app: {app}")
                continue

            if not meets_minimum(deployed_version, headers.requires_version):
                result.compatible = False
                result.issues.append(
                    f"BREAKING: {app} app (v{deployed_version}) doesn't meet "
                    f"required version {headers.requires_version}"
                )

        logger.debug(
            f"Checked {path.name}: breaking, "
            f"{'compatible' if result.compatible else 'INCOMPATIBLE'}"
        )
        return result

    def check_files(self, paths: Iterable[PathLike]) -> CheckReport:
        """Check files sequentially, preserving order in the report."""
        return CheckReport(results=[self.check_file(p) for p in paths])
