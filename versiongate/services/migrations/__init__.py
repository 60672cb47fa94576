"""
Migration Compatibility Module

Build-time checks that pending schema migrations do not break app
versions already deployed.

Usage:
    from versiongate.services.migrations import (
        DeployedVersionTable,
        MigrationCompatibilityChecker,
    )

    checker = MigrationCompatibilityChecker(
        DeployedVersionTable.from_settings(get_migration_settings())
    )
    report = checker.check_files(checker.discover(
        "supabase/migrations", "supabase/safe_migrations"
    ))

Author: Khalil Bannouri
Version: 1.0.0
"""

from versiongate.services.migrations.header import (
    MigrationHeader,
    parse_migration_headers,
)
from versiongate.services.migrations.checker import (
    CheckReport,
    DeployedVersionTable,
    MigrationCheckResult,
    MigrationCompatibilityChecker,
)

__all__ = [
    "MigrationHeader",
    "parse_migration_headers",
    "CheckReport",
    "DeployedVersionTable",
    "MigrationCheckResult",
    "MigrationCompatibilityChecker",
]
