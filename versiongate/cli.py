"""
Migration Compatibility Checker CLI

Validates that pending migrations are compatible with deployed app
versions. Blocks any migration marked ``@breaking: true`` whose
``@requires_version`` exceeds a deployed client version.

Usage:
    check-migration-compat
    check-migration-compat --file=supabase/migrations/066_new_feature.sql

Environment:
    DEPLOYED_WEB_VERSION, DEPLOYED_CUSTOMER_VERSION, DEPLOYED_BUSINESS_VERSION

Exit codes:
    0 - All migrations compatible
    1 - Incompatible migration found, or the given file does not exist

Author: Khalil Bannouri
Version: 1.0.0
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from versiongate.core.config import get_migration_settings, setup_logging
from versiongate.services.migrations import (
    CheckReport,
    DeployedVersionTable,
    MigrationCompatibilityChecker,
)

EXIT_PASSED = 0
EXIT_FAILED = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="check-migration-compat",
        description="Check pending migrations against deployed app versions",
    )
    parser.add_argument(
        "--file",
        help="Check a single migration file instead of the migration directories",
    )
    parser.add_argument(
        "--migrations-dir",
        help="Primary migrations directory (default: MIGRATIONS_DIR)",
    )
    parser.add_argument(
        "--safe-migrations-dir",
        help="Safe migrations directory (default: SAFE_MIGRATIONS_DIR)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show debug logging",
    )
    return parser


def print_deployed_versions(deployed: DeployedVersionTable) -> None:
    print("Migration Compatibility Checker")
    print("================================")
    print("")
    print("Deployed versions:")
    for app, version in deployed.versions.items():
        print(f"  {app}: v{version}")
    print("")


def print_report(report: CheckReport) -> None:
    """Print breaking migrations, unreadable files and the summary."""
    breaking = report.breaking
    unreadable = report.unreadable

    if breaking:
        print("Breaking migrations found:")
        for r in breaking:
            status = "✓" if r.compatible else "✗"
            print(f"  {status} {r.file}")
            print(f"    Requires: v{r.headers.requires_version}")
            print(f"    Affects: {', '.join(r.headers.affects)}")
            if r.headers.description:
                print(f"    Description: {r.headers.description}")
            for issue in r.issues:
                print(f"    ⚠ {issue}")
            print("")

    if unreadable:
        print("Unreadable migrations:")
        for r in unreadable:
            print(f"  ✗ {r.file}")
            for issue in r.issues:
                print(f"    ⚠ {issue}")
            print("")

    print("--------------------------------")
    print("Summary:")
    print(f"  Total migrations: {len(report.results)}")
    print(f"  Breaking changes: {len(breaking)}")
    print(f"  Incompatible: {len(report.incompatible)}")
    print("")

    if report.passed:
        print("✓ PASSED: All migrations are compatible.")
    else:
        print("❌ FAILED: Some migrations are incompatible with deployed versions.")
        print("")
        print("Options:")
        print("  1. Update the deployed app versions first")
        print("  2. Lower the @requires_version in the migration")
        print("  3. Make the migration non-breaking")


def main(argv: Optional[list[str]] = None) -> int:
    """
    Run the checker.

    Returns:
        int: Process exit code
    """
    args = build_parser().parse_args(argv)

    setup_logging(logging.WARNING, stream=sys.stderr, debug=args.verbose)
    settings = get_migration_settings()

    deployed = DeployedVersionTable.from_settings(settings)
    checker = MigrationCompatibilityChecker(
        deployed,
        template_name=settings.migration_template_name,
    )

    print_deployed_versions(deployed)

    if args.file:
        path = Path(args.file)
        if not path.is_file():
            print(f"File not found: {args.file}", file=sys.stderr)
            return EXIT_FAILED
        files = [path]
    else:
        files = checker.discover(
            args.migrations_dir or settings.migrations_dir,
            args.safe_migrations_dir or settings.safe_migrations_dir,
        )

    if not files:
        print("No migration files found.")
        return EXIT_PASSED

    print(f"Checking {len(files)} migration(s)...")
    print("")

    report = checker.check_files(files)
    print_report(report)

    return EXIT_PASSED if report.passed else EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
