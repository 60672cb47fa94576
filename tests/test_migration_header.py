"""Tests for migration header parsing."""

import pytest

from versiongate.semver import SemVer
from versiongate.services.migrations import parse_migration_headers


def test_full_header_block():
    content = """-- @requires_version: 1.4.0
-- @affects: customer, Business
-- @breaking: true
-- @description: Renames orders.total to orders.grand_total

ALTER TABLE orders RENAME COLUMN total TO grand_total;
"""
    headers = parse_migration_headers(content)

    assert headers.requires_version == SemVer(1, 4, 0)
    assert headers.affects == ["customer", "business"]
    assert headers.breaking is True
    assert headers.description == "Renames orders.total to orders.grand_total"


def test_no_header_uses_defaults():
    headers = parse_migration_headers("CREATE TABLE coupons (id serial primary key);\n")

    assert headers.requires_version == SemVer(1, 0, 0)
    assert headers.affects == ["web", "customer", "business"]
    assert headers.breaking is False
    assert headers.description == ""


def test_defaults_are_not_shared_between_headers():
    first = parse_migration_headers("")
    first.affects.append("kiosk")

    assert parse_migration_headers("").affects == ["web", "customer", "business"]


def test_only_first_thirty_lines_are_scanned():
    filler = "-- filler\n" * 30
    headers = parse_migration_headers(filler + "-- @breaking: true\n")

    assert headers.breaking is False


def test_line_thirty_is_still_scanned():
    filler = "-- filler\n" * 29
    headers = parse_migration_headers(filler + "-- @breaking: true\n")

    assert headers.breaking is True


def test_unknown_keys_are_ignored():
    headers = parse_migration_headers("-- @author: someone\n-- @ticket: ORD-12\n")

    assert headers.breaking is False
    assert headers.description == ""


def test_breaking_only_for_literal_true():
    assert parse_migration_headers("-- @breaking: TRUE\n").breaking is True
    assert parse_migration_headers("-- @breaking: yes\n").breaking is False
    assert parse_migration_headers("-- @breaking: 1\n").breaking is False


def test_empty_affects_keeps_default_apps():
    headers = parse_migration_headers("-- @affects: , ,\n")

    assert headers.affects == ["web", "customer", "business"]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1.4.0-rc.1", SemVer(1, 4, 0)),
        ("1.4.0 (iOS)", SemVer(1, 4, 0)),
        ("1.5.0+build.7", SemVer(1, 5, 0)),
    ],
)
def test_requires_version_with_suffix_keeps_numeric_part(raw, expected):
    headers = parse_migration_headers(f"-- @requires_version: {raw}\n")

    assert headers.requires_version == expected
    assert headers.invalid_requires_version is None


@pytest.mark.parametrize("raw", ["soon", "1.x", "TBD"])
def test_unusable_requires_version_is_flagged(raw):
    headers = parse_migration_headers(f"-- @requires_version: {raw}\n")

    assert headers.invalid_requires_version == raw


def test_requires_version_accepts_v_prefix_and_short_form():
    assert parse_migration_headers("-- @requires_version: v1.5\n").requires_version == SemVer(1, 5, 0)


def test_header_pattern_tolerates_spacing_and_crlf():
    content = "--@breaking:true\r\n--   @affects:   web  \r\n"
    headers = parse_migration_headers(content)

    assert headers.breaking is True
    assert headers.affects == ["web"]
