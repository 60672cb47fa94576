"""Tests for semantic version parsing and comparison."""

import pytest

from versiongate.semver import SemVer, compare, meets_minimum, parse


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1.4.0", SemVer(1, 4, 0)),
        ("v1.4.0", SemVer(1, 4, 0)),
        ("V2.0.1", SemVer(2, 0, 1)),
        ("1.2", SemVer(1, 2, 0)),
        ("1", SemVer(1, 0, 0)),
        ("", SemVer(0, 0, 0)),
        ("1.2.3.4", SemVer(1, 2, 3)),
        ("1.x.3", SemVer(1, 0, 3)),
        ("abc", SemVer(0, 0, 0)),
        (" 1.3.0 ", SemVer(1, 3, 0)),
    ],
)
def test_parse_is_lenient(raw, expected):
    assert parse(raw) == expected


def test_parse_passes_semver_through():
    v = SemVer(1, 2, 3)
    assert parse(v) is v


def test_str_renders_plain_triple():
    assert str(parse("v1.4")) == "1.4.0"


def test_compare_short_circuits_on_first_difference():
    assert compare("2.0.0", "1.9.9") == 1
    assert compare("1.3.9", "1.4.0") == -1
    assert compare("1.4.1", "1.4.0") == 1
    assert compare("1.4", "1.4.0") == 0


@pytest.mark.parametrize(
    "a, b",
    [
        ("1.0.0", "1.0.1"),
        ("0.9.9", "1.0.0"),
        ("1.2.0", "1.10.0"),
        ("3.0.0", "3.0.0"),
    ],
)
def test_compare_is_antisymmetric_and_reflexive(a, b):
    assert compare(a, b) == -compare(b, a)
    assert compare(a, a) == 0
    assert compare(b, b) == 0


def test_meets_minimum():
    assert meets_minimum("1.4.0", "1.4.0") is True
    assert meets_minimum("1.3.9", "1.4.0") is False
    assert meets_minimum("2.0.0", "1.9.9") is True


def test_ordering_matches_compare():
    versions = [parse(v) for v in ["1.10.0", "1.2.0", "0.9.9", "1.2.10"]]
    assert [str(v) for v in sorted(versions)] == ["0.9.9", "1.2.0", "1.2.10", "1.10.0"]


def test_bump_resets_lower_components():
    v = SemVer(1, 2, 3)
    assert v.bump("patch") == SemVer(1, 2, 4)
    assert v.bump("minor") == SemVer(1, 3, 0)
    assert v.bump("major") == SemVer(2, 0, 0)

    with pytest.raises(ValueError, match="Invalid version part"):
        v.bump("build")
