"""Unit tests for tolerant field parsing."""

from decimal import Decimal

import pytest

from compcard.processing.normalizer import (
    normalize_tag,
    parse_count,
    parse_number,
    parse_positive_number,
    parse_tag_list,
    tag_set,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, []),
        ("", []),
        ("null", []),
        ('["runway", "editorial"]', ["runway", "editorial"]),
        (["runway", "  editorial "], ["runway", "editorial"]),
        (("a", "", "b"), ["a", "b"]),
        ({"b", "a"}, ["a", "b"]),
    ],
)
def test_parse_tag_list_accepts_lists_and_json(raw, expected):
    assert parse_tag_list(raw) == expected


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw",
    [
        "[not json",
        '{"runway": true}',
        '"runway"',
        "42",
        42,
        ["runway", 3],
        [["nested"]],
    ],
)
def test_parse_tag_list_malformed_is_empty(raw, caplog):
    assert parse_tag_list(raw, "skills") == []
    assert any("skills" in r.message for r in caplog.records)


@pytest.mark.unit
def test_normalize_tag_casefolds_and_collapses_whitespace():
    assert normalize_tag("  New   York ") == "new york"
    assert tag_set(["Runway", "RUNWAY", " editorial"]) == frozenset({"runway", "editorial"})


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw, expected",
    [
        (170, 170.0),
        ("170.5", 170.5),
        (Decimal("2.5"), 2.5),
        (0, 0.0),
        (-3, -3.0),
        (None, None),
        ("", None),
        ("tall", None),
        (True, None),
        (float("nan"), None),
        ("inf", None),
    ],
)
def test_parse_number(raw, expected):
    assert parse_number(raw) == expected


@pytest.mark.unit
def test_parse_positive_number_treats_zero_as_missing():
    assert parse_positive_number(0) is None
    assert parse_positive_number(-1) is None
    assert parse_positive_number("84") == 84.0


@pytest.mark.unit
def test_parse_count():
    assert parse_count("15000") == 15000
    assert parse_count(12.9) == 12
    assert parse_count(-5) is None
    assert parse_count("lots") is None
