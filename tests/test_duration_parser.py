import pytest

from modrelay.threads.duration_parser import format_duration, parse_duration, suggest_durations
from modrelay.threads.errors import InvalidDuration


@pytest.mark.parametrize("raw", [None, ""])
def test_missing_duration_returns_none(raw):
    assert parse_duration(raw) is None


@pytest.mark.parametrize("raw,expected", [
    ("5", 5 * 60_000),
    (" 5 ", 5 * 60_000),
    ("90", 90 * 60_000),
    ("1.5", 90_000),
    ("2d", 172_800_000),
    ("3h30m", 12_600_000),
    ("1 day", 86_400_000),
    ("45s", 45_000),
    ("1w", 604_800_000),
])
def test_parse_duration(raw, expected):
    assert parse_duration(raw) == expected


@pytest.mark.parametrize("number", ["1", "5", "90", "2.5", "1440"])
def test_bare_numbers_are_minutes(number):
    assert parse_duration(number) == parse_duration(number + "m")


@pytest.mark.parametrize("raw", ["abc", "2x", "   ", "soon", "nan", "inf", "5 parsecs"])
def test_malformed_input_is_rejected(raw):
    with pytest.raises(InvalidDuration):
        parse_duration(raw)


@pytest.mark.parametrize("raw", ["0", "-5", "0m", "0.0000001", "0s"])
def test_non_positive_durations_are_rejected(raw):
    with pytest.raises(InvalidDuration):
        parse_duration(raw)


def test_invalid_duration_carries_translation_key():
    with pytest.raises(InvalidDuration) as excinfo:
        parse_duration("whenever")
    assert excinfo.value.translation_key == "common.errors.invalid_time"


@pytest.mark.parametrize("milliseconds,expected", [
    (172_800_000, "2 days"),
    (12_600_000, "3 hours, 30 minutes"),
    (60_000, "1 minute"),
    (90_061_000, "1 day, 1 hour"),
    (1_209_600_000, "2 weeks"),
    (500, "less than a second"),
])
def test_format_duration(milliseconds, expected):
    assert format_duration(milliseconds) == expected


def test_suggestions_for_empty_input_use_defaults():
    suggestions = suggest_durations("", ["1h", "1d", "bogus"])
    assert suggestions == [("1 hour", "1h"), ("1 day", "1d")]


def test_suggestion_echoes_parseable_input():
    assert suggest_durations("90", []) == [("1 hour, 30 minutes", "90")]


def test_no_suggestion_for_unparseable_input():
    assert suggest_durations("tomorrowish", ["1h"]) == []
