"""Tests for free-text reminder time parsing."""

from datetime import datetime, timedelta, timezone

from time_parser import parse_reminder_time

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


def test_relative_expressions_resolve_against_reference():
    """Relative phrases are offsets from the reference time"""
    assert parse_reminder_time("in one hour", NOW) == NOW + timedelta(hours=1)
    assert parse_reminder_time("in 30 minutes", NOW) == NOW + timedelta(minutes=30)
    assert parse_reminder_time("2 days from now", NOW) == NOW + timedelta(days=2)
    assert parse_reminder_time("yesterday", NOW) == NOW - timedelta(days=1)


def test_result_depends_only_on_text_and_reference():
    later = NOW + timedelta(days=3, minutes=7)

    first = parse_reminder_time("in one hour", NOW)
    assert parse_reminder_time("in one hour", later) == later + timedelta(hours=1)
    # Repeating the first call gives the same answer regardless of the call in between
    assert parse_reminder_time("in one hour", NOW) == first


def test_explicit_date():
    parsed = parse_reminder_time("2026-11-01 10:00", NOW)
    assert parsed == datetime(2026, 11, 1, 10, 0, tzinfo=timezone.utc)


def test_unrecognized_text_is_failure():
    """No fallback to 'now' or to the epoch"""
    for text in ["asdkjhasd", "", "   "]:
        assert parse_reminder_time(text, NOW) is None, f"{text!r} should not parse"


def test_result_is_utc_with_millisecond_precision():
    reference = NOW.replace(microsecond=123456)
    parsed = parse_reminder_time("in one hour", reference)

    assert parsed.tzinfo is not None
    assert parsed.utcoffset() == timedelta(0)
    assert parsed == (reference + timedelta(hours=1)).replace(microsecond=123000)


def test_naive_reference_is_treated_as_utc():
    naive = NOW.replace(tzinfo=None)
    assert parse_reminder_time("in one hour", naive) == NOW + timedelta(hours=1)


def test_incomplete_dates_resolve_forward():
    """Missing date parts fill in towards the future; explicit past stays past"""
    assert parse_reminder_time("9am", NOW) == datetime(2026, 10, 20, 9, 0, tzinfo=timezone.utc)
    assert parse_reminder_time("March 3", NOW).date() == datetime(2027, 3, 3).date()
    assert parse_reminder_time("2 days ago", NOW) == NOW - timedelta(days=2)
