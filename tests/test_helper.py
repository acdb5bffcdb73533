from datetime import datetime, timezone

import pytest

from gamification.errors import ValidationError
from gamification.utils.helper import parse_finished_at


def test_empty_means_now():
    assert parse_finished_at(None) is None
    assert parse_finished_at('  ') is None


def test_naive_timestamps_are_utc():
    assert parse_finished_at('2026-02-05 10:30:00') == datetime(
        2026, 2, 5, 10, 30, tzinfo=timezone.utc
    )
    assert parse_finished_at('2026-02-05T10:30:00') == datetime(
        2026, 2, 5, 10, 30, tzinfo=timezone.utc
    )


def test_offset_is_kept():
    parsed = parse_finished_at('2026-02-05T10:30:00+02:00')
    assert parsed.utcoffset().total_seconds() == 7200


def test_garbage_is_rejected():
    with pytest.raises(ValidationError):
        parse_finished_at('not a date')


def test_date_only_is_midnight_utc():
    assert parse_finished_at('2026-02-05') == datetime(2026, 2, 5, tzinfo=timezone.utc)
