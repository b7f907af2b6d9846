from datetime import UTC, datetime, timedelta, timezone

from leadconsole.core.time import EPOCH, parse_timestamp, utc_now


def test_utc_now_is_timezone_aware_utc():
    value = utc_now()
    assert value.tzinfo is UTC


def test_parse_timestamp_handles_zulu_offsets_and_naive_values():
    assert parse_timestamp("2024-03-01T12:00:00Z") == datetime(2024, 3, 1, 12, tzinfo=UTC)
    assert parse_timestamp("2024-03-01T14:00:00+02:00") == datetime(2024, 3, 1, 12, tzinfo=UTC)
    assert parse_timestamp("2024-03-01T12:00:00").tzinfo is UTC
    assert parse_timestamp(datetime(2024, 3, 1, 12, tzinfo=timezone(timedelta(hours=1)))).hour == 12


def test_parse_timestamp_degrades_to_epoch():
    assert parse_timestamp(None) == EPOCH
    assert parse_timestamp("") == EPOCH
    assert parse_timestamp("yesterday") == EPOCH
    assert parse_timestamp(12345) == EPOCH
