import datetime

from app.utils.timezone import ensure_utc, format_iso_utc, get_local_time, local_today, local_tzinfo, utc_now


def test_utc_now_is_aware():
    now = utc_now()
    assert now.tzinfo is not None
    assert now.utcoffset() == datetime.timedelta(0)


def test_ensure_utc_handles_naive_and_aware():
    naive_dt = datetime.datetime(2023, 10, 14, 15, 30, 0)
    assert ensure_utc(naive_dt) == naive_dt.replace(tzinfo=datetime.timezone.utc)

    pacific_tz = datetime.timezone(datetime.timedelta(hours=-8))
    pacific_dt = datetime.datetime(2023, 10, 14, 15, 30, 0, tzinfo=pacific_tz)
    assert ensure_utc(pacific_dt) == datetime.datetime(2023, 10, 14, 23, 30, 0, tzinfo=datetime.timezone.utc)
    assert ensure_utc(None) is None


def test_local_time_respects_timezone_name():
    assert get_local_time("UTC").utcoffset() == datetime.timedelta(0)
    # Unknown zones fall back to UTC rather than raising
    assert get_local_time("Not/AZone").utcoffset() == datetime.timedelta(0)
    assert get_local_time("").tzinfo is not None


def test_local_today_is_a_date():
    today = local_today("UTC")
    assert isinstance(today, datetime.date) and not isinstance(today, datetime.datetime)


def test_format_iso_utc():
    assert format_iso_utc(None) == ""
    assert format_iso_utc(datetime.datetime(2024, 5, 15, 12, 0)) == "2024-05-15T12:00:00+00:00"


def test_local_tzinfo_follows_local_time_fallbacks():
    assert local_tzinfo("Not/AZone") is datetime.timezone.utc
    assert local_tzinfo("") is not None
