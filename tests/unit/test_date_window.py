import unittest
from datetime import date, datetime, timedelta, timezone

from app.schemas import Release
from app.services.date_window import compute_window, filter_by_date, parse_release_date, parse_release_datetime


def make_release(title, release_date):
    return Release(title=title, platform="Netflix", genre="Drama", release_date=release_date)


WEDNESDAY = date(2024, 5, 15)
MONDAY = date(2024, 5, 13)


class TestComputeWindow(unittest.TestCase):
    def test_month_window_covers_whole_month(self):
        start, end = compute_window("month", date(2024, 2, 10))
        self.assertEqual(start, date(2024, 2, 1))
        self.assertEqual(end, date(2024, 2, 29))

    def test_week_window_from_wednesday(self):
        start, end = compute_window("week", WEDNESDAY)
        self.assertEqual(start, MONDAY - timedelta(days=7))
        self.assertEqual(end, MONDAY + timedelta(days=13))
        self.assertEqual((end - start).days, 20)

    def test_sunday_belongs_to_the_week_before(self):
        sunday = date(2024, 5, 19)
        self.assertEqual(compute_window("week", sunday), compute_window("week", WEDNESDAY))

    def test_monday_anchors_itself(self):
        self.assertEqual(compute_window("week", MONDAY), (date(2024, 5, 6), date(2024, 5, 26)))


class TestFilterByDate(unittest.TestCase):
    def test_month_keeps_first_and_last_day(self):
        releases = [
            make_release("First", "2024-02-01"),
            make_release("Last", "2024-02-29"),
            make_release("Next", "2024-03-01"),
        ]
        kept = filter_by_date(releases, "month", date(2024, 2, 10))
        self.assertEqual([r.title for r in kept], ["First", "Last"])

    def test_week_boundaries_are_inclusive(self):
        releases = [
            make_release("Before", "2024-05-05"),
            make_release("Start", "2024-05-06"),
            make_release("End", "2024-05-26"),
            make_release("After", "2024-05-27"),
        ]
        kept = filter_by_date(releases, "week", WEDNESDAY)
        self.assertEqual([r.title for r in kept], ["Start", "End"])

    def test_unparsable_dates_are_dropped(self):
        releases = [
            make_release("Good", "2024-05-15"),
            make_release("Bad", "sometime soon"),
            make_release("Missing", None),
        ]
        kept = filter_by_date(releases, "week", WEDNESDAY)
        self.assertEqual([r.title for r in kept], ["Good"])

    def test_datetime_values_compare_by_date_only(self):
        releases = [make_release("Late", "2024-05-26T23:30:00Z")]
        kept = filter_by_date(releases + [make_release("Old", "2020-01-01")], "week", WEDNESDAY)
        self.assertEqual([r.title for r in kept], ["Late"])

    def test_falls_back_to_unfiltered_input_when_nothing_matches(self):
        releases = [make_release("Old", "2019-01-01"), make_release("Junk", "n/a")]
        kept = filter_by_date(releases, "week", WEDNESDAY)
        self.assertEqual(kept, releases)
        self.assertIsNot(kept, releases)

    def test_empty_input_stays_empty(self):
        self.assertEqual(filter_by_date([], "month", WEDNESDAY), [])


def _has_zone(name):
    try:
        import zoneinfo
        zoneinfo.ZoneInfo(name)
        return True
    except Exception:
        return False


class TestParseReleaseDate(unittest.TestCase):
    def test_formats(self):
        self.assertEqual(parse_release_date("2024-05-15"), date(2024, 5, 15))
        self.assertEqual(parse_release_date(" 2024-05-15T10:00:00+05:30 "), date(2024, 5, 15))
        self.assertEqual(parse_release_date("May 15, 2024"), date(2024, 5, 15))
        self.assertIsNone(parse_release_date("2024-13-45"))
        self.assertIsNone(parse_release_date(""))
        self.assertIsNone(parse_release_date(None))

    @unittest.skipUnless(_has_zone("Asia/Kolkata"), "tz database not installed")
    def test_naive_datetime_reads_in_configured_zone(self):
        parsed = parse_release_datetime("2024-05-15T23:30:00", tz_name="Asia/Kolkata")
        self.assertEqual(parsed.utcoffset(), timedelta(hours=5, minutes=30))
        self.assertEqual(parse_release_date("2024-05-15T23:30:00"), date(2024, 5, 15))

    def test_date_only_and_explicit_offsets_ignore_configured_zone(self):
        self.assertEqual(
            parse_release_datetime("2024-05-15", tz_name="Asia/Kolkata"),
            datetime(2024, 5, 15, tzinfo=timezone.utc),
        )
        parsed = parse_release_datetime("2024-05-15T23:30:00Z", tz_name="Asia/Kolkata")
        self.assertEqual(parsed.utcoffset(), timedelta(0))


if __name__ == "__main__":
    unittest.main()
