# booking/tests/test_slot_utils.py

from django.test import SimpleTestCase

from booking.exceptions import ValidationFailed
from booking.services.slot_utils import (
    at_minute,
    day_start_utc,
    is_within_interval,
    iso_weekday_utc,
    minutes_between,
    overlaps,
    parse_iso_datetime,
    subtract_interval,
)

from .helpers import MONDAY, utc


class OverlapTests(SimpleTestCase):
    def test_touching_intervals_do_not_overlap(self):
        self.assertFalse(overlaps(utc(2035, 1, 1, 9), utc(2035, 1, 1, 10), utc(2035, 1, 1, 10), utc(2035, 1, 1, 11)))

    def test_partial_overlap(self):
        self.assertTrue(overlaps(utc(2035, 1, 1, 9), utc(2035, 1, 1, 10), utc(2035, 1, 1, 9, 30), utc(2035, 1, 1, 11)))

    def test_containment_is_inclusive_on_both_ends(self):
        start, end = utc(2035, 1, 1, 10), utc(2035, 1, 1, 11)
        self.assertTrue(is_within_interval(start, start, end))
        self.assertTrue(is_within_interval(end, start, end))
        self.assertFalse(is_within_interval(utc(2035, 1, 1, 11, 0, 1), start, end))


class SubtractIntervalTests(SimpleTestCase):
    def setUp(self):
        self.start = utc(2035, 1, 1, 9)
        self.end = utc(2035, 1, 1, 17)

    def test_cut_in_the_middle_leaves_two_pieces(self):
        pieces = subtract_interval(self.start, self.end, utc(2035, 1, 1, 12), utc(2035, 1, 1, 13))
        self.assertEqual(pieces, [(self.start, utc(2035, 1, 1, 12)), (utc(2035, 1, 1, 13), self.end)])

    def test_cut_covering_everything_leaves_nothing(self):
        self.assertEqual(subtract_interval(self.start, self.end, utc(2035, 1, 1, 8), utc(2035, 1, 1, 18)), [])

    def test_disjoint_cut_is_ignored(self):
        pieces = subtract_interval(self.start, self.end, utc(2035, 1, 1, 17), utc(2035, 1, 1, 18))
        self.assertEqual(pieces, [(self.start, self.end)])


class MinutesAndDaysTests(SimpleTestCase):
    def test_minutes_between_truncates_toward_zero(self):
        self.assertEqual(minutes_between(utc(2035, 1, 1, 9, 20, 59), utc(2035, 1, 1, 9)), 20)
        self.assertEqual(minutes_between(utc(2035, 1, 1, 9), utc(2035, 1, 1, 9, 20, 59)), -20)

    def test_at_minute_and_day_start(self):
        self.assertEqual(at_minute(utc(2035, 1, 1, 15, 42), 540), utc(2035, 1, 1, 9))
        self.assertEqual(day_start_utc(utc(2035, 1, 1, 23, 59)), MONDAY)

    def test_iso_weekday(self):
        self.assertEqual(iso_weekday_utc(MONDAY), 1)
        self.assertEqual(iso_weekday_utc(utc(2035, 1, 7)), 7)


class ParseIsoDatetimeTests(SimpleTestCase):
    def test_bare_date_is_midnight_utc(self):
        self.assertEqual(parse_iso_datetime("2035-01-01"), MONDAY)

    def test_naive_datetime_is_taken_as_utc(self):
        self.assertEqual(parse_iso_datetime("2035-01-01T09:30:00"), utc(2035, 1, 1, 9, 30))

    def test_offset_is_converted_to_utc(self):
        self.assertEqual(parse_iso_datetime("2035-01-01T11:00:00+02:00"), utc(2035, 1, 1, 9))

    def test_garbage_and_missing_values_are_rejected(self):
        with self.assertRaises(ValidationFailed):
            parse_iso_datetime("next tuesday", "start")
        with self.assertRaises(ValidationFailed):
            parse_iso_datetime(None, "start")
