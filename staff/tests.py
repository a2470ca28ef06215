# staff/tests.py

from datetime import timedelta
from unittest import mock

from django.db import IntegrityError, transaction
from django.test import TestCase
from rest_framework.test import APIClient

from booking.exceptions import NotFound, ValidationFailed
from booking.models import Member
from booking.tests.helpers import MONDAY, SalonFixture, utc

from .models import Blockout, WeeklyAvailabilitySlot
from .services import AvailabilityCalendar

WEEKDAYS_9_TO_5 = [{"day_of_week": d, "start_minute": 540, "end_minute": 1020} for d in range(1, 6)]


class WeeklyScheduleTests(TestCase):
    def setUp(self):
        self.salon = SalonFixture()
        self.calendar = AvailabilityCalendar()

    def test_replacing_twice_leaves_exactly_the_new_set(self):
        self.calendar.set_weekly_schedule(self.salon.artist, WEEKDAYS_9_TO_5)
        self.calendar.set_weekly_schedule(self.salon.artist, WEEKDAYS_9_TO_5)
        rows = self.calendar.get_schedule(self.salon.artist.pk)
        self.assertEqual([r.day_of_week for r in rows], [1, 2, 3, 4, 5])

        self.calendar.set_weekly_schedule(self.salon.artist, [{"day_of_week": 6, "start_minute": 600, "end_minute": 840}])
        rows = self.calendar.get_schedule(self.salon.artist.pk)
        self.assertEqual([(r.day_of_week, r.start_minute, r.end_minute) for r in rows], [(6, 600, 840)])

    def test_empty_schedule_clears_the_week(self):
        self.calendar.set_weekly_schedule(self.salon.artist, WEEKDAYS_9_TO_5)
        self.calendar.set_weekly_schedule(self.salon.artist, [])
        self.assertEqual(self.calendar.get_schedule(self.salon.artist.pk), [])

    def test_invalid_slot_rejects_the_whole_batch(self):
        self.calendar.set_weekly_schedule(self.salon.artist, WEEKDAYS_9_TO_5)
        bad_batches = [
            [{"day_of_week": 0, "start_minute": 540, "end_minute": 1020}],
            [{"day_of_week": 8, "start_minute": 540, "end_minute": 1020}],
            [{"day_of_week": 1, "start_minute": -5, "end_minute": 1020}],
            [{"day_of_week": 1, "start_minute": 540, "end_minute": 1440}],
            [{"day_of_week": 1, "start_minute": 600, "end_minute": 600}],
            [{"day_of_week": 1, "start_minute": 540}],
        ]
        for batch in bad_batches:
            with self.subTest(batch=batch):
                with self.assertRaises(ValidationFailed):
                    self.calendar.set_weekly_schedule(self.salon.artist, WEEKDAYS_9_TO_5[:1] + batch)
        self.assertEqual(WeeklyAvailabilitySlot.objects.count(), 5)

    def test_work_window_lookup(self):
        self.calendar.set_weekly_schedule(self.salon.artist, WEEKDAYS_9_TO_5)
        self.assertEqual(self.calendar.get_work_window(self.salon.artist.pk, 3), (540, 1020))
        self.assertIsNone(self.calendar.get_work_window(self.salon.artist.pk, 7))


class BlockoutTests(TestCase):
    def setUp(self):
        self.salon = SalonFixture()
        self.calendar = AvailabilityCalendar()

    def create(self, start, end, reason="Dentist"):
        return self.calendar.create_blockout(self.salon.artist, self.salon.org.pk, start, end, reason)

    def test_created_blockout_is_listed_until_deleted(self):
        blockout = self.create(utc(2035, 1, 1, 12), utc(2035, 1, 1, 13))
        self.assertEqual([b.pk for b in self.calendar.get_blockouts(self.salon.artist.pk)], [blockout.pk])

        result = self.calendar.delete_blockout(blockout.pk, self.salon.org.pk)
        self.assertEqual(result, {"detail": "Blockout successfully deleted."})
        self.assertEqual(self.calendar.get_blockouts(self.salon.artist.pk), [])

    def test_past_blockouts_are_not_listed(self):
        self.create(utc(2035, 1, 1, 12), utc(2035, 1, 1, 13))
        with mock.patch("staff.services.timezone.now", return_value=utc(2035, 1, 2)):
            self.assertEqual(self.calendar.get_blockouts(self.salon.artist.pk), [])

    def test_end_must_follow_start(self):
        with self.assertRaises(ValidationFailed):
            self.create(utc(2035, 1, 1, 13), utc(2035, 1, 1, 13))

    def test_database_rejects_empty_blockouts(self):
        with self.assertRaises(IntegrityError), transaction.atomic():
            Blockout.objects.create(
                artist=self.salon.artist, organization=self.salon.org,
                start_time=utc(2035, 1, 1, 13), end_time=utc(2035, 1, 1, 13),
            )
        self.assertFalse(Blockout.objects.exists())

    def test_deleting_unknown_or_foreign_blockout_is_not_found(self):
        blockout = self.create(utc(2035, 1, 1, 12), utc(2035, 1, 1, 13))
        foreign = SalonFixture(name="Elsewhere")
        with self.assertRaises(NotFound):
            self.calendar.delete_blockout(blockout.pk, foreign.org.pk)
        with self.assertRaises(NotFound):
            self.calendar.delete_blockout(blockout.pk + 1000, self.salon.org.pk)
        self.assertTrue(Blockout.objects.filter(pk=blockout.pk).exists())

    def test_open_windows_subtract_blockouts(self):
        self.calendar.set_weekly_schedule(self.salon.artist, WEEKDAYS_9_TO_5)
        self.create(utc(2035, 1, 1, 12), utc(2035, 1, 1, 13))
        windows = self.calendar.open_windows(self.salon.artist.pk, MONDAY + timedelta(hours=15))
        self.assertEqual(windows, [
            (utc(2035, 1, 1, 9), utc(2035, 1, 1, 12)),
            (utc(2035, 1, 1, 13), utc(2035, 1, 1, 17)),
        ])
        self.assertEqual(self.calendar.open_windows(self.salon.artist.pk, utc(2035, 1, 6)), [])


class CalendarApiTests(TestCase):
    def setUp(self):
        self.salon = SalonFixture()
        self.manager = self.salon.member("Mo Manager", Member.MANAGER, username="mo")
        self.client = APIClient()
        self.client.force_authenticate(self.manager.user)
        self.base = f"/api/staff/artists/{self.salon.artist.pk}"

    def test_put_then_get_schedule(self):
        resp = self.client.put(f"{self.base}/schedule/", {"schedule": WEEKDAYS_9_TO_5}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.json()), 5)
        resp = self.client.get(f"{self.base}/schedule/")
        self.assertEqual(resp.json()[0]["start_minute"], 540)

    def test_invalid_schedule_is_a_validation_error(self):
        resp = self.client.put(
            f"{self.base}/schedule/",
            {"schedule": [{"day_of_week": 9, "start_minute": 540, "end_minute": 1020}]},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["kind"], "validation_error")

    def test_blockout_create_list_delete(self):
        resp = self.client.post("/api/staff/blockouts/", {
            "artist": self.salon.artist.pk,
            "start_time": "2035-01-01T12:00:00Z",
            "end_time": "2035-01-01T13:00:00Z",
            "reason": "Training",
        }, format="json")
        self.assertEqual(resp.status_code, 201)
        blockout_id = resp.json()["id"]

        listed = self.client.get(f"{self.base}/blockouts/").json()
        self.assertEqual([b["id"] for b in listed], [blockout_id])

        resp = self.client.delete(f"/api/staff/blockouts/{blockout_id}/")
        self.assertEqual(resp.json(), {"detail": "Blockout successfully deleted."})
        self.assertEqual(self.client.get(f"{self.base}/blockouts/").json(), [])

    def test_open_windows_endpoint(self):
        self.client.put(f"{self.base}/schedule/", {"schedule": WEEKDAYS_9_TO_5}, format="json")
        resp = self.client.get(f"{self.base}/open-windows/", {"date": "2035-01-01"})
        self.assertEqual(resp.json(), [{"start": "2035-01-01T09:00:00Z", "end": "2035-01-01T17:00:00Z"}])

    def test_non_artist_calendar_is_not_found(self):
        resp = self.client.get(f"/api/staff/artists/{self.salon.customer.pk}/schedule/")
        self.assertEqual(resp.status_code, 404)

    def test_artists_may_read_but_not_write(self):
        artist = self.salon.member("Bo Artist", Member.ARTIST, username="bo")
        self.client.force_authenticate(artist.user)
        self.assertEqual(self.client.get(f"{self.base}/schedule/").status_code, 200)
        resp = self.client.put(f"{self.base}/schedule/", {"schedule": []}, format="json")
        self.assertEqual(resp.status_code, 403)
