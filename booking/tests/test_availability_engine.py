# booking/tests/test_availability_engine.py

from datetime import timedelta

from django.test import TestCase

from booking.exceptions import NotFound, ValidationFailed
from booking.models import Appointment, Member
from booking.services.availability_engine import AvailabilityEngine
from staff.models import Blockout, WeeklyAvailabilitySlot

from .helpers import MONDAY, SalonFixture, utc


class AvailabilityEngineTests(TestCase):
    def setUp(self):
        self.salon = SalonFixture()
        self.artist = self.salon.artist
        # Monday 09:00-17:00
        WeeklyAvailabilitySlot.objects.create(
            artist=self.artist, organization=self.salon.org, day_of_week=1, start_minute=540, end_minute=1020
        )
        self.engine = AvailabilityEngine()

    def search(self, service=None, start=None, end=None, artist_id=None):
        result = self.engine.find_available_slots(
            organization_id=self.salon.org.pk,
            branch_id=self.salon.branch.pk,
            service_id=(service or self.salon.service).pk,
            search_start=start or utc(2035, 1, 1, 9),
            search_end=end or utc(2035, 1, 1, 17),
            artist_id=artist_id,
        )
        return result

    def book(self, start, minutes, status=Appointment.CONFIRMED):
        return Appointment.objects.create(
            organization=self.salon.org,
            branch=self.salon.branch,
            artist=self.artist,
            customer=self.salon.customer,
            service=self.salon.service,
            start_time=start,
            end_time=start + timedelta(minutes=minutes),
            status=status,
            price=self.salon.service.base_price,
        )

    def test_free_monday_yields_33_hourly_candidates(self):
        slots = self.search()[str(self.artist.pk)]
        self.assertEqual(len(slots), 33)
        self.assertEqual(slots[0], utc(2035, 1, 1, 9))
        self.assertEqual(slots[-1], utc(2035, 1, 1, 16))
        self.assertNotIn(utc(2035, 1, 1, 16, 15), slots)
        self.assertEqual(slots[1] - slots[0], timedelta(minutes=15))

    def test_candidate_ending_on_an_appointment_start_is_excluded(self):
        self.book(utc(2035, 1, 1, 12), 60)
        slots = self.search()[str(self.artist.pk)]
        # 11:00 + 60 min ends exactly at 12:00
        self.assertNotIn(utc(2035, 1, 1, 11), slots)
        # 13:00 starts exactly when the appointment ends
        self.assertNotIn(utc(2035, 1, 1, 13), slots)
        self.assertIn(utc(2035, 1, 1, 10, 45), slots)
        self.assertIn(utc(2035, 1, 1, 13, 15), slots)

    def test_cancelled_and_no_show_appointments_do_not_block(self):
        self.book(utc(2035, 1, 1, 12), 60, status=Appointment.CANCELLED)
        self.book(utc(2035, 1, 1, 14), 60, status=Appointment.NO_SHOW)
        slots = self.search()[str(self.artist.pk)]
        self.assertEqual(len(slots), 33)

    def test_blockout_removes_candidates(self):
        Blockout.objects.create(
            artist=self.artist, organization=self.salon.org,
            start_time=utc(2035, 1, 1, 9), end_time=utc(2035, 1, 1, 12),
        )
        slots = self.search()[str(self.artist.pk)]
        self.assertEqual(slots[0], utc(2035, 1, 1, 12, 15))

    def test_day_without_work_window_has_no_slots(self):
        # Tuesday
        slots = self.search(start=utc(2035, 1, 2, 0), end=utc(2035, 1, 2, 23))[str(self.artist.pk)]
        self.assertEqual(slots, [])

    def test_duplicate_rows_for_a_day_use_the_lowest_id(self):
        WeeklyAvailabilitySlot.objects.create(
            artist=self.artist, organization=self.salon.org, day_of_week=1, start_minute=600, end_minute=660
        )
        slots = self.search()[str(self.artist.pk)]
        self.assertEqual(len(slots), 33)

    def test_multi_day_search_walks_utc_days(self):
        slots = self.search(start=MONDAY, end=MONDAY + timedelta(days=7))[str(self.artist.pk)]
        # Monday 2035-01-01 and Monday 2035-01-08 (search end is midnight, so only day start)
        self.assertEqual(len(slots), 33 * 2)
        self.assertEqual(slots[33], utc(2035, 1, 8, 9))

    def test_results_cover_every_branch_artist(self):
        other = self.salon.member("Bo Artist", Member.ARTIST)
        result = self.search()
        self.assertEqual(set(result), {str(self.artist.pk), str(other.pk)})
        self.assertEqual(result[str(other.pk)], [])

    def test_artist_filter(self):
        self.salon.member("Bo Artist", Member.ARTIST)
        result = self.search(artist_id=self.artist.pk)
        self.assertEqual(list(result), [str(self.artist.pk)])

    def test_unknown_service_is_not_found(self):
        with self.assertRaises(NotFound):
            self.engine.find_available_slots(
                self.salon.org.pk, self.salon.branch.pk, 999999, utc(2035, 1, 1, 9), utc(2035, 1, 1, 17)
            )

    def test_service_of_another_organization_is_not_found(self):
        foreign = SalonFixture(name="Elsewhere")
        with self.assertRaises(NotFound):
            self.search(service=foreign.service)

    def test_inverted_window_is_rejected(self):
        with self.assertRaises(ValidationFailed):
            self.search(start=utc(2035, 1, 1, 17), end=utc(2035, 1, 1, 9))
