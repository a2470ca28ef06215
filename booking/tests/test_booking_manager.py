# booking/tests/test_booking_manager.py

import threading
from datetime import timedelta

from django.db import connection
from django.test import TestCase, TransactionTestCase

from booking.exceptions import Conflict, NotFound, ValidationFailed
from booking.models import Appointment, Member
from booking.services.booking_manager import BookingManager
from staff.models import Blockout

from .helpers import SalonFixture, utc


class BookingManagerTests(TestCase):
    def setUp(self):
        self.salon = SalonFixture()
        self.half_hour = self.salon.service_of(30, name="Fringe trim")
        self.manager = BookingManager()

    def book(self, start, service=None, artist=None):
        return self.manager.create_booking(
            organization_id=self.salon.org.pk,
            branch_id=self.salon.branch.pk,
            artist_id=(artist or self.salon.artist).pk,
            customer_id=self.salon.customer.pk,
            service_id=(service or self.half_hour).pk,
            start_time=start,
        )

    def test_booking_snapshots_price_and_duration(self):
        appointment = self.book(utc(2035, 1, 1, 10))
        self.assertEqual(appointment.status, Appointment.CONFIRMED)
        self.assertEqual(appointment.end_time, utc(2035, 1, 1, 10, 30))
        self.assertEqual(appointment.price, self.half_hour.base_price)

    def test_overlapping_booking_conflicts_and_writes_nothing(self):
        self.book(utc(2035, 1, 1, 10))
        with self.assertRaises(Conflict):
            self.book(utc(2035, 1, 1, 10, 15))
        self.assertEqual(Appointment.objects.count(), 1)

    def test_touching_bookings_are_allowed_at_commit(self):
        self.book(utc(2035, 1, 1, 10))
        second = self.book(utc(2035, 1, 1, 10, 30))
        self.assertEqual(second.start_time, utc(2035, 1, 1, 10, 30))

    def test_other_artist_is_unaffected(self):
        other = self.salon.member("Bo Artist", Member.ARTIST)
        self.book(utc(2035, 1, 1, 10))
        self.book(utc(2035, 1, 1, 10), artist=other)
        self.assertEqual(Appointment.objects.count(), 2)

    def test_cancelled_appointment_frees_the_slot(self):
        first = self.book(utc(2035, 1, 1, 10))
        first.status = Appointment.CANCELLED
        first.save()
        self.book(utc(2035, 1, 1, 10))

    def test_blockout_conflicts(self):
        Blockout.objects.create(
            artist=self.salon.artist, organization=self.salon.org,
            start_time=utc(2035, 1, 1, 9), end_time=utc(2035, 1, 1, 12),
        )
        with self.assertRaises(Conflict):
            self.book(utc(2035, 1, 1, 11, 45))

    def test_missing_references_are_not_found(self):
        with self.assertRaises(NotFound):
            self.book(utc(2035, 1, 1, 10), artist=self.salon.customer)
        foreign = SalonFixture(name="Elsewhere")
        with self.assertRaises(NotFound):
            self.book(utc(2035, 1, 1, 10), service=foreign.service)

    def test_inactive_service_is_rejected(self):
        retired = self.salon.service_of(30, name="Retired", active=False)
        with self.assertRaises(ValidationFailed):
            self.book(utc(2035, 1, 1, 10), service=retired)


class UpdateAppointmentTests(TestCase):
    def setUp(self):
        self.salon = SalonFixture()
        self.manager = BookingManager()
        self.first = self.book(utc(2035, 1, 1, 10))
        self.second = self.book(utc(2035, 1, 1, 12))

    def book(self, start):
        return self.manager.create_booking(
            self.salon.org.pk, self.salon.branch.pk, self.salon.artist.pk,
            self.salon.customer.pk, self.salon.service.pk, start,
        )

    def update(self, appointment, **changes):
        return self.manager.update_appointment(
            appointment.pk, self.salon.org.pk, self.salon.branch.pk, changes
        )

    def test_cancel_stamps_cancellation_time(self):
        cancelled = self.update(self.first, status=Appointment.CANCELLED)
        self.assertIsNotNone(cancelled.cancellation_time)

    def test_move_onto_another_appointment_conflicts(self):
        with self.assertRaises(Conflict):
            self.update(self.first, start_time=utc(2035, 1, 1, 11, 30))
        self.first.refresh_from_db()
        self.assertEqual(self.first.start_time, utc(2035, 1, 1, 10))

    def test_move_recomputes_end_time(self):
        moved = self.update(self.first, start_time=utc(2035, 1, 1, 14))
        self.assertEqual(moved.end_time, utc(2035, 1, 1, 15))

    def test_move_within_own_slot_does_not_conflict_with_itself(self):
        moved = self.update(self.first, start_time=utc(2035, 1, 1, 10, 30))
        self.assertEqual(moved.start_time, utc(2035, 1, 1, 10, 30))

    def test_reconfirming_into_a_taken_slot_conflicts(self):
        self.update(self.first, status=Appointment.CANCELLED)
        self.book(utc(2035, 1, 1, 10, 30))
        with self.assertRaises(Conflict):
            self.update(self.first, status=Appointment.CONFIRMED)

    def test_unknown_fields_are_rejected(self):
        with self.assertRaises(ValidationFailed):
            self.update(self.first, price="1.00")

    def test_other_branch_cannot_see_the_appointment(self):
        with self.assertRaises(NotFound):
            self.manager.update_appointment(self.first.pk, self.salon.org.pk, 999999, {"notes": "x"})


class ConcurrentBookingTests(TransactionTestCase):
    def test_only_one_of_several_racing_bookings_wins(self):
        salon = SalonFixture()
        service = salon.service_of(30)
        manager = BookingManager()
        starts = [utc(2035, 1, 1, 10, minute) for minute in (0, 5, 10, 15)]
        barrier = threading.Barrier(len(starts))
        outcomes = []

        def attempt(start):
            try:
                barrier.wait()
                manager.create_booking(
                    salon.org.pk, salon.branch.pk, salon.artist.pk,
                    salon.customer.pk, service.pk, start,
                )
                outcomes.append("booked")
            except Conflict:
                outcomes.append("conflict")
            except Exception as exc:
                outcomes.append(type(exc).__name__)
            finally:
                connection.close()

        threads = [threading.Thread(target=attempt, args=(start,)) for start in starts]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(sorted(outcomes), ["booked", "conflict", "conflict", "conflict"])
        self.assertEqual(Appointment.objects.count(), 1)
        booked = Appointment.objects.get()
        self.assertEqual(booked.end_time - booked.start_time, timedelta(minutes=30))
