# booking/tests/test_api.py

from unittest import mock

from django.contrib.auth.models import User
from django.db import OperationalError
from django.test import TestCase
from rest_framework.test import APIClient

from booking.models import Appointment, Member, StaffProfile
from booking.services.booking_manager import BookingManager
from staff.models import WeeklyAvailabilitySlot

from .helpers import SalonFixture, utc


class AppointmentApiTests(TestCase):
    def setUp(self):
        self.salon = SalonFixture()
        WeeklyAvailabilitySlot.objects.create(
            artist=self.salon.artist, organization=self.salon.org,
            day_of_week=1, start_minute=540, end_minute=1020,
        )
        self.desk = self.salon.member("Rae Reception", Member.RECEPTIONIST, username="desk")
        self.client = APIClient()
        self.client.force_authenticate(self.desk.user)

    def book(self, start="2035-01-01T10:00:00Z", **extra):
        payload = {
            "artist": self.salon.artist.pk,
            "customer": self.salon.customer.pk,
            "service": self.salon.service.pk,
            "start_time": start,
        }
        payload.update(extra)
        return self.client.post("/api/appointments/", payload, format="json")

    def test_slot_search_returns_utc_iso_strings(self):
        resp = self.client.get("/api/appointments/slots/", {
            "service": self.salon.service.pk,
            "start": "2035-01-01T09:00:00Z",
            "end": "2035-01-01T17:00:00Z",
        })
        self.assertEqual(resp.status_code, 200)
        slots = resp.json()[str(self.salon.artist.pk)]
        self.assertEqual(len(slots), 33)
        self.assertEqual(slots[0], "2035-01-01T09:00:00Z")
        self.assertEqual(slots[-1], "2035-01-01T16:00:00Z")

    def test_slot_search_with_bad_dates_is_a_validation_error(self):
        resp = self.client.get("/api/appointments/slots/", {
            "service": self.salon.service.pk, "start": "soon", "end": "2035-01-01",
        })
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["kind"], "validation_error")

    def test_book_then_overlap_is_a_conflict(self):
        first = self.book()
        self.assertEqual(first.status_code, 201)
        self.assertEqual(first.json()["status"], Appointment.CONFIRMED)
        self.assertEqual(first.json()["end_time"], "2035-01-01T11:00:00Z")

        second = self.book("2035-01-01T10:15:00Z")
        self.assertEqual(second.status_code, 409)
        self.assertEqual(second.json()["kind"], "conflict")
        self.assertEqual(Appointment.objects.count(), 1)

    def test_past_start_time_is_rejected(self):
        resp = self.book("2001-01-01T10:00:00Z")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["kind"], "validation_error")

    def test_unknown_service_is_not_found(self):
        resp = self.book(service=987654)
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["kind"], "not_found")

    def test_list_filters_by_artist_and_window(self):
        self.book()
        self.book("2035-01-01T14:00:00Z")
        resp = self.client.get("/api/appointments/", {
            "artist": self.salon.artist.pk,
            "start": "2035-01-01T12:00:00Z",
        })
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([a["start_time"] for a in resp.json()], ["2035-01-01T14:00:00Z"])

    def test_patch_cancel_and_customer_history(self):
        booked = self.book().json()
        resp = self.client.patch(f"/api/appointments/{booked['id']}/", {"status": "CANCELLED"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertIsNotNone(resp.json()["cancellation_time"])

        history = self.client.get(f"/api/appointments/customer/{self.salon.customer.pk}/")
        self.assertEqual([a["id"] for a in history.json()], [booked["id"]])

    def test_appointment_of_another_organization_is_not_found(self):
        foreign = SalonFixture(name="Elsewhere")
        appointment = BookingManager().create_booking(
            foreign.org.pk, foreign.branch.pk, foreign.artist.pk,
            foreign.customer.pk, foreign.service.pk, utc(2035, 1, 1, 10),
        )
        resp = self.client.get(f"/api/appointments/{appointment.pk}/")
        self.assertEqual(resp.status_code, 404)

    def test_customers_and_anonymous_callers_are_forbidden(self):
        customer = self.salon.member("Cy Customer", Member.CUSTOMER, username="cy")
        self.client.force_authenticate(customer.user)
        resp = self.book()
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["kind"], "forbidden")

        self.client.force_authenticate(None)
        self.assertEqual(self.client.get("/api/appointments/").status_code, 403)

    def test_artists_can_read_but_not_book(self):
        self.salon.artist.user = User.objects.create_user(username="ava", password="pass12345")
        self.salon.artist.save()
        self.client.force_authenticate(self.salon.artist.user)
        self.assertEqual(self.client.get("/api/appointments/").status_code, 200)
        self.assertEqual(self.book().status_code, 403)

    def test_storage_failure_is_reported_as_unavailable(self):
        with mock.patch.object(BookingManager, "create_booking", side_effect=OperationalError("timeout")):
            resp = self.book()
        self.assertEqual(resp.status_code, 503)
        self.assertEqual(resp.json()["kind"], "unavailable")
        self.assertNotIn("timeout", str(resp.json()["detail"]))


class DirectoryApiTests(TestCase):
    def setUp(self):
        self.salon = SalonFixture()
        self.manager = self.salon.member("Mo Manager", Member.MANAGER, username="mo")
        self.client = APIClient()
        self.client.force_authenticate(self.manager.user)

    def test_services_lists_only_active_services_of_the_organization(self):
        self.salon.service_of(30, name="Retired", active=False)
        SalonFixture(name="Elsewhere")
        resp = self.client.get("/api/services/")
        self.assertEqual([s["name"] for s in resp.json()], ["Cut & Style"])

    def test_members_filter_by_role(self):
        resp = self.client.get("/api/members/", {"role": Member.ARTIST})
        self.assertEqual([m["id"] for m in resp.json()], [self.salon.artist.pk])

    def test_deleting_a_member_removes_its_staff_profile(self):
        StaffProfile.objects.create(member=self.salon.artist)
        resp = self.client.delete(f"/api/members/{self.salon.artist.pk}/")
        self.assertEqual(resp.status_code, 204)
        self.assertFalse(Member.objects.filter(pk=self.salon.artist.pk).exists())
        self.assertFalse(StaffProfile.objects.exists())

    def test_deleting_a_foreign_member_is_not_found(self):
        foreign = SalonFixture(name="Elsewhere")
        resp = self.client.delete(f"/api/members/{foreign.artist.pk}/")
        self.assertEqual(resp.status_code, 404)
        self.assertTrue(Member.objects.filter(pk=foreign.artist.pk).exists())
