# attendance/tests.py

import threading
from datetime import timedelta
from unittest import mock

from django.db import OperationalError, connection
from django.test import TestCase, TransactionTestCase
from rest_framework.test import APIClient

from booking.exceptions import Conflict, Forbidden, NotFound, ValidationFailed
from booking.models import Member, StaffProfile
from booking.tests.helpers import SalonFixture, utc

from .models import Attendance, Break
from .services import AUTO_CLOCK_OUT_NOTE, AttendanceService


def at(moment):
    """Freeze the attendance clock at `moment`."""
    return mock.patch("attendance.services.timezone.now", return_value=moment)


class ClockInTests(TestCase):
    def setUp(self):
        self.salon = SalonFixture()
        self.employee = self.salon.artist
        self.service = AttendanceService()

    def clock_in(self, moment, member=None, **kwargs):
        with at(moment):
            return self.service.clock_in((member or self.employee).pk, self.salon.org.pk, **kwargs)

    def test_late_minutes_count_from_work_start_not_grace_end(self):
        attendance = self.clock_in(utc(2035, 1, 1, 9, 20))
        self.assertTrue(attendance.is_late)
        self.assertEqual(attendance.late_minutes, 20)
        self.assertEqual(attendance.status, Attendance.CLOCKED_IN)
        self.assertEqual(attendance.branch_id, self.salon.branch.pk)

    def test_within_grace_is_on_time(self):
        attendance = self.clock_in(utc(2035, 1, 1, 9, 15))
        self.assertFalse(attendance.is_late)
        self.assertEqual(attendance.late_minutes, 0)

    def test_second_clock_in_conflicts(self):
        self.clock_in(utc(2035, 1, 1, 9))
        with self.assertRaises(Conflict):
            self.clock_in(utc(2035, 1, 1, 9, 5))
        self.assertEqual(Attendance.objects.count(), 1)

    def test_customers_cannot_clock_in(self):
        with self.assertRaises(Forbidden):
            self.clock_in(utc(2035, 1, 1, 9), member=self.salon.customer)

    def test_members_of_other_organizations_are_not_found(self):
        foreign = SalonFixture(name="Elsewhere")
        with self.assertRaises(NotFound):
            self.clock_in(utc(2035, 1, 1, 9), member=foreign.artist)

    def test_location_required_by_settings(self):
        self.service.update_settings(self.salon.org.pk, {"require_location": True})
        with self.assertRaises(ValidationFailed):
            self.clock_in(utc(2035, 1, 1, 9), location="  ")
        attendance = self.clock_in(utc(2035, 1, 1, 9), location="Front desk")
        self.assertEqual(attendance.location, "Front desk")

    def test_profile_flag_follows_the_session(self):
        self.clock_in(utc(2035, 1, 1, 9))
        self.assertTrue(StaffProfile.objects.get(member=self.employee).is_clocked_in)
        with at(utc(2035, 1, 1, 17)):
            self.service.clock_out(self.employee.pk, self.salon.org.pk)
        self.assertFalse(StaffProfile.objects.get(member=self.employee).is_clocked_in)

    def test_unknown_setting_is_rejected(self):
        with self.assertRaises(ValidationFailed):
            self.service.update_settings(self.salon.org.pk, {"timezone": "CET"})


class ClockOutAndBreakTests(TestCase):
    def setUp(self):
        self.salon = SalonFixture()
        self.employee = self.salon.artist
        self.service = AttendanceService()
        with at(utc(2035, 1, 1, 9)):
            self.attendance = self.service.clock_in(self.employee.pk, self.salon.org.pk)

    def take_break(self, start, end, kind=Break.LUNCH):
        with at(start):
            self.service.start_break(self.attendance.pk, self.employee.pk, kind)
        with at(end):
            return self.service.end_break(self.attendance.pk, self.employee.pk)

    def test_clock_out_subtracts_breaks_and_computes_overtime(self):
        brk = self.take_break(utc(2035, 1, 1, 12), utc(2035, 1, 1, 12, 30))
        self.assertEqual(brk.duration, 30)

        with at(utc(2035, 1, 1, 18)):
            closed = self.service.clock_out(self.employee.pk, self.salon.org.pk)
        self.assertEqual(closed.status, Attendance.CLOCKED_OUT)
        self.assertEqual(closed.clock_out_time, utc(2035, 1, 1, 18))
        self.assertAlmostEqual(closed.total_hours, 8.5)
        self.assertAlmostEqual(closed.overtime_hours, 0.5)

    def test_short_day_has_no_overtime(self):
        with at(utc(2035, 1, 1, 13)):
            closed = self.service.clock_out(self.employee.pk, self.salon.org.pk)
        self.assertAlmostEqual(closed.total_hours, 4.0)
        self.assertEqual(closed.overtime_hours, 0)

    def test_clock_out_without_open_session_is_not_found(self):
        with at(utc(2035, 1, 1, 17)):
            self.service.clock_out(self.employee.pk, self.salon.org.pk)
            with self.assertRaises(NotFound):
                self.service.clock_out(self.employee.pk, self.salon.org.pk)

    def test_only_one_open_break(self):
        with at(utc(2035, 1, 1, 10)):
            self.service.start_break(self.attendance.pk, self.employee.pk, Break.SHORT)
            with self.assertRaises(Conflict):
                self.service.start_break(self.attendance.pk, self.employee.pk, Break.SHORT)
        self.assertEqual(Break.objects.count(), 1)

    def test_ending_without_open_break_is_not_found(self):
        with self.assertRaises(NotFound):
            self.service.end_break(self.attendance.pk, self.employee.pk)

    def test_breaks_on_someone_elses_session_are_not_found(self):
        colleague = self.salon.member("Bo Artist", Member.ARTIST)
        with self.assertRaises(NotFound):
            self.service.start_break(self.attendance.pk, colleague.pk, Break.SHORT)

    def test_unknown_break_type_is_rejected(self):
        with self.assertRaises(ValidationFailed):
            self.service.start_break(self.attendance.pk, self.employee.pk, "NAP")

    def test_manual_clock_out_correction_uses_whole_hours(self):
        self.take_break(utc(2035, 1, 1, 12), utc(2035, 1, 1, 12, 30))
        updated = self.service.update_attendance(
            self.attendance.pk, self.salon.org.pk,
            {"clock_out_time": utc(2035, 1, 1, 18, 59), "status": Attendance.CLOCKED_OUT},
        )
        # 9 whole hours minus a 30 minute break
        self.assertAlmostEqual(updated.total_hours, 8.5)
        self.assertAlmostEqual(updated.overtime_hours, 0.5)

    def test_correction_cannot_end_before_it_started(self):
        with self.assertRaises(ValidationFailed):
            self.service.update_attendance(
                self.attendance.pk, self.salon.org.pk, {"clock_out_time": utc(2035, 1, 1, 8)}
            )

    def close_session(self):
        with at(utc(2035, 1, 1, 17)):
            return self.service.clock_out(self.employee.pk, self.salon.org.pk)

    def test_reopening_clears_clock_out_figures(self):
        self.close_session()
        reopened = self.service.update_attendance(
            self.attendance.pk, self.salon.org.pk, {"status": Attendance.CLOCKED_IN}
        )
        self.assertEqual(reopened.status, Attendance.CLOCKED_IN)
        self.assertIsNone(reopened.clock_out_time)
        self.assertIsNone(reopened.total_hours)
        self.assertEqual(reopened.overtime_hours, 0)
        self.assertTrue(StaffProfile.objects.get(member=self.employee).is_clocked_in)

        with at(utc(2035, 1, 1, 19)):
            current = self.service.get_current_attendance(self.employee.pk, self.salon.org.pk)
        self.assertEqual(current.pk, self.attendance.pk)

    def test_reopening_with_a_clock_out_time_is_rejected(self):
        self.close_session()
        with self.assertRaises(ValidationFailed):
            self.service.update_attendance(
                self.attendance.pk, self.salon.org.pk,
                {"status": Attendance.CLOCKED_IN, "clock_out_time": utc(2035, 1, 1, 18)},
            )
        self.attendance.refresh_from_db()
        self.assertEqual(self.attendance.status, Attendance.CLOCKED_OUT)

    def test_reopening_while_another_session_is_open_conflicts(self):
        self.close_session()
        with at(utc(2035, 1, 1, 18)):
            self.service.clock_in(self.employee.pk, self.salon.org.pk)
        with self.assertRaises(Conflict):
            self.service.update_attendance(
                self.attendance.pk, self.salon.org.pk, {"status": Attendance.CLOCKED_IN}
            )
        self.attendance.refresh_from_db()
        self.assertEqual(self.attendance.status, Attendance.CLOCKED_OUT)
        self.assertEqual(Attendance.objects.filter(status=Attendance.CLOCKED_IN).count(), 1)


class ConcurrentClockInTests(TransactionTestCase):
    def test_only_one_of_several_racing_clock_ins_wins(self):
        salon = SalonFixture()
        service = AttendanceService()
        barrier = threading.Barrier(4)
        outcomes = []

        def attempt():
            try:
                barrier.wait()
                service.clock_in(salon.artist.pk, salon.org.pk)
                outcomes.append("clocked in")
            except Conflict:
                outcomes.append("conflict")
            except Exception as exc:
                outcomes.append(type(exc).__name__)
            finally:
                connection.close()

        threads = [threading.Thread(target=attempt) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(sorted(outcomes), ["clocked in", "conflict", "conflict", "conflict"])
        self.assertEqual(
            Attendance.objects.filter(employee=salon.artist, status=Attendance.CLOCKED_IN).count(), 1
        )
        self.assertTrue(StaffProfile.objects.get(member=salon.artist).is_clocked_in)


class StaleSessionTests(TestCase):
    def setUp(self):
        self.salon = SalonFixture()
        self.employee = self.salon.artist
        self.service = AttendanceService()
        with at(utc(2035, 1, 1, 8)):
            self.attendance = self.service.clock_in(self.employee.pk, self.salon.org.pk, notes="Opening")
        with at(utc(2035, 1, 1, 10)):
            self.service.start_break(self.attendance.pk, self.employee.pk, Break.LUNCH)
        with at(utc(2035, 1, 1, 10, 45)):
            self.service.end_break(self.attendance.pk, self.employee.pk)

    def test_stale_session_is_closed_on_next_current_lookup(self):
        with at(utc(2035, 1, 1, 21)):
            current = self.service.get_current_attendance(self.employee.pk, self.salon.org.pk)
        self.assertIsNone(current)

        self.attendance.refresh_from_db()
        self.assertEqual(self.attendance.status, Attendance.CLOCKED_OUT)
        self.assertEqual(self.attendance.clock_out_time, utc(2035, 1, 1, 21))
        # 13 hours minus a 45 minute break
        self.assertAlmostEqual(self.attendance.total_hours, 12.25)
        self.assertEqual(self.attendance.notes, "Opening" + AUTO_CLOCK_OUT_NOTE)
        self.assertFalse(StaffProfile.objects.get(member=self.employee).is_clocked_in)

    def test_reconcile_is_idempotent(self):
        with at(utc(2035, 1, 1, 21)):
            first = self.service.reconcile_stale_sessions(self.employee.pk, self.salon.org.pk)
            second = self.service.reconcile_stale_sessions(self.employee.pk, self.salon.org.pk)
        self.assertEqual(len(first), 1)
        self.assertEqual(second, [])
        self.attendance.refresh_from_db()
        self.assertEqual(self.attendance.notes.count("[Auto clocked out"), 1)

    def test_recent_session_stays_open(self):
        with at(utc(2035, 1, 1, 19)):
            current = self.service.get_current_attendance(self.employee.pk, self.salon.org.pk)
        self.assertEqual(current.pk, self.attendance.pk)

    def test_reconcile_failure_still_returns_current_state(self):
        with mock.patch.object(AttendanceService, "reconcile_stale_sessions", side_effect=OperationalError("down")):
            with self.assertLogs("attendance.services", level="ERROR"):
                current = self.service.get_current_attendance(self.employee.pk, self.salon.org.pk)
        self.assertEqual(current.pk, self.attendance.pk)


class AttendanceApiTests(TestCase):
    def setUp(self):
        self.salon = SalonFixture()
        self.cashier = self.salon.member("Cas Cashier", Member.CASHIER, username="cas")
        self.manager = self.salon.member("Mo Manager", Member.MANAGER, username="mo")
        self.admin = self.salon.member("Ada Admin", Member.ADMIN, username="ada")
        self.client = APIClient()
        self.client.force_authenticate(self.cashier.user)

    def test_clock_in_current_break_and_clock_out(self):
        self.assertIsNone(self.client.get("/api/attendance/current/").json())

        resp = self.client.post("/api/attendance/clock-in/", {"location": "Till 2"}, format="json")
        self.assertEqual(resp.status_code, 201)
        attendance_id = resp.json()["id"]
        self.assertEqual(self.client.get("/api/attendance/current/").json()["id"], attendance_id)

        resp = self.client.post(f"/api/attendance/{attendance_id}/break/start/", {"type": "SHORT"}, format="json")
        self.assertEqual(resp.status_code, 201)
        resp = self.client.post(f"/api/attendance/{attendance_id}/break/start/", {"type": "SHORT"}, format="json")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["kind"], "conflict")
        resp = self.client.post(f"/api/attendance/{attendance_id}/break/end/")
        self.assertEqual(resp.status_code, 200)

        resp = self.client.post("/api/attendance/clock-out/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], Attendance.CLOCKED_OUT)
        self.assertEqual(len(resp.json()["breaks"]), 1)

    def test_double_clock_in_is_a_conflict(self):
        self.client.post("/api/attendance/clock-in/", {}, format="json")
        resp = self.client.post("/api/attendance/clock-in/", {}, format="json")
        self.assertEqual(resp.status_code, 409)

    def test_staff_only_see_their_own_sessions(self):
        AttendanceService().clock_in(self.manager.pk, self.salon.org.pk)
        mine = AttendanceService().clock_in(self.cashier.pk, self.salon.org.pk)
        self.assertEqual([a["id"] for a in self.client.get("/api/attendance/").json()], [mine.pk])

        self.client.force_authenticate(self.manager.user)
        self.assertEqual(len(self.client.get("/api/attendance/").json()), 2)
        filtered = self.client.get("/api/attendance/", {"employee": self.cashier.pk}).json()
        self.assertEqual([a["id"] for a in filtered], [mine.pk])

    def test_corrections_are_for_managers_and_deletes_for_admins(self):
        attendance = AttendanceService().clock_in(self.cashier.pk, self.salon.org.pk)
        url = f"/api/attendance/{attendance.pk}/"

        self.assertEqual(self.client.patch(url, {"notes": "x"}, format="json").status_code, 403)

        self.client.force_authenticate(self.manager.user)
        resp = self.client.patch(url, {"notes": "Forgot badge"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["notes"], "Forgot badge")
        self.assertEqual(self.client.delete(url).status_code, 403)

        self.client.force_authenticate(self.admin.user)
        self.assertEqual(self.client.delete(url).status_code, 204)
        self.assertFalse(Attendance.objects.exists())

    def test_manager_can_reopen_a_closed_session(self):
        AttendanceService().clock_in(self.cashier.pk, self.salon.org.pk)
        closed = AttendanceService().clock_out(self.cashier.pk, self.salon.org.pk)
        self.client.force_authenticate(self.manager.user)

        resp = self.client.patch(f"/api/attendance/{closed.pk}/", {"status": "CLOCKED_IN"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertIsNone(resp.json()["clock_out_time"])
        self.assertIsNone(resp.json()["total_hours"])
        self.assertTrue(StaffProfile.objects.get(member=self.cashier).is_clocked_in)

    def test_settings_read_and_update(self):
        resp = self.client.get("/api/attendance/settings/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["work_start_time"], 540)
        self.assertEqual(self.client.patch("/api/attendance/settings/", {"grace_period_minutes": 5}, format="json").status_code, 403)

        self.client.force_authenticate(self.manager.user)
        resp = self.client.patch("/api/attendance/settings/", {"grace_period_minutes": 5}, format="json")
        self.assertEqual(resp.json()["grace_period_minutes"], 5)
        resp = self.client.patch("/api/attendance/settings/", {"work_end_time": 500}, format="json")
        self.assertEqual(resp.status_code, 400)
