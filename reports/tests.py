# reports/tests.py

from datetime import date

from django.test import TestCase
from rest_framework.test import APIClient

from attendance.models import Attendance
from booking.models import Member
from booking.tests.helpers import SalonFixture, utc

from .services import attendance_by_employee, attendance_summary, weekdays_between


class AttendanceAnalyticsTests(TestCase):
    def setUp(self):
        self.salon = SalonFixture()
        self.cashier = self.salon.member("Cas Cashier", Member.CASHIER)
        # Week of Monday 2035-01-01
        self.session(self.salon.artist, utc(2035, 1, 1, 9), 8.0, 0.0, late=False)
        self.session(self.salon.artist, utc(2035, 1, 2, 9, 30), 9.5, 1.5, late=True)
        self.session(self.cashier, utc(2035, 1, 3, 9), 6.0, 0.0, late=False)
        # outside the range
        self.session(self.cashier, utc(2035, 1, 9, 9), 4.0, 0.0, late=True)

    def session(self, employee, clock_in, hours, overtime, late):
        return Attendance.objects.create(
            organization=self.salon.org,
            branch=self.salon.branch,
            employee=employee,
            clock_in_time=clock_in,
            clock_out_time=clock_in,
            total_hours=hours,
            overtime_hours=overtime,
            status=Attendance.CLOCKED_OUT,
            is_late=late,
        )

    def test_weekdays_between(self):
        self.assertEqual(weekdays_between(date(2035, 1, 1), date(2035, 1, 7)), 5)
        self.assertEqual(weekdays_between(date(2035, 1, 6), date(2035, 1, 7)), 0)

    def test_summary_over_a_week(self):
        summary = attendance_summary(self.salon.org.pk, utc(2035, 1, 1), utc(2035, 1, 7))
        self.assertAlmostEqual(summary["total_hours"], 23.5)
        self.assertAlmostEqual(summary["average_hours_per_day"], 23.5 / 3)
        self.assertEqual(summary["total_late_arrivals"], 1)
        self.assertAlmostEqual(summary["total_overtime_hours"], 1.5)
        self.assertEqual(summary["total_days"], 5)
        self.assertAlmostEqual(summary["attendance_rate"], 60.0)

    def test_end_date_includes_the_whole_day(self):
        summary = attendance_summary(self.salon.org.pk, utc(2035, 1, 3), utc(2035, 1, 3))
        self.assertAlmostEqual(summary["total_hours"], 6.0)

    def test_summary_for_one_employee(self):
        summary = attendance_summary(
            self.salon.org.pk, utc(2035, 1, 1), utc(2035, 1, 7), employee_id=self.cashier.pk
        )
        self.assertAlmostEqual(summary["total_hours"], 6.0)

    def test_empty_range(self):
        summary = attendance_summary(self.salon.org.pk, utc(2035, 1, 6), utc(2035, 1, 7))
        self.assertEqual(summary["total_hours"], 0)
        self.assertEqual(summary["average_hours_per_day"], 0)
        self.assertEqual(summary["attendance_rate"], 0)

    def test_by_employee(self):
        rows = attendance_by_employee(self.salon.org.pk, utc(2035, 1, 1), utc(2035, 1, 7))
        by_id = {row["employee_id"]: row for row in rows}
        self.assertEqual(by_id[self.salon.artist.pk]["attendance_count"], 2)
        self.assertEqual(by_id[self.salon.artist.pk]["late_count"], 1)
        self.assertAlmostEqual(by_id[self.salon.artist.pk]["total_hours"], 17.5)
        self.assertEqual(by_id[self.cashier.pk]["employee_name"], "Cas Cashier")

    def test_other_organizations_are_excluded(self):
        foreign = SalonFixture(name="Elsewhere")
        Attendance.objects.create(
            organization=foreign.org, employee=foreign.artist,
            clock_in_time=utc(2035, 1, 1, 9), total_hours=10.0, status=Attendance.CLOCKED_OUT,
        )
        rows = attendance_by_employee(self.salon.org.pk, utc(2035, 1, 1), utc(2035, 1, 7))
        self.assertNotIn(foreign.artist.pk, [row["employee_id"] for row in rows])


class AnalyticsApiTests(TestCase):
    def setUp(self):
        self.salon = SalonFixture()
        self.manager = self.salon.member("Mo Manager", Member.MANAGER, username="mo")
        self.client = APIClient()
        self.client.force_authenticate(self.manager.user)

    def test_summary_endpoint(self):
        resp = self.client.get("/api/reports/attendance/summary/", {
            "start_date": "2035-01-01", "end_date": "2035-01-07",
        })
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["total_days"], 5)

    def test_missing_dates_are_a_validation_error(self):
        resp = self.client.get("/api/reports/attendance/by-employee/")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["kind"], "validation_error")

    def test_inverted_range_is_a_validation_error(self):
        resp = self.client.get("/api/reports/attendance/summary/", {
            "start_date": "2035-01-07", "end_date": "2035-01-01",
        })
        self.assertEqual(resp.status_code, 400)

    def test_staff_without_management_role_are_forbidden(self):
        artist = self.salon.member("Bo Artist", Member.ARTIST, username="bo")
        self.client.force_authenticate(artist.user)
        resp = self.client.get("/api/reports/attendance/summary/", {
            "start_date": "2035-01-01", "end_date": "2035-01-07",
        })
        self.assertEqual(resp.status_code, 403)
