"""
services.py
-----------
Attendance analytics over a date range (UTC days, both ends inclusive).

- attendance_summary: totals across the selected sessions plus an attendance
  rate measured against the weekdays (Mon-Fri) in the range.
- attendance_by_employee: the same totals grouped per employee.

Sessions are selected by clock_in_time; open sessions count as sessions but
contribute no hours.
"""

from datetime import timedelta

from django.db.models import Count, Q, Sum

from attendance.models import Attendance
from booking.exceptions import ValidationFailed
from booking.services.slot_utils import day_start_utc


def weekdays_between(start_day, end_day) -> int:
    """Number of Mon-Fri days in [start_day, end_day]; 0 when start > end."""
    count = 0
    day = start_day
    while day <= end_day:
        if day.weekday() < 5:
            count += 1
        day += timedelta(days=1)
    return count


def _sessions(organization_id, start_date, end_date, employee_id=None, branch_id=None):
    first = day_start_utc(start_date)
    last = day_start_utc(end_date)
    if first > last:
        raise ValidationFailed("'start_date' must not be after 'end_date'.")

    qs = Attendance.objects.filter(
        organization_id=organization_id,
        clock_in_time__gte=first,
        clock_in_time__lt=last + timedelta(days=1),
    )
    if employee_id:
        qs = qs.filter(employee_id=employee_id)
    if branch_id:
        qs = qs.filter(branch_id=branch_id)
    return qs, first, last


def attendance_summary(organization_id, start_date, end_date, employee_id=None, branch_id=None):
    qs, first, last = _sessions(organization_id, start_date, end_date, employee_id, branch_id)

    totals = qs.aggregate(
        total_hours=Sum("total_hours"),
        overtime_hours=Sum("overtime_hours"),
        sessions=Count("id"),
        late=Count("id", filter=Q(is_late=True)),
    )
    total_hours = totals["total_hours"] or 0
    sessions = totals["sessions"]
    total_days = weekdays_between(first.date(), last.date())

    return {
        "total_hours": total_hours,
        "average_hours_per_day": total_hours / sessions if sessions else 0,
        "total_late_arrivals": totals["late"],
        "total_overtime_hours": totals["overtime_hours"] or 0,
        "attendance_rate": sessions / total_days * 100 if total_days else 0,
        "total_days": total_days,
    }


def attendance_by_employee(organization_id, start_date, end_date, branch_id=None):
    qs, _first, _last = _sessions(organization_id, start_date, end_date, branch_id=branch_id)

    rows = (
        qs.values("employee_id", "employee__name")
        .annotate(
            total_hours=Sum("total_hours"),
            overtime_hours=Sum("overtime_hours"),
            attendance_count=Count("id"),
            late_count=Count("id", filter=Q(is_late=True)),
        )
        .order_by("employee__name", "employee_id")
    )
    return [
        {
            "employee_id": row["employee_id"],
            "employee_name": row["employee__name"],
            "total_hours": row["total_hours"] or 0,
            "overtime_hours": row["overtime_hours"] or 0,
            "attendance_count": row["attendance_count"],
            "late_count": row["late_count"],
        }
        for row in rows
    ]
