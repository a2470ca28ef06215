# attendance/filters.py

from datetime import timedelta

from django_filters import rest_framework as filters

from booking.services.slot_utils import day_start_utc, parse_iso_datetime

from .models import Attendance


class AttendanceFilter(filters.FilterSet):
    """
    ListAttendance query params:
      branch, employee, status - exact matches
      start_date               - clocked in at or after this instant
      end_date                 - clocked in on or before the end of this day (UTC)
    """
    branch = filters.NumberFilter(field_name="branch_id")
    employee = filters.NumberFilter(field_name="employee_id")
    status = filters.ChoiceFilter(choices=Attendance.STATUS_CHOICES)
    start_date = filters.CharFilter(method="filter_start_date")
    end_date = filters.CharFilter(method="filter_end_date")

    class Meta:
        model = Attendance
        fields = ["branch", "employee", "status", "start_date", "end_date"]

    def filter_start_date(self, queryset, name, value):
        return queryset.filter(clock_in_time__gte=parse_iso_datetime(value, name))

    def filter_end_date(self, queryset, name, value):
        next_day = day_start_utc(parse_iso_datetime(value, name)) + timedelta(days=1)
        return queryset.filter(clock_in_time__lt=next_day)
