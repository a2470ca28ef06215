# reports/views.py

from rest_framework import serializers
from rest_framework.response import Response
from rest_framework.views import APIView

from booking.permissions import IsManagerOrAdmin, acting_member
from booking.services.slot_utils import parse_iso_datetime

from . import services


class AnalyticsQuerySerializer(serializers.Serializer):
    start_date = serializers.CharField()
    end_date = serializers.CharField()
    employee = serializers.IntegerField(required=False)
    branch = serializers.IntegerField(required=False)

    def validate_start_date(self, value):
        return parse_iso_datetime(value, "start_date")

    def validate_end_date(self, value):
        return parse_iso_datetime(value, "end_date")


class AttendanceSummaryView(APIView):
    """
    GET /api/reports/attendance/summary/?start_date=YYYY-MM-DD&end_date=YYYY-MM-DD[&employee=ID][&branch=ID]

    Returns JSON with:
    - total_hours, average_hours_per_day, total_overtime_hours
    - total_late_arrivals
    - attendance_rate: sessions / weekdays in range * 100
    - total_days: weekdays in range

    Only accessible by managers and admins.
    """
    permission_classes = [IsManagerOrAdmin]

    def get(self, request):
        params = AnalyticsQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        q = params.validated_data
        data = services.attendance_summary(
            acting_member(request).organization_id,
            q["start_date"],
            q["end_date"],
            employee_id=q.get("employee"),
            branch_id=q.get("branch"),
        )
        return Response(data)


class AttendanceByEmployeeView(APIView):
    """
    GET /api/reports/attendance/by-employee/?start_date=...&end_date=...[&branch=ID]

    One row per employee: employee_id, employee_name, total_hours,
    overtime_hours, attendance_count, late_count.
    """
    permission_classes = [IsManagerOrAdmin]

    def get(self, request):
        params = AnalyticsQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        q = params.validated_data
        rows = services.attendance_by_employee(
            acting_member(request).organization_id,
            q["start_date"],
            q["end_date"],
            branch_id=q.get("branch"),
        )
        return Response(rows)
