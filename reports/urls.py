# reports/urls.py

from django.urls import path
from .views import AttendanceByEmployeeView, AttendanceSummaryView

urlpatterns = [
    path("attendance/summary/", AttendanceSummaryView.as_view(), name="attendance-summary"),
    path("attendance/by-employee/", AttendanceByEmployeeView.as_view(), name="attendance-by-employee"),
]
