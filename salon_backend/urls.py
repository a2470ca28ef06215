# salon_backend/urls.py
#
# Purpose:
# - Project URL router. All JSON APIs live under /api/.
#
from django.contrib import admin
from django.urls import path, include


urlpatterns = [
    # Django admin
    path("admin/", admin.site.urls),

    # =====
    # API's
    # =====
    path("api/", include("booking.urls")),
    path("api/staff/", include("staff.urls")),
    path("api/attendance/", include("attendance.urls")),
    path("api/reports/", include("reports.urls")),
]
