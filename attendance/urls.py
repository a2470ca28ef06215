from django.urls import path, include
from rest_framework.routers import SimpleRouter
from .views import AttendanceSettingsView, AttendanceViewSet

router = SimpleRouter()
router.register(r"", AttendanceViewSet, basename="attendance")

urlpatterns = [
    path("settings/", AttendanceSettingsView.as_view(), name="attendance-settings"),
    path("", include(router.urls)),
]
