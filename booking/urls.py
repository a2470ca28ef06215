# booking/urls.py
#
# Purpose:
# - Expose the booking app's REST endpoints via the DRF router:
#     /api/appointments/   booking, listing, slot search
#     /api/services/       service catalog (read-only)
#     /api/members/        member directory (managers/admins)
#
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import AppointmentViewSet, MemberViewSet, ServiceViewSet

router = DefaultRouter()
router.register(r"appointments", AppointmentViewSet, basename="appointment")
router.register(r"services", ServiceViewSet, basename="service")
router.register(r"members", MemberViewSet, basename="member")

urlpatterns = [
    path("", include(router.urls)),
]
