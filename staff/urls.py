from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import ArtistCalendarViewSet, BlockoutViewSet

router = DefaultRouter()
router.register(r"artists", ArtistCalendarViewSet, basename="artist-calendar")
router.register(r"blockouts", BlockoutViewSet, basename="blockout")

urlpatterns = [path("", include(router.urls))]
