# staff/views.py
#
# Artist calendar endpoints:
#   GET  /api/staff/artists/{id}/schedule/       weekly schedule
#   PUT  /api/staff/artists/{id}/schedule/       replace weekly schedule
#   GET  /api/staff/artists/{id}/blockouts/      future blockouts
#   GET  /api/staff/artists/{id}/open-windows/?date=YYYY-MM-DD
#   POST /api/staff/blockouts/                   create blockout
#   DELETE /api/staff/blockouts/{id}/            delete blockout
#
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.fields import DateTimeField
from rest_framework.response import Response

from booking.permissions import CalendarAccess, acting_member
from booking.services import directory
from booking.services.slot_utils import parse_iso_datetime

from .serializers import (
    BlockoutCreateSerializer,
    BlockoutSerializer,
    SetScheduleSerializer,
    WeeklyAvailabilitySlotSerializer,
)
from .services import AvailabilityCalendar


class ArtistCalendarViewSet(viewsets.ViewSet):
    permission_classes = [CalendarAccess]
    lookup_value_regex = r"\d+"
    calendar = AvailabilityCalendar()

    def _artist(self, request, pk):
        return directory.get_artist(pk, acting_member(request).organization_id)

    @action(detail=True, methods=["get", "put"])
    def schedule(self, request, pk=None):
        artist = self._artist(request, pk)
        if request.method == "PUT":
            payload = SetScheduleSerializer(data=request.data)
            payload.is_valid(raise_exception=True)
            slots = self.calendar.set_weekly_schedule(artist, payload.validated_data["schedule"])
        else:
            slots = self.calendar.get_schedule(artist.pk)
        return Response(WeeklyAvailabilitySlotSerializer(slots, many=True).data)

    @action(detail=True, methods=["get"])
    def blockouts(self, request, pk=None):
        artist = self._artist(request, pk)
        return Response(BlockoutSerializer(self.calendar.get_blockouts(artist.pk), many=True).data)

    @action(detail=True, methods=["get"], url_path="open-windows")
    def open_windows(self, request, pk=None):
        artist = self._artist(request, pk)
        day = parse_iso_datetime(request.query_params.get("date"), "date")
        render = DateTimeField().to_representation
        return Response([
            {"start": render(start), "end": render(end)}
            for start, end in self.calendar.open_windows(artist.pk, day)
        ])


class BlockoutViewSet(viewsets.ViewSet):
    permission_classes = [CalendarAccess]
    lookup_value_regex = r"\d+"
    calendar = AvailabilityCalendar()

    def create(self, request):
        member = acting_member(request)
        payload = BlockoutCreateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data
        artist = directory.get_artist(data["artist"], member.organization_id)
        blockout = self.calendar.create_blockout(
            artist, member.organization_id, data["start_time"], data["end_time"], data.get("reason", "")
        )
        return Response(BlockoutSerializer(blockout).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        member = acting_member(request)
        return Response(self.calendar.delete_blockout(pk, member.organization_id))
