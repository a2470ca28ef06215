# attendance/views.py
#
# Endpoints (all under /api/attendance/):
#   POST   clock-in/               open a session for the caller
#   POST   clock-out/              close the caller's open session
#   GET    current/                caller's open session or null (closes stale ones first)
#   POST   {id}/break/start/       open a break on the caller's session
#   POST   {id}/break/end/         close it
#   GET    /                       list (branch/employee/status/start_date/end_date)
#   GET    {id}/                   retrieve
#   PATCH  {id}/                   manual correction (managers/admins)
#   DELETE {id}/                   remove (admins)
#   GET/PATCH settings/            organization attendance settings
#
# The employee is always the acting member; nobody clocks in on behalf of
# someone else through this API.
#
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from booking.exceptions import NotFound
from booking.models import Member
from booking.permissions import HasRole, IsManagerOrAdmin, IsOrganizationMember, acting_member

from .filters import AttendanceFilter
from .serializers import (
    AttendanceSerializer,
    AttendanceSettingsSerializer,
    AttendanceUpdateSerializer,
    BreakSerializer,
    ClockInSerializer,
    StartBreakSerializer,
)
from .services import AttendanceService

IsAdmin = HasRole.of(Member.SUPER_ADMIN, Member.ADMIN)

MANAGER_ROLES = (Member.SUPER_ADMIN, Member.ADMIN, Member.MANAGER)


class AttendanceViewSet(viewsets.GenericViewSet):
    serializer_class = AttendanceSerializer
    filterset_class = AttendanceFilter
    lookup_value_regex = r"\d+"
    service = AttendanceService()

    def get_permissions(self):
        if self.action == "partial_update":
            return [IsManagerOrAdmin()]
        if self.action == "destroy":
            return [IsAdmin()]
        return [IsOrganizationMember()]

    def get_queryset(self):
        member = acting_member(self.request)
        qs = self.service.list_attendance(member.organization_id)
        if member.role not in MANAGER_ROLES:
            # everyone else only sees their own sessions
            qs = qs.filter(employee_id=member.pk)
        return qs

    def list(self, request):
        qs = self.filter_queryset(self.get_queryset())
        return Response(AttendanceSerializer(qs, many=True).data)

    def retrieve(self, request, pk=None):
        attendance = self.get_queryset().filter(pk=pk).first()
        if attendance is None:
            raise NotFound("Attendance not found.")
        return Response(AttendanceSerializer(attendance).data)

    def partial_update(self, request, pk=None):
        member = acting_member(request)
        payload = AttendanceUpdateSerializer(data=request.data, partial=True)
        payload.is_valid(raise_exception=True)
        attendance = self.service.update_attendance(pk, member.organization_id, payload.validated_data)
        return Response(AttendanceSerializer(attendance).data)

    def destroy(self, request, pk=None):
        self.service.delete_attendance(pk, acting_member(request).organization_id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["post"], url_path="clock-in")
    def clock_in(self, request):
        member = acting_member(request)
        payload = ClockInSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        attendance = self.service.clock_in(
            member.pk,
            member.organization_id,
            location=payload.validated_data.get("location"),
            notes=payload.validated_data.get("notes"),
        )
        return Response(AttendanceSerializer(attendance).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"], url_path="clock-out")
    def clock_out(self, request):
        member = acting_member(request)
        attendance = self.service.clock_out(member.pk, member.organization_id)
        return Response(AttendanceSerializer(attendance).data)

    @action(detail=False, methods=["get"])
    def current(self, request):
        member = acting_member(request)
        attendance = self.service.get_current_attendance(member.pk, member.organization_id)
        if attendance is None:
            return Response(None)
        return Response(AttendanceSerializer(attendance).data)

    @action(detail=True, methods=["post"], url_path="break/start")
    def start_break(self, request, pk=None):
        payload = StartBreakSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        brk = self.service.start_break(pk, acting_member(request).pk, payload.validated_data["type"])
        return Response(BreakSerializer(brk).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="break/end")
    def end_break(self, request, pk=None):
        brk = self.service.end_break(pk, acting_member(request).pk)
        return Response(BreakSerializer(brk).data)


class AttendanceSettingsView(APIView):
    """
    GET   /api/attendance/settings/   any organization member
    PATCH /api/attendance/settings/   managers and admins
    """
    service = AttendanceService()

    def get_permissions(self):
        if self.request.method == "PATCH":
            return [IsManagerOrAdmin()]
        return [IsOrganizationMember()]

    def get(self, request):
        settings = self.service.get_settings(acting_member(request).organization_id)
        return Response(AttendanceSettingsSerializer(settings).data)

    def patch(self, request):
        organization_id = acting_member(request).organization_id
        current = self.service.get_settings(organization_id)
        payload = AttendanceSettingsSerializer(current, data=request.data, partial=True)
        payload.is_valid(raise_exception=True)
        settings = self.service.update_settings(organization_id, payload.validated_data)
        return Response(AttendanceSettingsSerializer(settings).data)
