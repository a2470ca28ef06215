# booking/views.py
#
# Purpose:
# - Appointment APIs: slot search (FindAvailableSlots), booking
#   (CreateAppointment), listing, retrieval and partial updates.
# - Read-only Service catalog and Member directory (plus member removal).
#
# Scoping:
# - The acting Member comes from request.user.member. Its organization scopes
#   every query. ADMIN / SUPER_ADMIN see every branch; everyone else is held to
#   their own branch.
# - Role checks are DRF permission classes (booking/permissions.py); the
#   services below never look at roles.
#
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.fields import DateTimeField
from rest_framework.response import Response

from .exceptions import NotFound, ValidationFailed
from .filters import AppointmentFilter
from .models import Branch, Member, Service
from .permissions import FrontDesk, IsManagerOrAdmin, IsOrganizationMember, acting_member
from .serializers import (
    AppointmentCreateSerializer,
    AppointmentSerializer,
    AppointmentUpdateSerializer,
    MemberSerializer,
    ServiceSerializer,
    SlotSearchSerializer,
)
from .services import directory
from .services.availability_engine import AvailabilityEngine
from .services.booking_manager import BookingManager

ALL_BRANCH_ROLES = (Member.SUPER_ADMIN, Member.ADMIN)


def scoped_branch_id(member):
    """None (= every branch) for admins, the member's own branch otherwise."""
    return None if member.role in ALL_BRANCH_ROLES else member.branch_id


def resolve_branch_id(member, requested=None):
    """
    Branch a write applies to: the requested one (admins only), else the
    member's own. The branch must belong to the member's organization.
    """
    branch_id = requested if (requested and member.role in ALL_BRANCH_ROLES) else member.branch_id
    if branch_id is not None and not str(branch_id).isdigit():
        raise ValidationFailed("'branch' must be a branch id.")
    if branch_id is None:
        raise ValidationFailed("A branch is required for this operation.")
    if not Branch.objects.filter(pk=branch_id, organization_id=member.organization_id).exists():
        raise NotFound("Branch not found.")
    return branch_id


# -------------------- ViewSets --------------------
class ServiceViewSet(viewsets.ReadOnlyModelViewSet):
    """Service catalog of the caller's organization (active services only)."""
    serializer_class = ServiceSerializer
    permission_classes = [IsOrganizationMember]

    def get_queryset(self):
        member = acting_member(self.request)
        return Service.objects.filter(organization_id=member.organization_id, active=True).order_by("id")


class MemberViewSet(mixins.ListModelMixin,
                    mixins.RetrieveModelMixin,
                    mixins.DestroyModelMixin,
                    viewsets.GenericViewSet):
    serializer_class = MemberSerializer
    permission_classes = [IsManagerOrAdmin]
    lookup_value_regex = r"\d+"

    def get_queryset(self):
        member = acting_member(self.request)
        qs = Member.objects.filter(organization_id=member.organization_id).order_by("id")
        role = self.request.query_params.get("role")
        if role:
            qs = qs.filter(role=role)
        return qs

    def destroy(self, request, *args, **kwargs):
        member = acting_member(request)
        directory.delete_member(kwargs["pk"], member.organization_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class AppointmentViewSet(viewsets.GenericViewSet):
    """
    Endpoints:
    - GET    /api/appointments/                       list (artist/start/end/status filters)
    - POST   /api/appointments/                       book
    - GET    /api/appointments/{id}/                  retrieve
    - PATCH  /api/appointments/{id}/                  update status / notes / start_time
    - GET    /api/appointments/slots/                 available slots per artist
    - GET    /api/appointments/customer/{customer}/   a customer's appointments
    """
    serializer_class = AppointmentSerializer
    permission_classes = [FrontDesk]
    filterset_class = AppointmentFilter
    lookup_value_regex = r"\d+"
    manager = BookingManager()

    def get_queryset(self):
        member = acting_member(self.request)
        branch_id = scoped_branch_id(member)
        requested = self.request.query_params.get("branch")
        if branch_id is None and requested:
            if not str(requested).isdigit():
                raise ValidationFailed("'branch' must be a branch id.")
            branch_id = int(requested)
        return self.manager.list_appointments(member.organization_id, branch_id)

    def list(self, request):
        qs = self.filter_queryset(self.get_queryset())
        return Response(AppointmentSerializer(qs, many=True).data)

    def retrieve(self, request, pk=None):
        member = acting_member(request)
        appointment = self.manager.get_appointment(pk, member.organization_id, scoped_branch_id(member))
        return Response(AppointmentSerializer(appointment).data)

    def create(self, request):
        """
        Book an appointment. Payload: artist, customer, service, start_time (ISO),
        optional notes (and branch, for admins). Re-validated at commit time;
        a taken slot answers 409 {"kind": "conflict"}.
        """
        member = acting_member(request)
        serializer = AppointmentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        appointment = self.manager.create_booking(
            organization_id=member.organization_id,
            branch_id=resolve_branch_id(member, request.data.get("branch")),
            artist_id=data["artist"],
            customer_id=data["customer"],
            service_id=data["service"],
            start_time=data["start_time"],
            notes=data.get("notes", ""),
        )
        return Response(AppointmentSerializer(appointment).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        member = acting_member(request)
        serializer = AppointmentUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        appointment = self.manager.update_appointment(
            pk, member.organization_id, scoped_branch_id(member), serializer.validated_data
        )
        return Response(AppointmentSerializer(appointment).data)

    @action(detail=False, methods=["get"], url_path="slots")
    def slots(self, request):
        """
        GET /api/appointments/slots/?service=ID&start=ISO&end=ISO[&artist=ID][&branch=ID]
        -> {"<artist id>": ["2035-01-01T09:00:00Z", ...], ...}
        """
        member = acting_member(request)
        params = SlotSearchSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        q = params.validated_data

        engine = AvailabilityEngine()
        by_artist = engine.find_available_slots(
            organization_id=member.organization_id,
            branch_id=resolve_branch_id(member, request.query_params.get("branch")),
            service_id=q["service"],
            search_start=q["start"],
            search_end=q["end"],
            artist_id=q.get("artist"),
        )
        render = DateTimeField().to_representation
        return Response({aid: [render(s) for s in starts] for aid, starts in by_artist.items()})

    @action(detail=False, methods=["get"], url_path=r"customer/(?P<customer_id>\d+)")
    def customer(self, request, customer_id=None):
        member = acting_member(request)
        qs = self.manager.list_for_customer(customer_id, member.organization_id, scoped_branch_id(member))
        return Response(AppointmentSerializer(qs, many=True).data)
