from rest_framework import serializers
from django.utils import timezone

from .models import Appointment, Member, Service
from .services.slot_utils import parse_iso_datetime


class ServiceSerializer(serializers.ModelSerializer):
    class Meta:
        model = Service
        fields = ["id", "name", "description", "duration_minutes", "base_price", "active"]


class MemberSerializer(serializers.ModelSerializer):
    class Meta:
        model = Member
        fields = ["id", "name", "email", "role", "organization", "branch"]


class AppointmentSerializer(serializers.ModelSerializer):
    artist_name = serializers.CharField(source="artist.name", read_only=True)
    customer_name = serializers.CharField(source="customer.name", read_only=True)
    service_name = serializers.CharField(source="service.name", read_only=True)

    class Meta:
        model = Appointment
        fields = [
            "id",
            "organization",
            "branch",
            "artist",
            "artist_name",
            "customer",
            "customer_name",
            "service",
            "service_name",
            "start_time",
            "end_time",
            "status",
            "price",
            "notes",
            "cancellation_time",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AppointmentCreateSerializer(serializers.Serializer):
    """
    Payload for CreateAppointment. Ids are plain integers; tenant checks
    happen in BookingManager so foreign ids surface as not_found.
    """
    artist = serializers.IntegerField()
    customer = serializers.IntegerField()
    service = serializers.IntegerField()
    start_time = serializers.DateTimeField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_start_time(self, value):
        # prevent past dates
        if value <= timezone.now():
            raise serializers.ValidationError("Start time must be in the future.")
        return parse_iso_datetime(value)


class AppointmentUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Appointment.STATUS_CHOICES, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    start_time = serializers.DateTimeField(required=False)

    def validate_start_time(self, value):
        return parse_iso_datetime(value)


class SlotSearchSerializer(serializers.Serializer):
    """
    Query params for FindAvailableSlots:
      service (required), artist (optional), start and end (ISO date or date-time).
    """
    service = serializers.IntegerField()
    artist = serializers.IntegerField(required=False)
    start = serializers.CharField()
    end = serializers.CharField()

    def validate(self, attrs):
        attrs["start"] = parse_iso_datetime(attrs["start"], "start")
        attrs["end"] = parse_iso_datetime(attrs["end"], "end")
        if attrs["start"] > attrs["end"]:
            raise serializers.ValidationError("'start' must not be after 'end'.")
        return attrs
