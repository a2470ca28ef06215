from rest_framework import serializers

from booking.services.slot_utils import parse_iso_datetime

from .models import Blockout, WeeklyAvailabilitySlot


class WeeklyAvailabilitySlotSerializer(serializers.ModelSerializer):
    class Meta:
        model = WeeklyAvailabilitySlot
        fields = ["id", "artist", "day_of_week", "start_minute", "end_minute"]


class ScheduleEntrySerializer(serializers.Serializer):
    # Range checks live in AvailabilityCalendar so every caller gets them.
    day_of_week = serializers.IntegerField()
    start_minute = serializers.IntegerField()
    end_minute = serializers.IntegerField()


class SetScheduleSerializer(serializers.Serializer):
    schedule = ScheduleEntrySerializer(many=True, allow_empty=True)


class BlockoutSerializer(serializers.ModelSerializer):
    class Meta:
        model = Blockout
        fields = ["id", "artist", "organization", "start_time", "end_time", "reason", "created_at"]
        read_only_fields = fields


class BlockoutCreateSerializer(serializers.Serializer):
    artist = serializers.IntegerField()
    start_time = serializers.DateTimeField()
    end_time = serializers.DateTimeField()
    reason = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        attrs["start_time"] = parse_iso_datetime(attrs["start_time"])
        attrs["end_time"] = parse_iso_datetime(attrs["end_time"])
        return attrs
