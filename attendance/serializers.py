from rest_framework import serializers

from .models import Attendance, AttendanceSettings, Break


class BreakSerializer(serializers.ModelSerializer):
    class Meta:
        model = Break
        fields = ["id", "attendance", "type", "start_time", "end_time", "duration"]
        read_only_fields = fields


class AttendanceSerializer(serializers.ModelSerializer):
    employee_name = serializers.CharField(source="employee.name", read_only=True)
    employee_email = serializers.CharField(source="employee.email", read_only=True)
    breaks = BreakSerializer(many=True, read_only=True)

    class Meta:
        model = Attendance
        fields = [
            "id",
            "organization",
            "branch",
            "employee",
            "employee_name",
            "employee_email",
            "clock_in_time",
            "clock_out_time",
            "total_hours",
            "overtime_hours",
            "status",
            "location",
            "notes",
            "is_late",
            "late_minutes",
            "breaks",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ClockInSerializer(serializers.Serializer):
    location = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class StartBreakSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=Break.TYPE_CHOICES, default=Break.SHORT)


class AttendanceUpdateSerializer(serializers.Serializer):
    clock_out_time = serializers.DateTimeField(required=False)
    total_hours = serializers.FloatField(required=False, min_value=0)
    status = serializers.ChoiceField(choices=Attendance.STATUS_CHOICES, required=False)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class AttendanceSettingsSerializer(serializers.ModelSerializer):
    work_start_time = serializers.IntegerField(min_value=0, max_value=1439, required=False)
    work_end_time = serializers.IntegerField(min_value=0, max_value=1439, required=False)
    grace_period_minutes = serializers.IntegerField(min_value=0, required=False)
    overtime_threshold = serializers.FloatField(min_value=0, required=False)
    auto_clock_out_hours = serializers.IntegerField(min_value=1, required=False)

    class Meta:
        model = AttendanceSettings
        fields = [
            "organization",
            "work_start_time",
            "work_end_time",
            "grace_period_minutes",
            "overtime_threshold",
            "require_location",
            "auto_clock_out_hours",
            "updated_at",
        ]
        read_only_fields = ["organization", "updated_at"]

    def validate(self, attrs):
        start = attrs.get("work_start_time", getattr(self.instance, "work_start_time", None))
        end = attrs.get("work_end_time", getattr(self.instance, "work_end_time", None))
        if start is not None and end is not None and end <= start:
            raise serializers.ValidationError("Work end time must be after work start time.")
        return attrs
