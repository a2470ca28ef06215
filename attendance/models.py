# attendance/models.py
#
# Purpose:
# - Clock-in/out sessions, breaks, and the per-organization rules that drive
#   lateness and overtime.
#
# Invariants held by the database (not just checked in Python):
# - at most one CLOCKED_IN Attendance per employee  (open_attendance_per_employee)
# - at most one open Break per Attendance           (open_break_per_attendance)
#
from django.db import models
from django.utils import timezone


class AttendanceSettings(models.Model):
    """
    One row per organization, created lazily with these defaults:
    09:00-17:00 work day, 15 min grace, 8h overtime threshold,
    no location requirement, auto clock-out after 12h.
    Times are minutes from midnight.
    """
    organization = models.OneToOneField(
        "booking.Organization",
        on_delete=models.CASCADE,
        related_name="attendance_settings",
    )
    work_start_time = models.PositiveSmallIntegerField(default=540)
    work_end_time = models.PositiveSmallIntegerField(default=1020)
    grace_period_minutes = models.PositiveSmallIntegerField(default=15)
    overtime_threshold = models.FloatField(default=8.0, help_text="Hours per session")
    require_location = models.BooleanField(default=False)
    auto_clock_out_hours = models.PositiveSmallIntegerField(default=12)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "attendance settings"

    def __str__(self):
        return f"Attendance settings for {self.organization.name}"


class Attendance(models.Model):
    CLOCKED_IN = "CLOCKED_IN"
    CLOCKED_OUT = "CLOCKED_OUT"
    STATUS_CHOICES = [
        (CLOCKED_IN, "Clocked in"),
        (CLOCKED_OUT, "Clocked out"),
    ]

    organization = models.ForeignKey(
        "booking.Organization", on_delete=models.CASCADE, related_name="attendances"
    )
    branch = models.ForeignKey(
        "booking.Branch", on_delete=models.SET_NULL, null=True, blank=True, related_name="attendances"
    )
    employee = models.ForeignKey(
        "booking.Member", on_delete=models.CASCADE, related_name="attendances"
    )
    clock_in_time = models.DateTimeField(default=timezone.now)
    clock_out_time = models.DateTimeField(null=True, blank=True)
    total_hours = models.FloatField(null=True, blank=True)
    overtime_hours = models.FloatField(default=0)
    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default=CLOCKED_IN)
    location = models.CharField(max_length=255, null=True, blank=True)
    notes = models.TextField(null=True, blank=True)
    is_late = models.BooleanField(default=False)
    late_minutes = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-clock_in_time"]
        constraints = [
            models.UniqueConstraint(
                fields=["employee"],
                condition=models.Q(status="CLOCKED_IN"),
                name="open_attendance_per_employee",
            ),
        ]

    def __str__(self):
        return f"{self.employee.name} in at {self.clock_in_time:%Y-%m-%d %H:%M} ({self.status})"


class Break(models.Model):
    LUNCH = "LUNCH"
    SHORT = "SHORT"
    PERSONAL = "PERSONAL"
    OTHER = "OTHER"
    TYPE_CHOICES = [
        (LUNCH, "Lunch"),
        (SHORT, "Short break"),
        (PERSONAL, "Personal"),
        (OTHER, "Other"),
    ]

    attendance = models.ForeignKey(Attendance, on_delete=models.CASCADE, related_name="breaks")
    start_time = models.DateTimeField(default=timezone.now)
    end_time = models.DateTimeField(null=True, blank=True)
    duration = models.PositiveIntegerField(null=True, blank=True, help_text="Minutes")
    type = models.CharField(max_length=10, choices=TYPE_CHOICES, default=SHORT)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-start_time"]
        constraints = [
            models.UniqueConstraint(
                fields=["attendance"],
                condition=models.Q(end_time__isnull=True),
                name="open_break_per_attendance",
            ),
        ]

    def __str__(self):
        return f"{self.type} break of attendance #{self.attendance_id}"
