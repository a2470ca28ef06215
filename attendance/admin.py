# attendance/admin.py
from django.contrib import admin
from .models import Attendance, AttendanceSettings, Break


class BreakInline(admin.TabularInline):
    model = Break
    extra = 0
    readonly_fields = ("duration",)


@admin.register(Attendance)
class AttendanceAdmin(admin.ModelAdmin):
    list_display = ("employee", "clock_in_time", "clock_out_time", "status", "total_hours", "is_late")
    list_filter = ("status", "is_late", "branch")
    search_fields = ("employee__name", "employee__email")
    inlines = [BreakInline]


@admin.register(AttendanceSettings)
class AttendanceSettingsAdmin(admin.ModelAdmin):
    list_display = ("organization", "work_start_time", "work_end_time", "grace_period_minutes", "auto_clock_out_hours")
