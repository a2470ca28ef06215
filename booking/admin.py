from django.contrib import admin
from .models import Appointment, Branch, Member, Organization, Service, StaffProfile


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "created_at")
    search_fields = ("name",)


@admin.register(Branch)
class BranchAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "organization")
    list_filter = ("organization",)


@admin.register(Member)
class MemberAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "email", "role", "organization", "branch")
    list_filter = ("role", "organization")
    search_fields = ("name", "email")


@admin.register(StaffProfile)
class StaffProfileAdmin(admin.ModelAdmin):
    list_display = ("member", "is_clocked_in")
    list_filter = ("is_clocked_in",)


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "base_price", "duration_minutes", "active", "organization")
    list_filter = ("active", "organization")
    search_fields = ("name",)


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ("id", "customer", "service", "artist", "start_time", "end_time", "status")
    list_filter = ("status", "service", "branch")
    search_fields = ("customer__name", "artist__name", "service__name")
    # Appointments are written through BookingManager so the overlap check always runs.
    readonly_fields = ("start_time", "end_time", "price", "artist")
