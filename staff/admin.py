# staff/admin.py
from django.contrib import admin
from .models import Blockout, WeeklyAvailabilitySlot


@admin.register(WeeklyAvailabilitySlot)
class WeeklyAvailabilitySlotAdmin(admin.ModelAdmin):
    list_display = ("artist", "day_of_week", "start_minute", "end_minute")
    list_filter = ("day_of_week",)
    search_fields = ("artist__name",)


@admin.register(Blockout)
class BlockoutAdmin(admin.ModelAdmin):
    list_display = ("artist", "start_time", "end_time", "reason")
    list_filter = ("artist",)
    search_fields = ("artist__name", "reason")
