"""
services.py
-----------
AvailabilityCalendar answers two questions for the slot generator:

1) What is artist X's work window on day-of-week Y?
2) Which blockouts of X touch a given time window?

and owns the writes to the calendar: weekly schedule replacement and
blockout create/delete. There is no caching; every call reads the database.
"""

import logging
from datetime import timedelta

from django.db import transaction
from django.utils import timezone

from booking.exceptions import NotFound, ValidationFailed
from booking.services.slot_utils import MINUTES_PER_DAY, at_minute, iso_weekday_utc, subtract_interval

from .models import Blockout, WeeklyAvailabilitySlot

logger = logging.getLogger(__name__)


def _validate_slot(index, slot):
    try:
        day = int(slot["day_of_week"])
        start = int(slot["start_minute"])
        end = int(slot["end_minute"])
    except (KeyError, TypeError, ValueError):
        raise ValidationFailed(
            f"Slot {index}: day_of_week, start_minute and end_minute must be integers."
        )
    if not 1 <= day <= 7:
        raise ValidationFailed(f"Slot {index}: day_of_week must be between 1 and 7.")
    if start < 0 or end < 0:
        raise ValidationFailed(f"Slot {index}: minutes cannot be negative.")
    if start >= MINUTES_PER_DAY or end >= MINUTES_PER_DAY:
        raise ValidationFailed(f"Slot {index}: minutes must be below {MINUTES_PER_DAY}.")
    if end <= start:
        raise ValidationFailed(f"Slot {index}: end_minute must be after start_minute.")
    return day, start, end


class AvailabilityCalendar:
    # -------------------- weekly schedule --------------------
    def get_schedule(self, artist_id):
        return list(
            WeeklyAvailabilitySlot.objects.filter(artist_id=artist_id).order_by("day_of_week", "id")
        )

    def get_work_window(self, artist_id, day_of_week):
        """
        (start_minute, end_minute) for that day, or None.
        Duplicate rows for one day resolve to the lowest id.
        """
        slot = (
            WeeklyAvailabilitySlot.objects
            .filter(artist_id=artist_id, day_of_week=day_of_week)
            .order_by("id")
            .first()
        )
        if slot is None:
            return None
        return slot.start_minute, slot.end_minute

    def set_weekly_schedule(self, artist, slots):
        """
        Replace the whole weekly schedule of `artist` with `slots`.

        Args:
            artist: booking.Member (already resolved and tenant-checked)
            slots: iterable of dicts with day_of_week, start_minute, end_minute

        Every slot is validated before anything is written; the delete and the
        insert then run in one transaction so readers never see an empty week.
        """
        validated = [_validate_slot(i, s) for i, s in enumerate(slots)]

        with transaction.atomic():
            WeeklyAvailabilitySlot.objects.filter(artist=artist).delete()
            WeeklyAvailabilitySlot.objects.bulk_create([
                WeeklyAvailabilitySlot(
                    artist=artist,
                    organization_id=artist.organization_id,
                    day_of_week=day,
                    start_minute=start,
                    end_minute=end,
                )
                for day, start, end in validated
            ])

        logger.info("Replaced weekly schedule for artist %s (%d slots)", artist.pk, len(validated))
        return self.get_schedule(artist.pk)

    # -------------------- blockouts --------------------
    def create_blockout(self, artist, organization_id, start_time, end_time, reason=""):
        if end_time <= start_time:
            raise ValidationFailed("Blockout end time must be after its start time.")
        blockout = Blockout.objects.create(
            artist=artist,
            organization_id=organization_id,
            start_time=start_time,
            end_time=end_time,
            reason=reason or "",
        )
        logger.info("Blockout %s created for artist %s", blockout.pk, artist.pk)
        return blockout

    def get_blockouts(self, artist_id):
        """Future blockouts only, soonest first."""
        return list(
            Blockout.objects
            .filter(artist_id=artist_id, start_time__gte=timezone.now())
            .order_by("start_time")
        )

    def delete_blockout(self, blockout_id, organization_id):
        deleted, _ = Blockout.objects.filter(pk=blockout_id, organization_id=organization_id).delete()
        if not deleted:
            raise NotFound("Blockout not found.")
        logger.info("Blockout %s deleted", blockout_id)
        return {"detail": "Blockout successfully deleted."}

    def blockouts_in_window(self, artist_ids, window_start, window_end):
        """Blockouts of any of `artist_ids` with start <= window_end and end >= window_start."""
        return Blockout.objects.filter(
            artist_id__in=list(artist_ids),
            start_time__lte=window_end,
            end_time__gte=window_start,
        ).order_by("start_time")

    # -------------------- day view --------------------
    def open_windows(self, artist_id, day):
        """
        The artist's work window on the UTC day of `day`, minus that day's
        blockouts. Returns a list of (start, end) datetimes.
        """
        window = self.get_work_window(artist_id, iso_weekday_utc(day))
        if window is None:
            return []
        pieces = [(at_minute(day, window[0]), at_minute(day, window[1]))]
        day_end = at_minute(day, 0) + timedelta(days=1)
        for block in self.blockouts_in_window([artist_id], at_minute(day, 0), day_end):
            pieces = [
                part
                for start, end in pieces
                for part in subtract_interval(start, end, block.start_time, block.end_time)
            ]
        return pieces
