"""
availability_engine.py
----------------------
Computes open appointment start times per artist by walking each artist's
weekly work window in 15-minute steps and dropping candidates that clash with:
1) existing blocking appointments (CONFIRMED / COMPLETED), and
2) the artist's blockouts.

Boundary rule:
- A candidate [t, t + duration] clashes when t OR t + duration lies inside an
  existing interval with BOTH ends inclusive (is_within_interval). A slot that
  ends exactly when an appointment starts is therefore not offered.
- BookingManager re-checks at commit time with a strict half-open overlap, so
  the engine is the stricter of the two. Both rules are intentional; keep them
  as they are.

Days:
- Days are UTC days. The outer loop advances by exactly 24 hours from the
  search start, and day_of_week is the ISO weekday (1 = Monday .. 7 = Sunday).
"""

import logging
from datetime import timedelta

from ..exceptions import ValidationFailed
from ..models import Appointment
from . import directory
from .slot_utils import at_minute, is_within_interval, iso_weekday_utc

logger = logging.getLogger(__name__)

SLOT_INTERVAL_MINUTES = 15


class AvailabilityEngine:
    def __init__(self, calendar=None):
        if calendar is None:
            from staff.services import AvailabilityCalendar
            calendar = AvailabilityCalendar()
        self.calendar = calendar

    def _clashes(self, start, end, intervals) -> bool:
        """Inclusive-boundary clash test used for candidate slots."""
        for busy_start, busy_end in intervals:
            if is_within_interval(start, busy_start, busy_end) or is_within_interval(end, busy_start, busy_end):
                return True
        return False

    def _busy_by_artist(self, artist_ids, search_start, search_end):
        """
        One query each for appointments and blockouts overlapping the search
        window (start <= search_end and end >= search_start), grouped per artist.
        """
        busy = {artist_id: [] for artist_id in artist_ids}

        appointments = Appointment.objects.filter(
            artist_id__in=artist_ids,
            status__in=Appointment.BLOCKING_STATUSES,
            start_time__lte=search_end,
            end_time__gte=search_start,
        ).values_list("artist_id", "start_time", "end_time")
        for artist_id, start, end in appointments:
            busy[artist_id].append((start, end))

        for block in self.calendar.blockouts_in_window(artist_ids, search_start, search_end):
            busy[block.artist_id].append((block.start_time, block.end_time))

        return busy

    def slots_for_artist(self, artist_id, duration_minutes, search_start, search_end, busy):
        """
        Candidate start times for one artist, chronological.

        Args:
            artist_id: Member pk
            duration_minutes: service duration
            search_start / search_end: aware UTC datetimes, start <= end
            busy: list of (start, end) intervals to avoid
        """
        duration = timedelta(minutes=duration_minutes)
        step = timedelta(minutes=SLOT_INTERVAL_MINUTES)
        windows = {}  # day_of_week -> work window, at most 7 lookups per search

        slots = []
        current = search_start
        while current <= search_end:
            day_of_week = iso_weekday_utc(current)
            if day_of_week not in windows:
                windows[day_of_week] = self.calendar.get_work_window(artist_id, day_of_week)
            window = windows[day_of_week]
            if window is not None:
                day_start = at_minute(current, window[0])
                day_end = at_minute(current, window[1])

                candidate = day_start
                while candidate < day_end:
                    candidate_end = candidate + duration
                    if candidate_end <= day_end and not self._clashes(candidate, candidate_end, busy):
                        slots.append(candidate)
                    candidate += step

            current += timedelta(hours=24)
        return slots

    def find_available_slots(self, organization_id, branch_id, service_id, search_start, search_end,
                             artist_id=None):
        """
        Returns {str(artist_id): [datetime, ...]} for every ARTIST of the branch
        (or only `artist_id` when given). Artists without any work window in the
        range map to an empty list.

        Raises:
            NotFound: unknown service (or service of another organization)
            ValidationFailed: search_start after search_end
        """
        if search_start > search_end:
            raise ValidationFailed("Search start must not be after search end.")

        service = directory.get_service(service_id, organization_id)
        artist_ids = list(
            directory.artists_for_branch(organization_id, branch_id, artist_id).values_list("id", flat=True)
        )
        busy = self._busy_by_artist(artist_ids, search_start, search_end)

        results = {}
        for aid in artist_ids:
            results[str(aid)] = self.slots_for_artist(
                aid, service.duration_minutes, search_start, search_end, busy[aid]
            )

        logger.debug(
            "Slot search service=%s artists=%d window=%s..%s",
            service.pk, len(artist_ids), search_start.isoformat(), search_end.isoformat(),
        )
        return results
