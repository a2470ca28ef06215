# staff/models.py
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class WeeklyAvailabilitySlot(models.Model):
    """
    Recurring weekly work window for an artist.
    Minutes are counted from midnight UTC; day_of_week is 1 = Monday .. 7 = Sunday.

    The set for one artist is always replaced wholesale (see
    AvailabilityCalendar.set_weekly_schedule). Nothing stops two rows for the
    same day; lookups take the lowest id.
    """
    artist = models.ForeignKey(
        "booking.Member",
        on_delete=models.CASCADE,
        related_name="weekly_availability",
    )
    organization = models.ForeignKey(
        "booking.Organization",
        on_delete=models.CASCADE,
        related_name="+",
    )
    day_of_week = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(7)]
    )
    start_minute = models.PositiveSmallIntegerField(validators=[MaxValueValidator(1439)])
    end_minute = models.PositiveSmallIntegerField(validators=[MaxValueValidator(1439)])

    class Meta:
        ordering = ["artist_id", "day_of_week", "id"]

    def __str__(self):
        return (
            f"{self.artist.name}: day {self.day_of_week} "
            f"{self.start_minute // 60:02d}:{self.start_minute % 60:02d}-"
            f"{self.end_minute // 60:02d}:{self.end_minute % 60:02d}"
        )


class Blockout(models.Model):
    """
    One-off unavailability for an artist (time off, outside commitments).
    """
    artist = models.ForeignKey(
        "booking.Member",
        on_delete=models.CASCADE,
        related_name="blockouts",
    )
    organization = models.ForeignKey(
        "booking.Organization",
        on_delete=models.CASCADE,
        related_name="+",
    )
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["artist_id", "start_time"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(start_time__lt=models.F("end_time")),
                name="blockout_start_before_end",
            ),
        ]

    def __str__(self):
        return f"{self.artist.name}: {self.start_time} - {self.end_time}"
