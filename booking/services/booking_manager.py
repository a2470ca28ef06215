"""
booking_manager.py
------------------
Coordinates appointment creation and updates.

Double-booking prevention:
- Slot search (AvailabilityEngine) is a plain read and may be stale by the
  time the client books. Every write therefore re-validates inside
  transaction.atomic() after taking a row lock on the artist
  (select_for_update on booking.Member). Two requests for the same artist
  serialise on that lock; the second one sees the first one's row and fails
  with Conflict.
- The commit-time test is the strict half-open overlap:
      existing.start < new_end AND new_start < existing.end
  against blocking appointments and blockouts.
- A Conflict leaves nothing behind: the atomic block rolls back.
"""

import logging
from datetime import timedelta

from django.db import transaction
from django.utils import timezone

from staff.models import Blockout

from ..exceptions import Conflict, NotFound, ValidationFailed
from ..models import Appointment, Member
from . import directory

logger = logging.getLogger(__name__)

SLOT_TAKEN = "The requested time slot is no longer available."


class BookingManager:
    def _lock_artist(self, artist_id):
        # Single writer per artist for the check-then-insert sequence.
        return Member.objects.select_for_update().get(pk=artist_id)

    def _has_conflict(self, artist_id, start_time, end_time, exclude_appointment_id=None) -> bool:
        appointments = Appointment.objects.filter(
            artist_id=artist_id,
            status__in=Appointment.BLOCKING_STATUSES,
            start_time__lt=end_time,
            end_time__gt=start_time,
        )
        if exclude_appointment_id is not None:
            appointments = appointments.exclude(pk=exclude_appointment_id)
        if appointments.exists():
            return True
        return Blockout.objects.filter(
            artist_id=artist_id,
            start_time__lt=end_time,
            end_time__gt=start_time,
        ).exists()

    def create_booking(self, organization_id, branch_id, artist_id, customer_id, service_id,
                       start_time, notes=""):
        """
        Create an appointment if the requested interval is still free.

        Args:
            organization_id / branch_id: tenant scope, already authorised
            artist_id: Member pk with role ARTIST
            customer_id: Member pk
            service_id: Service pk (gives duration and price)
            start_time: aware datetime
            notes: optional string

        Raises:
            NotFound: service, artist or customer missing from the organization
            ValidationFailed: inactive service
            Conflict: the interval overlaps a blocking appointment or blockout
        """
        service = directory.get_service(service_id, organization_id)
        if not service.active:
            raise ValidationFailed("This service is not currently available.")
        artist = directory.get_artist(artist_id, organization_id)
        customer = directory.get_member(customer_id, organization_id)

        end_time = start_time + timedelta(minutes=service.duration_minutes)

        with transaction.atomic():
            self._lock_artist(artist.pk)
            if self._has_conflict(artist.pk, start_time, end_time):
                logger.warning(
                    "Booking rejected: artist %s busy for %s..%s",
                    artist.pk, start_time.isoformat(), end_time.isoformat(),
                )
                raise Conflict(SLOT_TAKEN)

            appointment = Appointment.objects.create(
                organization_id=organization_id,
                branch_id=branch_id,
                artist=artist,
                customer=customer,
                service=service,
                start_time=start_time,
                end_time=end_time,
                status=Appointment.CONFIRMED,
                price=service.base_price,
                notes=notes or "",
            )

        logger.info(
            "Appointment %s booked: artist %s at %s", appointment.pk, artist.pk, start_time.isoformat()
        )
        return appointment

    # -------------------- reads --------------------
    def get_appointment(self, appointment_id, organization_id, branch_id=None) -> Appointment:
        qs = Appointment.objects.select_related("artist", "customer", "service").filter(
            pk=appointment_id, organization_id=organization_id
        )
        if branch_id is not None:
            qs = qs.filter(branch_id=branch_id)
        appointment = qs.first()
        if appointment is None:
            raise NotFound("Appointment not found.")
        return appointment

    def list_appointments(self, organization_id, branch_id=None):
        """
        Tenant-scoped appointments, ordered by start. branch_id=None means every
        branch of the organization. Artist and date-range narrowing is applied
        on top by booking.filters.AppointmentFilter.
        """
        qs = Appointment.objects.select_related("artist", "customer", "service").filter(
            organization_id=organization_id
        )
        if branch_id:
            qs = qs.filter(branch_id=branch_id)
        return qs.order_by("start_time")

    def list_for_customer(self, customer_id, organization_id, branch_id=None):
        """A customer's appointments, newest first."""
        qs = Appointment.objects.select_related("artist", "customer", "service").filter(
            customer_id=customer_id, organization_id=organization_id
        )
        if branch_id:
            qs = qs.filter(branch_id=branch_id)
        return qs.order_by("-start_time")

    # -------------------- updates --------------------
    def update_appointment(self, appointment_id, organization_id, branch_id, changes):
        """
        Partial update of status, notes and start_time.

        - status CANCELLED stamps cancellation_time.
        - Moving the appointment, or bringing a cancelled / no-show one back to
          a blocking status, re-runs the locked conflict check (ignoring the
          appointment itself) and recomputes end_time from the service.
        """
        unknown = set(changes) - {"status", "notes", "start_time"}
        if unknown:
            raise ValidationFailed(f"Fields cannot be updated: {', '.join(sorted(unknown))}.")

        new_status = changes.get("status")
        if new_status is not None and new_status not in dict(Appointment.STATUS_CHOICES):
            raise ValidationFailed(f"Unknown status '{new_status}'.")

        with transaction.atomic():
            appointment = self.get_appointment(appointment_id, organization_id, branch_id)
            was_blocking = appointment.is_blocking
            old_start = appointment.start_time

            if "notes" in changes:
                appointment.notes = changes["notes"] or ""
            if new_status is not None and new_status != appointment.status:
                appointment.status = new_status
                if new_status == Appointment.CANCELLED:
                    appointment.cancellation_time = timezone.now()
            if changes.get("start_time") is not None:
                appointment.start_time = changes["start_time"]
                appointment.end_time = appointment.start_time + timedelta(
                    minutes=appointment.service.duration_minutes
                )

            moved = appointment.start_time != old_start
            if appointment.is_blocking and (moved or not was_blocking):
                self._lock_artist(appointment.artist_id)
                if self._has_conflict(
                    appointment.artist_id, appointment.start_time, appointment.end_time,
                    exclude_appointment_id=appointment.pk,
                ):
                    logger.warning("Update of appointment %s rejected: slot taken", appointment.pk)
                    raise Conflict(SLOT_TAKEN)

            appointment.save()

        logger.info("Appointment %s updated (%s)", appointment.pk, ", ".join(sorted(changes)))
        return appointment
