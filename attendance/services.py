"""
services.py
-----------
Attendance state machine, per employee:

    NONE --clock_in--> CLOCKED_IN --clock_out / auto clock-out--> CLOCKED_OUT

Breaks can be opened and closed only while the session is CLOCKED_IN, one at
a time.

Time math:
- Lateness: work start is today's date (UTC) at settings.work_start_time.
  An employee is late once the grace period has passed, but late_minutes are
  counted from work start, not from the end of the grace period.
- Worked hours: (session minutes - closed break minutes) / 60, where session
  minutes are whole minutes. Overtime is what exceeds overtime_threshold.

Stale sessions:
- reconcile_stale_sessions() closes CLOCKED_IN sessions older than
  settings.auto_clock_out_hours. It runs inline from get_current_attendance();
  there is no scheduler.
"""

import logging
from datetime import timedelta

from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from booking.exceptions import Conflict, Forbidden, NotFound, ValidationFailed
from booking.services import directory
from booking.services.slot_utils import at_minute, minutes_between

from .models import Attendance, AttendanceSettings, Break

logger = logging.getLogger(__name__)

AUTO_CLOCK_OUT_NOTE = "\n[Auto clocked out due to time limit]"

SETTINGS_FIELDS = (
    "work_start_time",
    "work_end_time",
    "grace_period_minutes",
    "overtime_threshold",
    "require_location",
    "auto_clock_out_hours",
)


def closed_break_minutes(attendance) -> int:
    return sum(b.duration for b in attendance.breaks.all() if b.duration)


class AttendanceService:
    # -------------------- settings --------------------
    def get_settings(self, organization_id) -> AttendanceSettings:
        settings, created = AttendanceSettings.objects.get_or_create(organization_id=organization_id)
        if created:
            logger.info("Created default attendance settings for organization %s", organization_id)
        return settings

    def update_settings(self, organization_id, changes) -> AttendanceSettings:
        unknown = set(changes) - set(SETTINGS_FIELDS)
        if unknown:
            raise ValidationFailed(f"Unknown settings: {', '.join(sorted(unknown))}.")
        settings = self.get_settings(organization_id)
        for field, value in changes.items():
            setattr(settings, field, value)
        settings.save()
        return settings

    # -------------------- clock in / out --------------------
    def clock_in(self, employee_id, organization_id, location=None, notes=None) -> Attendance:
        """
        Open a session for `employee_id`.

        Raises:
            Conflict: the employee already has an open session
            NotFound: the employee is not a member of the organization
            Forbidden: the employee's role is not a staff role
            ValidationFailed: location required by settings but blank
        """
        if Attendance.objects.filter(employee_id=employee_id, status=Attendance.CLOCKED_IN).exists():
            raise Conflict("You are already clocked in.")

        settings = self.get_settings(organization_id)
        employee = directory.get_member(employee_id, organization_id)
        if not employee.is_staff_role:
            raise Forbidden("Only staff members can clock in.")
        if settings.require_location and not (location or "").strip():
            raise ValidationFailed("Location is required for clocking in.")

        now = timezone.now()
        work_start = at_minute(now, settings.work_start_time)
        is_late = now > work_start + timedelta(minutes=settings.grace_period_minutes)
        late_minutes = minutes_between(now, work_start) if is_late else 0

        try:
            with transaction.atomic():
                attendance = Attendance.objects.create(
                    organization_id=organization_id,
                    branch_id=employee.branch_id,
                    employee=employee,
                    clock_in_time=now,
                    location=location,
                    notes=notes,
                    is_late=is_late,
                    late_minutes=late_minutes,
                    status=Attendance.CLOCKED_IN,
                )
                directory.mark_clocked_in(employee)
        except IntegrityError:
            # Lost a race with a concurrent clock-in for the same employee.
            raise Conflict("You are already clocked in.")

        logger.info(
            "Employee %s clocked in (late=%s, %d min)", employee.pk, is_late, late_minutes
        )
        return attendance

    def _close(self, attendance, settings, clock_out_time, note=None):
        total_minutes = minutes_between(clock_out_time, attendance.clock_in_time)
        work_hours = (total_minutes - closed_break_minutes(attendance)) / 60

        attendance.clock_out_time = clock_out_time
        attendance.total_hours = work_hours
        attendance.overtime_hours = max(0.0, work_hours - settings.overtime_threshold)
        attendance.status = Attendance.CLOCKED_OUT
        if note:
            attendance.notes = (attendance.notes or "") + note
        attendance.save()
        directory.mark_clocked_out(attendance.employee_id)
        return attendance

    def clock_out(self, employee_id, organization_id) -> Attendance:
        with transaction.atomic():
            attendance = (
                Attendance.objects.select_for_update()
                .filter(employee_id=employee_id, organization_id=organization_id,
                        status=Attendance.CLOCKED_IN)
                .first()
            )
            if attendance is None:
                raise NotFound("No active attendance found.")
            settings = self.get_settings(organization_id)
            self._close(attendance, settings, timezone.now())

        logger.info(
            "Employee %s clocked out: %.2f h worked, %.2f h overtime",
            employee_id, attendance.total_hours, attendance.overtime_hours,
        )
        return attendance

    # -------------------- stale sessions --------------------
    def reconcile_stale_sessions(self, employee_id, organization_id):
        """
        Close every open session of the employee that is older than
        settings.auto_clock_out_hours. Safe to call repeatedly; returns the
        sessions it closed.
        """
        settings = self.get_settings(organization_id)
        now = timezone.now()
        threshold = now - timedelta(hours=settings.auto_clock_out_hours)

        stale = Attendance.objects.filter(
            employee_id=employee_id,
            organization_id=organization_id,
            status=Attendance.CLOCKED_IN,
            clock_in_time__lt=threshold,
        )
        closed = []
        for attendance in stale:
            with transaction.atomic():
                self._close(attendance, settings, now, note=AUTO_CLOCK_OUT_NOTE)
            logger.info("Auto clocked out attendance %s (employee %s)", attendance.pk, employee_id)
            closed.append(attendance)
        return closed

    def get_current_attendance(self, employee_id, organization_id):
        """Open session of the employee, or None. Stale sessions are closed first."""
        try:
            self.reconcile_stale_sessions(employee_id, organization_id)
        except DatabaseError:
            logger.exception(
                "Auto clock-out failed for employee %s; returning current state", employee_id
            )

        return (
            Attendance.objects.select_related("employee", "branch")
            .filter(employee_id=employee_id, organization_id=organization_id,
                    status=Attendance.CLOCKED_IN)
            .first()
        )

    # -------------------- breaks --------------------
    def start_break(self, attendance_id, employee_id, break_type) -> Break:
        if break_type not in dict(Break.TYPE_CHOICES):
            raise ValidationFailed(f"Unknown break type '{break_type}'.")

        attendance = Attendance.objects.filter(
            pk=attendance_id, employee_id=employee_id, status=Attendance.CLOCKED_IN
        ).first()
        if attendance is None:
            raise NotFound("Active attendance not found.")
        if attendance.breaks.filter(end_time__isnull=True).exists():
            raise Conflict("You already have an active break.")

        try:
            with transaction.atomic():
                brk = Break.objects.create(
                    attendance=attendance, type=break_type, start_time=timezone.now()
                )
        except IntegrityError:
            raise Conflict("You already have an active break.")
        return brk

    def end_break(self, attendance_id, employee_id) -> Break:
        brk = Break.objects.filter(
            attendance_id=attendance_id,
            end_time__isnull=True,
            attendance__employee_id=employee_id,
            attendance__status=Attendance.CLOCKED_IN,
        ).first()
        if brk is None:
            raise NotFound("No active break found.")

        brk.end_time = timezone.now()
        brk.duration = minutes_between(brk.end_time, brk.start_time)
        brk.save(update_fields=["end_time", "duration"])
        return brk

    # -------------------- records --------------------
    def list_attendance(self, organization_id):
        """Organization-scoped sessions, newest first; narrowed by attendance.filters."""
        return (
            Attendance.objects.select_related("employee", "branch")
            .prefetch_related("breaks")
            .filter(organization_id=organization_id)
            .order_by("-clock_in_time")
        )

    def get_attendance(self, attendance_id, organization_id) -> Attendance:
        attendance = (
            Attendance.objects.select_related("employee", "branch")
            .prefetch_related("breaks")
            .filter(pk=attendance_id, organization_id=organization_id)
            .first()
        )
        if attendance is None:
            raise NotFound("Attendance not found.")
        return attendance

    def update_attendance(self, attendance_id, organization_id, changes) -> Attendance:
        """
        Manual correction by a manager. A new clock_out_time recomputes
        total_hours (whole hours of the session, minus break minutes) and
        overtime. Reopening a closed session clears its clock-out figures.
        """
        attendance = self.get_attendance(attendance_id, organization_id)
        reopening = (
            changes.get("status") == Attendance.CLOCKED_IN
            and attendance.status != Attendance.CLOCKED_IN
        )
        clock_out_time = changes.get("clock_out_time")
        if reopening and clock_out_time is not None:
            raise ValidationFailed("A reopened session cannot have a clock-out time.")

        for field in ("notes", "status", "total_hours"):
            if field in changes:
                setattr(attendance, field, changes[field])

        if reopening:
            attendance.clock_out_time = None
            attendance.total_hours = None
            attendance.overtime_hours = 0

        if clock_out_time is not None:
            if clock_out_time < attendance.clock_in_time:
                raise ValidationFailed("Clock-out time cannot be before clock-in time.")
            attendance.clock_out_time = clock_out_time
            whole_hours = int((clock_out_time - attendance.clock_in_time).total_seconds() / 3600)
            total_hours = (whole_hours * 60 - closed_break_minutes(attendance)) / 60
            settings = self.get_settings(organization_id)
            attendance.total_hours = total_hours
            attendance.overtime_hours = max(0.0, total_hours - settings.overtime_threshold)

        try:
            with transaction.atomic():
                attendance.save()
        except IntegrityError:
            raise Conflict("The employee already has an open session.")
        if attendance.status == Attendance.CLOCKED_IN:
            directory.mark_clocked_in(attendance.employee)
        else:
            directory.mark_clocked_out(attendance.employee_id)
        return attendance

    def delete_attendance(self, attendance_id, organization_id) -> None:
        attendance = self.get_attendance(attendance_id, organization_id)
        attendance.delete()
        logger.info("Attendance %s deleted", attendance_id)
