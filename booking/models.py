# booking/models.py
#
# Purpose:
# - Core domain models for the scheduling system.
#
# Design highlights:
# - Organization / Branch: tenant root and its locations. Every row below is
#   owned by exactly one organization; queries always filter on it.
# - Member: anyone the system knows about inside an organization. Staff and
#   customers share the table and are told apart by role.
#   • user link is optional (walk-in customers have no login).
# - StaffProfile: per-member operational flags (is_clocked_in).
# - Service: duration and base price; "active" flag controls bookability.
# - Appointment:
#   • artist, customer, service, [start_time, end_time)
#   • status is uppercase CONFIRMED / COMPLETED / CANCELLED / NO_SHOW
#   • price is a snapshot of service.base_price at booking time
#   • cancellation_time records when a cancellation occurs
#
# Notes for developers:
# - Double-booking is prevented by BookingManager (row lock on the artist),
#   not by a DB constraint. See booking/services/booking_manager.py.
#

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


# -------------------------
# Tenancy
# -------------------------
class Organization(models.Model):
    name = models.CharField(max_length=200)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name


class Branch(models.Model):
    organization = models.ForeignKey(
        Organization, on_delete=models.CASCADE, related_name="branches"
    )
    name = models.CharField(max_length=200)

    def __str__(self):
        return f"{self.name} ({self.organization.name})"


# -------------------------
# Member (staff or customer)
# -------------------------
class Member(models.Model):
    """
    A person inside an organization.

    Roles:
    - Staff roles may clock in (everything except CUSTOMER).
    - Only ARTIST members have calendars and take appointments.
    """
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    RECEPTIONIST = "RECEPTIONIST"
    CASHIER = "CASHIER"
    ARTIST = "ARTIST"
    CUSTOMER = "CUSTOMER"

    ROLE_CHOICES = [
        (SUPER_ADMIN, "Super admin"),
        (ADMIN, "Admin"),
        (MANAGER, "Manager"),
        (RECEPTIONIST, "Receptionist"),
        (CASHIER, "Cashier"),
        (ARTIST, "Artist"),
        (CUSTOMER, "Customer"),
    ]
    STAFF_ROLES = (SUPER_ADMIN, ADMIN, MANAGER, RECEPTIONIST, CASHIER, ARTIST)

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="member",
        null=True,
        blank=True,
    )
    organization = models.ForeignKey(
        Organization, on_delete=models.CASCADE, related_name="members"
    )
    branch = models.ForeignKey(
        Branch, on_delete=models.SET_NULL, null=True, blank=True, related_name="members"
    )
    name = models.CharField(max_length=200)
    email = models.EmailField(blank=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=CUSTOMER)

    def __str__(self):
        return self.name

    @property
    def is_staff_role(self) -> bool:
        return self.role in self.STAFF_ROLES


class StaffProfile(models.Model):
    member = models.OneToOneField(
        Member, on_delete=models.CASCADE, related_name="staff_profile"
    )
    is_clocked_in = models.BooleanField(default=False)

    def __str__(self):
        return f"Profile of {self.member.name}"


# -------------------------
# Service catalog item
# -------------------------
class Service(models.Model):
    """
    A service offered by the salon.

    Rules:
    - base_price must be > 0
    - duration_minutes must be > 0
    - active controls visibility and bookability
    """
    organization = models.ForeignKey(
        Organization, on_delete=models.CASCADE, related_name="services"
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    duration_minutes = models.PositiveIntegerField(
        validators=[MinValueValidator(1)]
    )
    base_price = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        validators=[MinValueValidator(0.01)],
    )
    active = models.BooleanField(default=True)

    def __str__(self):
        return f"{self.name} (${self.base_price})"


# -------------------------
# Appointment record
# -------------------------
class Appointment(models.Model):
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"

    STATUS_CHOICES = [
        (CONFIRMED, "Confirmed"),
        (COMPLETED, "Completed"),
        (CANCELLED, "Cancelled"),
        (NO_SHOW, "No-show"),
    ]
    # Statuses that occupy the artist's calendar.
    BLOCKING_STATUSES = (CONFIRMED, COMPLETED)

    organization = models.ForeignKey(
        Organization, on_delete=models.CASCADE, related_name="appointments"
    )
    branch = models.ForeignKey(
        Branch, on_delete=models.CASCADE, related_name="appointments"
    )
    artist = models.ForeignKey(
        Member, on_delete=models.CASCADE, related_name="artist_appointments"
    )
    customer = models.ForeignKey(
        Member, on_delete=models.CASCADE, related_name="customer_appointments"
    )
    service = models.ForeignKey(Service, on_delete=models.PROTECT)
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default=CONFIRMED,
        help_text="Appointment lifecycle status",
    )
    price = models.DecimalField(max_digits=8, decimal_places=2)
    notes = models.TextField(blank=True)
    cancellation_time = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the appointment was cancelled (if applicable).",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["start_time"]
        indexes = [
            models.Index(fields=["artist", "start_time", "end_time"], name="appointment_artist_time_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(start_time__lt=models.F("end_time")),
                name="appointment_start_before_end",
            ),
        ]

    def __str__(self):
        return f"{self.customer.name} → {self.service.name} on {self.start_time}"

    @property
    def is_blocking(self) -> bool:
        return self.status in self.BLOCKING_STATUSES
