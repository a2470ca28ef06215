# booking/tests/helpers.py
#
# Shared fixtures for the booking, staff, attendance and reports tests.
# 2035-01-01 is a Monday; tests use far-future dates so "now" never gets in
# the way of slot searches or future-only checks.

from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

from django.contrib.auth.models import User

from booking.models import Branch, Member, Organization, Service

MONDAY = datetime(2035, 1, 1, tzinfo=dt_timezone.utc)


def utc(*args):
    return datetime(*args, tzinfo=dt_timezone.utc)


class SalonFixture:
    """One organization with a branch, an artist, a customer and a service."""

    def __init__(self, name="Glow Studio"):
        self.org = Organization.objects.create(name=name)
        self.branch = Branch.objects.create(organization=self.org, name="Downtown")
        self.artist = self.member("Ava Artist", Member.ARTIST)
        self.customer = self.member("Cara Customer", Member.CUSTOMER)
        self.service = Service.objects.create(
            organization=self.org,
            name="Cut & Style",
            duration_minutes=60,
            base_price=Decimal("45.00"),
        )

    def member(self, name, role, username=None):
        user = None
        if username:
            user = User.objects.create_user(username=username, password="pass12345")
        return Member.objects.create(
            user=user,
            organization=self.org,
            branch=self.branch,
            name=name,
            email=f"{name.split()[0].lower()}@example.com",
            role=role,
        )

    def service_of(self, minutes, name=None, **extra):
        return Service.objects.create(
            organization=self.org,
            name=name or f"{minutes} min service",
            duration_minutes=minutes,
            base_price=Decimal("30.00"),
            **extra,
        )
