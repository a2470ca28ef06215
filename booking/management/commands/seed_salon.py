"""
seed_salon.py
-------------
Seeds (creates or updates) a demo organization: one branch, a service
catalog, and artists with a Monday-Friday 09:00-17:00 schedule. Safe to run
repeatedly; rows are upserted by name.

Usage:
    python manage.py seed_salon
    python manage.py seed_salon --org "Glow Studio" --branch "Downtown"
"""

from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from booking.models import Branch, Member, Organization, Service
from staff.services import AvailabilityCalendar


CATALOG = [
    # Hair
    {"name": "Cut & Style",         "description": "Wash, cut and blow-dry", "duration_minutes": 60,  "base_price": Decimal("45.00")},
    {"name": "Fringe Trim",         "description": "Quick fringe tidy-up",   "duration_minutes": 15,  "base_price": Decimal("10.00")},
    {"name": "Full Colour",         "description": "Single process colour",  "duration_minutes": 120, "base_price": Decimal("95.00")},

    # Nails
    {"name": "Gel Manicure",        "description": "Shape, cuticle, gel",    "duration_minutes": 45,  "base_price": Decimal("35.00")},
    {"name": "Spa Pedicure",        "description": "Soak, scrub, polish",    "duration_minutes": 60,  "base_price": Decimal("40.00")},

    # Brows & lashes
    {"name": "Brow Shape",          "description": "Wax and tidy",           "duration_minutes": 30,  "base_price": Decimal("18.00")},
    {"name": "Lash Lift",           "description": "Lift and tint",          "duration_minutes": 60,  "base_price": Decimal("55.00")},
]

ARTISTS = ["Ava Stone", "Noah Reyes"]

WEEKDAYS_9_TO_5 = [{"day_of_week": d, "start_minute": 540, "end_minute": 1020} for d in range(1, 6)]


class Command(BaseCommand):
    help = "Seed or update a demo salon (branch, services, artists and their weekly schedule)."

    def add_arguments(self, parser):
        parser.add_argument("--org", default="Demo Salon")
        parser.add_argument("--branch", default="Main Street")

    @transaction.atomic
    def handle(self, *args, **options):
        org, _ = Organization.objects.get_or_create(name=options["org"])
        branch, _ = Branch.objects.get_or_create(organization=org, name=options["branch"])

        created = 0
        updated = 0
        for item in CATALOG:
            svc, is_created = Service.objects.get_or_create(
                organization=org,
                name=item["name"],
                defaults={**item, "active": True},
            )
            if is_created:
                created += 1
                continue
            changed = [
                field for field in ("description", "duration_minutes", "base_price")
                if getattr(svc, field) != item[field]
            ]
            for field in changed:
                setattr(svc, field, item[field])
            if not svc.active:
                svc.active = True
                changed.append("active")
            if changed:
                svc.save(update_fields=changed)
                updated += 1

        calendar = AvailabilityCalendar()
        for name in ARTISTS:
            artist, _ = Member.objects.get_or_create(
                organization=org,
                name=name,
                defaults={"branch": branch, "role": Member.ARTIST},
            )
            calendar.set_weekly_schedule(artist, WEEKDAYS_9_TO_5)

        self.stdout.write(self.style.SUCCESS(
            f"Seed complete for '{org.name}'. Services created={created}, updated={updated}; "
            f"artists={len(ARTISTS)}"
        ))
