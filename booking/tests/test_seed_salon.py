# booking/tests/test_seed_salon.py

from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from booking.models import Member, Service
from staff.models import WeeklyAvailabilitySlot


class SeedSalonTests(TestCase):
    def test_seed_is_repeatable(self):
        out = StringIO()
        call_command("seed_salon", "--org", "Glow Studio", stdout=out)
        self.assertIn("Services created=7", out.getvalue())

        Service.objects.filter(name="Cut & Style").update(active=False)
        out = StringIO()
        call_command("seed_salon", "--org", "Glow Studio", stdout=out)
        self.assertIn("created=0, updated=1", out.getvalue())

        self.assertEqual(Member.objects.filter(role=Member.ARTIST).count(), 2)
        self.assertEqual(WeeklyAvailabilitySlot.objects.count(), 10)
