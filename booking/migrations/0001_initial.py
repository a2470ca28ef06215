import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Organization",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name="Branch",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("organization", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="branches", to="booking.organization")),
            ],
        ),
        migrations.CreateModel(
            name="Member",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("role", models.CharField(choices=[("SUPER_ADMIN", "Super admin"), ("ADMIN", "Admin"), ("MANAGER", "Manager"), ("RECEPTIONIST", "Receptionist"), ("CASHIER", "Cashier"), ("ARTIST", "Artist"), ("CUSTOMER", "Customer")], default="CUSTOMER", max_length=20)),
                ("branch", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="members", to="booking.branch")),
                ("organization", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="members", to="booking.organization")),
                ("user", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="member", to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name="StaffProfile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("is_clocked_in", models.BooleanField(default=False)),
                ("member", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="staff_profile", to="booking.member")),
            ],
        ),
        migrations.CreateModel(
            name="Service",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True)),
                ("duration_minutes", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ("base_price", models.DecimalField(decimal_places=2, max_digits=8, validators=[django.core.validators.MinValueValidator(0.01)])),
                ("active", models.BooleanField(default=True)),
                ("organization", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="services", to="booking.organization")),
            ],
        ),
        migrations.CreateModel(
            name="Appointment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("start_time", models.DateTimeField()),
                ("end_time", models.DateTimeField()),
                ("status", models.CharField(choices=[("CONFIRMED", "Confirmed"), ("COMPLETED", "Completed"), ("CANCELLED", "Cancelled"), ("NO_SHOW", "No-show")], default="CONFIRMED", help_text="Appointment lifecycle status", max_length=10)),
                ("price", models.DecimalField(decimal_places=2, max_digits=8)),
                ("notes", models.TextField(blank=True)),
                ("cancellation_time", models.DateTimeField(blank=True, help_text="When the appointment was cancelled (if applicable).", null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("artist", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="artist_appointments", to="booking.member")),
                ("branch", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="appointments", to="booking.branch")),
                ("customer", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="customer_appointments", to="booking.member")),
                ("organization", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="appointments", to="booking.organization")),
                ("service", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to="booking.service")),
            ],
            options={
                "ordering": ["start_time"],
                "indexes": [models.Index(fields=["artist", "start_time", "end_time"], name="appointment_artist_time_idx")],
                "constraints": [models.CheckConstraint(condition=models.Q(("start_time__lt", models.F("end_time"))), name="appointment_start_before_end")],
            },
        ),
    ]
