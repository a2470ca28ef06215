import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("booking", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="WeeklyAvailabilitySlot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("day_of_week", models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(7)])),
                ("start_minute", models.PositiveSmallIntegerField(validators=[django.core.validators.MaxValueValidator(1439)])),
                ("end_minute", models.PositiveSmallIntegerField(validators=[django.core.validators.MaxValueValidator(1439)])),
                ("artist", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="weekly_availability", to="booking.member")),
                ("organization", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="+", to="booking.organization")),
            ],
            options={
                "ordering": ["artist_id", "day_of_week", "id"],
            },
        ),
        migrations.CreateModel(
            name="Blockout",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("start_time", models.DateTimeField()),
                ("end_time", models.DateTimeField()),
                ("reason", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("artist", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="blockouts", to="booking.member")),
                ("organization", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="+", to="booking.organization")),
            ],
            options={
                "ordering": ["artist_id", "start_time"],
                "constraints": [models.CheckConstraint(condition=models.Q(("start_time__lt", models.F("end_time"))), name="blockout_start_before_end")],
            },
        ),
    ]
