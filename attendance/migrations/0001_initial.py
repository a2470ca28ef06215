import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("booking", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="AttendanceSettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("work_start_time", models.PositiveSmallIntegerField(default=540)),
                ("work_end_time", models.PositiveSmallIntegerField(default=1020)),
                ("grace_period_minutes", models.PositiveSmallIntegerField(default=15)),
                ("overtime_threshold", models.FloatField(default=8.0, help_text="Hours per session")),
                ("require_location", models.BooleanField(default=False)),
                ("auto_clock_out_hours", models.PositiveSmallIntegerField(default=12)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("organization", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="attendance_settings", to="booking.organization")),
            ],
            options={
                "verbose_name_plural": "attendance settings",
            },
        ),
        migrations.CreateModel(
            name="Attendance",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("clock_in_time", models.DateTimeField(default=django.utils.timezone.now)),
                ("clock_out_time", models.DateTimeField(blank=True, null=True)),
                ("total_hours", models.FloatField(blank=True, null=True)),
                ("overtime_hours", models.FloatField(default=0)),
                ("status", models.CharField(choices=[("CLOCKED_IN", "Clocked in"), ("CLOCKED_OUT", "Clocked out")], default="CLOCKED_IN", max_length=12)),
                ("location", models.CharField(blank=True, max_length=255, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("is_late", models.BooleanField(default=False)),
                ("late_minutes", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("branch", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="attendances", to="booking.branch")),
                ("employee", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="attendances", to="booking.member")),
                ("organization", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="attendances", to="booking.organization")),
            ],
            options={
                "ordering": ["-clock_in_time"],
                "constraints": [models.UniqueConstraint(condition=models.Q(("status", "CLOCKED_IN")), fields=("employee",), name="open_attendance_per_employee")],
            },
        ),
        migrations.CreateModel(
            name="Break",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("start_time", models.DateTimeField(default=django.utils.timezone.now)),
                ("end_time", models.DateTimeField(blank=True, null=True)),
                ("duration", models.PositiveIntegerField(blank=True, help_text="Minutes", null=True)),
                ("type", models.CharField(choices=[("LUNCH", "Lunch"), ("SHORT", "Short break"), ("PERSONAL", "Personal"), ("OTHER", "Other")], default="SHORT", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("attendance", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="breaks", to="attendance.attendance")),
            ],
            options={
                "ordering": ["-start_time"],
                "constraints": [models.UniqueConstraint(condition=models.Q(("end_time__isnull", True)), fields=("attendance",), name="open_break_per_attendance")],
            },
        ),
    ]
