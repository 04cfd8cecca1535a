from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Participant",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("email", models.EmailField(max_length=254, unique=True)),
                ("first_name", models.CharField(blank=True, default="", max_length=150)),
                ("last_name", models.CharField(blank=True, default="", max_length=150)),
                ("company_name", models.CharField(blank=True, default="", max_length=255)),
                ("program", models.CharField(blank=True, default="", help_text="Raw program reference from the sync: uuid, name, or type label.", max_length=255)),
                ("status", models.CharField(choices=[("active", "Active"), ("paused", "Paused"), ("completed", "Completed"), ("withdrawn", "Withdrawn")], default="active", max_length=20)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("user", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="participant", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "participants",
                "ordering": ["email"],
            },
        ),
        migrations.CreateModel(
            name="CoachingSession",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("appointment_number", models.PositiveIntegerField(blank=True, null=True)),
                ("status", models.CharField(choices=[("Upcoming", "Upcoming"), ("Completed", "Completed"), ("Cancelled", "Cancelled"), ("No Show", "No show")], default="Upcoming", max_length=20)),
                ("session_date", models.DateTimeField()),
                ("coach_name", models.CharField(blank=True, default="", max_length=255)),
                ("external_id", models.CharField(blank=True, db_index=True, default="", max_length=64)),
                ("participant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="sessions", to="participants.participant")),
            ],
            options={
                "db_table": "coaching_sessions",
                "ordering": ["session_date"],
            },
        ),
    ]
