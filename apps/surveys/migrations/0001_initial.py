from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("participants", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="SurveySubmission",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("email", models.EmailField(db_index=True, max_length=254)),
                ("survey_type", models.CharField(choices=[("first_session", "First session"), ("feedback", "Feedback"), ("touchpoint", "Touchpoint"), ("end_of_program", "End of program"), ("grow_end", "End of program (GROW)")], max_length=20)),
                ("coach_name", models.CharField(blank=True, default="", max_length=255)),
                ("outcomes", models.TextField(blank=True, default="", help_text="Plain text. Always starts with the 'Session N' token.")),
                ("_feedback_encrypted", models.BinaryField(blank=True, default=b"")),
                ("experience_rating", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("match_rating", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("nps", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("next_session_booked", models.BooleanField(blank=True, null=True)),
                ("not_booked_reasons", models.JSONField(blank=True, null=True)),
                ("open_to_followup", models.BooleanField(blank=True, null=True)),
                ("open_to_testimonial", models.BooleanField(default=False)),
                ("first_name", models.CharField(blank=True, default="", max_length=150)),
                ("last_name", models.CharField(blank=True, default="", max_length=150)),
                ("account_name", models.CharField(blank=True, default="", max_length=255)),
                ("program_title", models.CharField(blank=True, default="", max_length=255)),
                ("submitted_at", models.DateTimeField(auto_now_add=True)),
                ("session", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="survey_submissions", to="participants.coachingsession")),
            ],
            options={
                "db_table": "survey_submissions",
                "ordering": ["-submitted_at"],
            },
        ),
        migrations.CreateModel(
            name="CoachingWin",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("_text_encrypted", models.BinaryField(blank=True, default=b"")),
                ("session_number", models.PositiveIntegerField(blank=True, null=True)),
                ("source", models.CharField(choices=[("manual", "Added by participant"), ("check_in_survey", "Check-in survey")], default="manual", max_length=20)),
                ("is_private", models.BooleanField(default=False, help_text="Private wins are left out of anonymised company reporting.")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("participant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="wins", to="participants.participant")),
            ],
            options={
                "db_table": "coaching_wins",
                "ordering": ["-created_at"],
            },
        ),
    ]
