"""Check-in admin configuration."""
from django.contrib import admin

from .models import CoachingWin, SurveySubmission


@admin.register(SurveySubmission)
class SurveySubmissionAdmin(admin.ModelAdmin):
    """Read-only: submissions are never edited after they are stored."""

    list_display = ("email", "survey_type", "outcomes", "match_rating", "nps", "submitted_at")
    list_filter = ("survey_type", "open_to_followup")
    search_fields = ("email", "coach_name", "outcomes")
    raw_id_fields = ("session",)
    readonly_fields = (
        "email", "survey_type", "session", "coach_name", "outcomes",
        "feedback_text", "program_outcomes_text", "experience_rating", "match_rating", "nps",
        "next_session_booked", "not_booked_reasons", "open_to_followup",
        "open_to_testimonial", "first_name", "last_name", "account_name",
        "program_title", "submitted_at",
    )
    exclude = ("_feedback_encrypted", "_program_outcomes_encrypted")

    @admin.display(description="Feedback")
    def feedback_text(self, obj):
        return obj.feedback

    @admin.display(description="Program outcomes")
    def program_outcomes_text(self, obj):
        return obj.program_outcomes

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(CoachingWin)
class CoachingWinAdmin(admin.ModelAdmin):
    list_display = ("participant", "session_number", "source", "is_private", "created_at")
    list_filter = ("source", "is_private")
    search_fields = ("email",)
    raw_id_fields = ("participant",)
    exclude = ("_text_encrypted",)
