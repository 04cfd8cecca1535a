"""Check-in survey submissions and coaching wins.

Submissions are write-once records. There is no foreign key from older
submissions to the session they were about; the only correlation is the
"Session N" token in ``outcomes``, so new rows carry both the token and a
session foreign key.
"""
from django.db import models
from django.utils.translation import gettext_lazy as _

from coachboard.encryption import encrypted_property

END_OF_PROGRAM_TYPES = ("end_of_program", "grow_end")


class SubmissionImmutableError(Exception):
    """Raised when code tries to update a stored survey submission."""


class SurveySubmission(models.Model):
    """One completed check-in or end-of-program survey."""

    SURVEY_TYPE_CHOICES = [
        ("first_session", _("First session")),
        ("feedback", _("Feedback")),
        ("touchpoint", _("Touchpoint")),
        ("end_of_program", _("End of program")),
        ("grow_end", _("End of program (GROW)")),
    ]

    email = models.EmailField(db_index=True)
    survey_type = models.CharField(max_length=20, choices=SURVEY_TYPE_CHOICES)
    session = models.ForeignKey(
        "participants.CoachingSession",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="survey_submissions",
    )
    coach_name = models.CharField(max_length=255, blank=True, default="")
    outcomes = models.TextField(
        blank=True, default="",
        help_text=_("Plain text. Always starts with the 'Session N' token."),
    )
    _feedback_encrypted = models.BinaryField(default=b"", blank=True)
    _program_outcomes_encrypted = models.BinaryField(default=b"", blank=True)
    experience_rating = models.PositiveSmallIntegerField(null=True, blank=True)
    match_rating = models.PositiveSmallIntegerField(null=True, blank=True)
    nps = models.PositiveSmallIntegerField(null=True, blank=True)
    next_session_booked = models.BooleanField(null=True, blank=True)
    not_booked_reasons = models.JSONField(null=True, blank=True)
    open_to_followup = models.BooleanField(null=True, blank=True)
    open_to_testimonial = models.BooleanField(default=False)
    first_name = models.CharField(max_length=150, blank=True, default="")
    last_name = models.CharField(max_length=150, blank=True, default="")
    account_name = models.CharField(max_length=255, blank=True, default="")
    program_title = models.CharField(max_length=255, blank=True, default="")
    submitted_at = models.DateTimeField(auto_now_add=True)

    feedback = encrypted_property("_feedback_encrypted")
    program_outcomes = encrypted_property("_program_outcomes_encrypted")

    class Meta:
        app_label = "surveys"
        db_table = "survey_submissions"
        ordering = ["-submitted_at"]

    def __str__(self):
        return f"{self.get_survey_type_display()}: {self.email}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise SubmissionImmutableError("Survey submissions cannot be changed once stored.")
        super().save(*args, **kwargs)


class CoachingWin(models.Model):
    """A short success note, kept apart from survey submissions."""

    SOURCE_MANUAL = "manual"
    SOURCE_CHECKIN = "check_in_survey"
    SOURCE_CHOICES = [
        (SOURCE_MANUAL, _("Added by participant")),
        (SOURCE_CHECKIN, _("Check-in survey")),
    ]

    participant = models.ForeignKey(
        "participants.Participant",
        on_delete=models.CASCADE,
        related_name="wins",
    )
    email = models.EmailField(blank=True, default="")
    _text_encrypted = models.BinaryField(default=b"", blank=True)
    session_number = models.PositiveIntegerField(null=True, blank=True)
    source = models.CharField(max_length=20, choices=SOURCE_CHOICES, default=SOURCE_MANUAL)
    is_private = models.BooleanField(
        default=False,
        help_text=_("Private wins are left out of anonymised company reporting."),
    )
    created_at = models.DateTimeField(auto_now_add=True)

    text = encrypted_property("_text_encrypted")

    class Meta:
        app_label = "surveys"
        db_table = "coaching_wins"
        ordering = ["-created_at"]

    def __str__(self):
        if self.session_number:
            return f"Win for {self.participant} (session {self.session_number})"
        return f"Win for {self.participant}"
