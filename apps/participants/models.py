"""Participants and their coaching sessions.

Both tables are filled by the Salesforce sync job; this service only reads
them.
"""
from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class Participant(models.Model):
    """An employee enrolled in a coaching program."""

    STATUS_CHOICES = [
        ("active", _("Active")),
        ("paused", _("Paused")),
        ("completed", _("Completed")),
        ("withdrawn", _("Withdrawn")),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="participant",
    )
    email = models.EmailField(unique=True)
    first_name = models.CharField(max_length=150, blank=True, default="")
    last_name = models.CharField(max_length=150, blank=True, default="")
    company_name = models.CharField(max_length=255, blank=True, default="")
    program = models.CharField(
        max_length=255, blank=True, default="",
        help_text=_("Raw program reference from the sync: uuid, name, or type label."),
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="active")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        app_label = "participants"
        db_table = "participants"
        ordering = ["email"]

    def __str__(self):
        name = f"{self.first_name} {self.last_name}".strip()
        return name or self.email

    def save(self, *args, **kwargs):
        self.email = (self.email or "").strip().lower()
        super().save(*args, **kwargs)


class CoachingSession(models.Model):
    """One coaching appointment. ``appointment_number`` is the sequence number."""

    STATUS_COMPLETED = "Completed"
    STATUS_CHOICES = [
        ("Upcoming", _("Upcoming")),
        (STATUS_COMPLETED, _("Completed")),
        ("Cancelled", _("Cancelled")),
        ("No Show", _("No show")),
    ]

    participant = models.ForeignKey(
        Participant, on_delete=models.CASCADE, related_name="sessions",
    )
    appointment_number = models.PositiveIntegerField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="Upcoming")
    session_date = models.DateTimeField()
    coach_name = models.CharField(max_length=255, blank=True, default="")
    external_id = models.CharField(max_length=64, blank=True, default="", db_index=True)

    class Meta:
        app_label = "participants"
        db_table = "coaching_sessions"
        ordering = ["session_date"]

    def __str__(self):
        return f"Session {self.appointment_number}: {self.participant} ({self.status})"
