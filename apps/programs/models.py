"""Coaching programs offered to client companies."""
import uuid

from django.db import models
from django.utils.translation import gettext_lazy as _


class Program(models.Model):
    """A contracted coaching program (e.g. "GROW - Cohort 1").

    Participants reference programs by a raw label that may be the program's
    uuid, its name, or a decorated type name; see apps.programs.directory.
    """

    PROGRAM_TYPE_CHOICES = [
        ("GROW", _("GROW")),
        ("SCALE", _("SCALE")),
        ("EXEC", _("EXEC")),
    ]

    uuid = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    name = models.CharField(max_length=255)
    program_type = models.CharField(max_length=10, choices=PROGRAM_TYPE_CHOICES, default="SCALE")
    sessions_per_employee = models.PositiveIntegerField(null=True, blank=True)
    program_end_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        app_label = "programs"
        db_table = "programs"
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.program_type})"
