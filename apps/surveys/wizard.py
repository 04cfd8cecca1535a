"""The check-in wizard state machine.

The wizard holds the answers and the current step. The step list itself is
derived from the answers on every call (see steps.step_order), so the
progress figure and the available branches always agree with what has
been answered. State round-trips through ``to_dict``/``from_dict`` so views
can keep it in the Django session between requests.
"""
import logging

from django.utils.translation import gettext as _

from .engine import PendingSurvey
from .normalizer import normalize_checkin
from .steps import (
    COMPLETE,
    EXPERIENCE,
    OPTIONAL_STEPS,
    RATING_RANGES,
    SUBMITTING,
    TERMINAL_STEPS,
    is_answered,
    step_fields,
    step_order,
)
from .store import SubmissionError, SubmissionStore, WinStore

logger = logging.getLogger(__name__)

SUBMIT_FAILED_MESSAGE = "We couldn't save your check-in. Please try again."
INCOMPLETE_MESSAGE = "Please answer this question before finishing."


class WizardError(Exception):
    """An answer was given for a step that is not available, or is out of range."""


class CheckpointWizard:

    def __init__(self, pending_survey, participant=None, answers=None,
                 current_step=None, error="", store=None, wins=None):
        self.pending_survey = pending_survey
        self.participant = participant
        self.answers = dict(answers or {})
        self.current_step = current_step or EXPERIENCE
        self.error = error or ""
        self.store = store or SubmissionStore()
        self.wins = wins or WinStore()

    @property
    def steps(self):
        return step_order(self.answers, end_of_program=self.pending_survey.is_end_of_program)

    @property
    def is_terminal(self):
        return self.current_step in TERMINAL_STEPS

    @property
    def is_complete(self):
        return self.current_step == COMPLETE

    def _index(self):
        steps = self.steps
        if self.current_step in steps:
            return steps.index(self.current_step)
        return 0

    def _visible_fields(self):
        fields = set()
        for step in self.steps:
            fields.update(step_fields(step))
        return fields

    def answer(self, field, value):
        """Record (or clear, with None or "") the answer for one field."""
        if self.is_terminal:
            raise WizardError(f"Check-in is already {self.current_step}")
        if field not in self._visible_fields():
            raise WizardError(f"{field!r} is not a step in this check-in")
        if value is None or value == "":
            self.answers.pop(field, None)
            return
        if field in RATING_RANGES:
            low, high = RATING_RANGES[field]
            try:
                value = int(value)
            except (TypeError, ValueError):
                raise WizardError(f"{field!r} must be a number")
            if not low <= value <= high:
                raise WizardError(f"{field!r} must be between {low} and {high}")
        self.answers[field] = value

    def can_proceed(self):
        if self.is_terminal:
            return False
        return is_answered(self.current_step, self.answers)

    def action_label(self):
        """Label for the forward button: Skip, Next or Done."""
        steps = self.steps
        if self.current_step == steps[-1]:
            return _("Done")
        if self.current_step in OPTIONAL_STEPS and not self.answers.get(self.current_step):
            return _("Skip")
        return _("Next")

    def progress(self):
        """Percent complete, recomputed from the current step order."""
        if self.is_terminal:
            return 100
        steps = self.steps
        return round((self._index() + 1) / len(steps) * 100)

    def next(self):
        """Move forward. Returns False when the current step blocks it.

        On the last step this submits the check-in.
        """
        if not self.can_proceed():
            return False
        self.error = ""
        steps = self.steps
        index = self._index()
        if index == len(steps) - 1:
            return self.submit()
        self.current_step = steps[index + 1]
        return True

    def back(self):
        if self.is_terminal:
            return False
        index = self._index()
        if index == 0:
            return False
        self.error = ""
        self.current_step = self.steps[index - 1]
        return True

    def submit(self):
        """Store the check-in. Returns True once it is complete."""
        if self.is_complete:
            return True
        missing = [step for step in self.steps if not is_answered(step, self.answers)]
        if missing:
            self.current_step = missing[0]
            self.error = INCOMPLETE_MESSAGE
            return False

        self.current_step = SUBMITTING
        record = normalize_checkin(self.answers, self.pending_survey, self.participant)
        try:
            self.store.create(record)
        except SubmissionError:
            self.error = SUBMIT_FAILED_MESSAGE
            self.current_step = self.steps[-1]
            return False

        self.current_step = COMPLETE
        self.error = ""
        if record.wins_text:
            self.wins.append_detached(
                self.participant, record.wins_text,
                session_number=record.session_number,
            )
        return True

    def dismiss(self):
        """Abandon the check-in. Nothing is stored."""
        logger.info(
            "Check-in for session %s dismissed at step %s",
            self.pending_survey.session_number, self.current_step,
        )
        self.answers = {}
        self.current_step = EXPERIENCE
        self.error = ""

    def to_dict(self):
        return {
            "pending_survey": self.pending_survey.to_dict(),
            "answers": dict(self.answers),
            "current_step": self.current_step,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data, participant=None, store=None, wins=None):
        return cls(
            PendingSurvey.from_dict(data["pending_survey"]),
            participant=participant,
            answers=data.get("answers"),
            current_step=data.get("current_step"),
            error=data.get("error", ""),
            store=store,
            wins=wins,
        )
