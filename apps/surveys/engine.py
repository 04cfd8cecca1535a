"""Pending check-in resolution.

Decides which single check-in survey, if any, a participant should be
prompted for right now. Called on:
- Dashboard load (once per page view)
- Direct feedback links for a specific session
- The show_pending_checkin management command

Strategies are tried in order and the first non-empty answer wins:
1. A precomputed answer from CHECKIN_PENDING_SURVEY_PROVIDER, if configured
2. The end-of-program survey, once the completion threshold is reached
3. The earliest completed milestone session with no stored submission
"""
import logging
from dataclasses import asdict, dataclass
from datetime import datetime

from django.conf import settings
from django.db import DatabaseError
from django.utils.dateparse import parse_datetime
from django.utils.module_loading import import_string

from apps.participants.sessions import (
    LoadedSessionDirectory,
    SessionDirectory,
    coerce_sequence_number,
)
from apps.programs.directory import resolve_program_type
from apps.programs.milestones import GROW, get_schedule

from .store import SubmissionStore

logger = logging.getLogger(__name__)

CHECKIN_FEATURE_KEY = "checkin_surveys"
DEFAULT_COACH_NAME = "Your Coach"
FEATURE_TOGGLE_CACHE_SECONDS = 300


def is_checkin_enabled():
    """Check the check-in feature toggle. A missing toggle means enabled."""
    from django.core.cache import cache

    flags = cache.get("feature_toggles")
    if flags is not None:
        return flags.get(CHECKIN_FEATURE_KEY, True)

    from apps.admin_settings.models import FeatureToggle

    try:
        flags = FeatureToggle.get_all_flags()
    except Exception:
        logger.exception("Could not read the %s feature toggle", CHECKIN_FEATURE_KEY)
        return False
    # FeatureToggle.save() clears this key.
    cache.set("feature_toggles", flags, FEATURE_TOGGLE_CACHE_SECONDS)
    return flags.get(CHECKIN_FEATURE_KEY, True)


@dataclass
class PendingSurvey:
    """The one check-in a participant should be prompted for."""

    session_id: object
    session_number: int
    session_date: datetime
    coach_name: str
    survey_type: str

    @property
    def is_end_of_program(self):
        return self.survey_type in ("end_of_program", "grow_end")

    def to_dict(self):
        data = asdict(self)
        if self.session_date is not None:
            data["session_date"] = self.session_date.isoformat()
        return data

    @classmethod
    def from_dict(cls, data):
        session_date = data.get("session_date")
        if isinstance(session_date, str):
            session_date = parse_datetime(session_date)
        return cls(
            session_id=data.get("session_id"),
            session_number=coerce_sequence_number(data.get("session_number")) or 1,
            session_date=session_date,
            coach_name=data.get("coach_name") or DEFAULT_COACH_NAME,
            survey_type=data.get("survey_type") or "feedback",
        )


def _descriptor(session, survey_type):
    return PendingSurvey(
        session_id=session.id,
        session_number=coerce_sequence_number(session.sequence_number) or 1,
        session_date=session.session_date,
        coach_name=session.coach_name or DEFAULT_COACH_NAME,
        survey_type=survey_type,
    )


def _load_provider():
    path = getattr(settings, "CHECKIN_PENDING_SURVEY_PROVIDER", "")
    if not path:
        return None
    try:
        return import_string(path)
    except ImportError:
        logger.exception("Could not import pending survey provider %r", path)
        return None


class PendingSurveyResolver:
    """Resolve zero or one PendingSurvey for a participant.

    ``sessions`` and ``submissions`` default to the database-backed
    directories; ``provider`` defaults to the configured precomputed
    provider. A provider is any callable taking ``(participant, sessions)``
    and returning a PendingSurvey, an equivalent dict, or None.
    """

    def __init__(self, sessions=None, submissions=None, provider=None):
        self.sessions = sessions or SessionDirectory()
        self.submissions = submissions or SubmissionStore()
        self.provider = provider if provider is not None else _load_provider()
        self.strategies = [
            self._from_precomputed,
            self._end_of_program,
            self._earliest_unresolved_milestone,
        ]

    def resolve(self, participant, loaded_sessions=None):
        """Return the PendingSurvey to prompt for, or None."""
        sessions = self.sessions
        if loaded_sessions is not None:
            sessions = LoadedSessionDirectory(loaded_sessions)

        # Program type lookup can hit the database; only local strategies need it.
        resolved = {}

        def schedule():
            if "schedule" not in resolved:
                resolved["schedule"] = get_schedule(resolve_program_type(participant.program))
            return resolved["schedule"]

        try:
            for strategy in self.strategies:
                pending = strategy(participant, sessions, schedule)
                if pending:
                    return pending
        except DatabaseError:
            logger.exception(
                "Could not resolve pending check-in for participant %s", participant.pk,
            )
        return None

    def _from_precomputed(self, participant, sessions, schedule):
        if self.provider is None:
            return None
        try:
            pending = self.provider(participant, sessions)
        except Exception:
            logger.exception("Pending survey provider failed; computing locally")
            return None
        if isinstance(pending, dict):
            pending = PendingSurvey.from_dict(pending)
        return pending or None

    def _end_of_program(self, participant, sessions, schedule):
        schedule = schedule()
        if not schedule.is_complete(sessions.completed_count(participant)):
            return None
        if self.submissions.has_end_of_program(participant.email):
            return None
        latest = sessions.latest_completed(participant)
        if latest is None:
            return None
        survey_type = "grow_end" if schedule.program_type == GROW else "end_of_program"
        return _descriptor(latest, survey_type)

    def _earliest_unresolved_milestone(self, participant, sessions, schedule):
        schedule = schedule()
        candidates = sessions.completed_sessions(
            participant, sequence_numbers=schedule.milestones,
        )
        for session in candidates:
            number = coerce_sequence_number(session.sequence_number)
            if not schedule.is_milestone(number):
                continue
            if self.submissions.is_session_resolved(
                participant.email, number, session_id=session.id,
            ):
                continue
            if schedule.program_type == GROW and number == 1:
                return _descriptor(session, "first_session")
            return _descriptor(session, "feedback")
        return None


def pending_survey_for_session(participant, session_id, sessions=None):
    """Descriptor for a direct feedback link to one of the participant's sessions.

    Returns None if the session does not belong to the participant.
    """
    sessions = sessions or SessionDirectory()
    try:
        session = sessions.get_session(participant, session_id)
    except (DatabaseError, ValueError):
        logger.exception("Could not load session %s for participant %s", session_id, participant.pk)
        return None
    if session is None:
        return None
    number = coerce_sequence_number(session.sequence_number) or 1
    survey_type = "first_session" if number == 1 else "feedback"
    return _descriptor(session, survey_type)
