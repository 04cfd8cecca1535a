"""Persistence for check-in submissions and coaching wins.

Submissions are created once and never updated. Wins are kept separately;
a win written on behalf of a check-in is fire-and-forget, so a failure
there never blocks the check-in itself.
"""
import logging

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import Q

from apps.participants.models import CoachingSession

from .models import END_OF_PROGRAM_TYPES, CoachingWin, SurveySubmission

logger = logging.getLogger(__name__)


class SubmissionError(Exception):
    """The submission could not be stored."""


def _legacy_match_enabled():
    return getattr(settings, "CHECKIN_LEGACY_SESSION_MATCH", True)


def _session_pk(session_id):
    """Local primary key for a session id, or None for ids from elsewhere."""
    if session_id is None or isinstance(session_id, bool):
        return None
    try:
        return int(session_id)
    except (TypeError, ValueError):
        return None


class SubmissionStore:
    """Reads and writes SurveySubmission rows."""

    def create(self, record):
        """Store a SubmissionRecord. Raises SubmissionError on failure."""
        try:
            session_id = self._linked_session_id(record.session_id)
        except DatabaseError as exc:
            logger.exception("Could not look up session %s", record.session_id)
            raise SubmissionError(str(exc)) from exc

        submission = SurveySubmission(
            email=record.email,
            survey_type=record.survey_type,
            session_id=session_id,
            coach_name=record.coach_name or "",
            outcomes=record.outcomes,
            experience_rating=record.experience_rating,
            match_rating=record.match_rating,
            nps=record.nps,
            next_session_booked=record.next_session_booked,
            not_booked_reasons=record.not_booked_reasons,
            open_to_followup=record.open_to_followup,
            open_to_testimonial=record.open_to_testimonial,
            first_name=record.first_name or "",
            last_name=record.last_name or "",
            account_name=record.account_name or "",
            program_title=record.program_title or "",
        )
        submission.feedback = record.feedback
        submission.program_outcomes = record.program_outcomes
        try:
            submission.save()
        except DatabaseError as exc:
            logger.exception(
                "Could not store %s submission for session %s",
                record.survey_type, record.session_number,
            )
            raise SubmissionError(str(exc)) from exc
        logger.info(
            "Stored %s submission for session %s",
            record.survey_type, record.session_number,
        )
        return submission

    @staticmethod
    def _linked_session_id(session_id):
        session_pk = _session_pk(session_id)
        if session_pk is None:
            return None
        return session_pk if CoachingSession.objects.filter(pk=session_pk).exists() else None

    def has_end_of_program(self, email):
        return SurveySubmission.objects.filter(
            email__iexact=email,
            survey_type__in=END_OF_PROGRAM_TYPES,
        ).exists()

    def is_session_resolved(self, email, session_number, session_id=None):
        """Has a submission already been stored for this session?

        New rows are matched on the session foreign key. Older rows only
        carry the "Session N" token in their outcomes text; that match is a
        plain substring test, so "Session 1" also matches "Session 12".
        """
        condition = Q()
        session_pk = _session_pk(session_id)
        if session_pk is not None:
            condition |= Q(session_id=session_pk)
        if _legacy_match_enabled() and session_number is not None:
            condition |= Q(outcomes__icontains=f"Session {session_number}")
        if not condition:
            return False
        return SurveySubmission.objects.filter(email__iexact=email).filter(condition).exists()


class WinStore:
    """Appends CoachingWin rows."""

    def append(self, participant, text, session_number=None,
               source=CoachingWin.SOURCE_MANUAL, is_private=False):
        win = CoachingWin(
            participant=participant,
            email=participant.email,
            session_number=session_number,
            source=source,
            is_private=is_private,
        )
        win.text = text
        win.save()
        return win

    def append_detached(self, participant, text, session_number=None,
                        source=CoachingWin.SOURCE_CHECKIN):
        """Write a win after the current transaction commits.

        Failures are logged and never reach the caller.
        """
        def _write():
            try:
                self.append(participant, text, session_number=session_number, source=source)
            except Exception:
                logger.exception(
                    "Could not store coaching win for participant %s", participant.pk,
                )

        transaction.on_commit(_write)
