"""Read-only access to a participant's completed coaching sessions.

Two sources share one interface: ``SessionDirectory`` queries the
coaching_sessions table, ``LoadedSessionDirectory`` wraps rows a caller has
already loaded (dashboard views fetch sessions anyway). Sequence numbers
from loaded rows may arrive as strings, so both sources hand back
``SessionRecord`` values with an int (or None) sequence number.
"""
from collections import namedtuple
from datetime import date, datetime, time

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from .models import CoachingSession

SessionRecord = namedtuple("SessionRecord", ["id", "sequence_number", "session_date", "coach_name"])


def coerce_sequence_number(value):
    """Return an int sequence number, or None if the value is not one.

    Handles ints, integral floats and numeric strings ("6", " 6 ", "6.0").
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    text = str(value).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return int(number) if number.is_integer() else None


def _as_datetime(value):
    """Normalise a date, datetime or ISO string to an aware datetime (or None)."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        parsed = parse_datetime(value)
        if parsed is None:
            parsed_date = parse_date(value)
            if parsed_date is None:
                return None
            parsed = datetime.combine(parsed_date, time.min)
        value = parsed
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if timezone.is_naive(value):
        value = timezone.make_aware(value, timezone.get_default_timezone())
    return value


def _row_value(row, key):
    if isinstance(row, dict):
        return row.get(key)
    return getattr(row, key, None)


class SessionDirectory:
    """Completed sessions read from the database."""

    def _completed(self, participant):
        return CoachingSession.objects.filter(
            participant=participant,
            status__iexact=CoachingSession.STATUS_COMPLETED,
        )

    @staticmethod
    def _record(session):
        return SessionRecord(
            id=session.pk,
            sequence_number=coerce_sequence_number(session.appointment_number),
            session_date=session.session_date,
            coach_name=session.coach_name,
        )

    def completed_count(self, participant):
        return self._completed(participant).count()

    def completed_sessions(self, participant, sequence_numbers=None):
        """Completed sessions, oldest first, optionally limited to some sequence numbers."""
        sessions = self._completed(participant)
        if sequence_numbers is not None:
            sessions = sessions.filter(appointment_number__in=list(sequence_numbers))
        return [
            self._record(s)
            for s in sessions.order_by("session_date", "appointment_number", "pk")
        ]

    def latest_completed(self, participant):
        session = self._completed(participant).order_by("-session_date", "-pk").first()
        return self._record(session) if session else None

    def get_session(self, participant, session_id):
        """Any session (completed or not) belonging to the participant, or None."""
        session = CoachingSession.objects.filter(
            participant=participant, pk=session_id,
        ).first()
        return self._record(session) if session else None


class LoadedSessionDirectory:
    """The SessionDirectory interface over rows a caller has already loaded.

    Rows may be dicts or objects with ``id``, ``appointment_number``,
    ``session_date``, ``coach_name`` and ``status``. Rows without a usable
    date sort last.
    """

    def __init__(self, rows):
        self._completed = []
        for row in rows or []:
            status = str(_row_value(row, "status") or "")
            if status.lower() != CoachingSession.STATUS_COMPLETED.lower():
                continue
            self._completed.append(SessionRecord(
                id=_row_value(row, "id"),
                sequence_number=coerce_sequence_number(_row_value(row, "appointment_number")),
                session_date=_as_datetime(_row_value(row, "session_date")),
                coach_name=_row_value(row, "coach_name") or "",
            ))
        self._completed.sort(key=self._sort_key)

    @staticmethod
    def _sort_key(record):
        return (
            record.session_date is None,
            record.session_date or timezone.now(),
            record.sequence_number if record.sequence_number is not None else 0,
        )

    def completed_count(self, participant):
        return len(self._completed)

    def completed_sessions(self, participant, sequence_numbers=None):
        if sequence_numbers is None:
            return list(self._completed)
        wanted = set(sequence_numbers)
        return [r for r in self._completed if r.sequence_number in wanted]

    def latest_completed(self, participant):
        dated = [r for r in self._completed if r.session_date is not None]
        if dated:
            return dated[-1]
        return self._completed[-1] if self._completed else None

    def get_session(self, participant, session_id):
        for record in self._completed:
            if str(record.id) == str(session_id):
                return record
        return None
