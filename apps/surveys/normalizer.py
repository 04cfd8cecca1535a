"""Flatten check-in answers into one submission record.

Only answers on the current step path are used (see steps.visible_answers),
option codes are swapped for their labels, and every answered section adds
one line to the feedback text. Unanswered sections add nothing.
"""
from dataclasses import dataclass, field

from .models import END_OF_PROGRAM_TYPES
from .steps import (
    ANYTHING_ELSE,
    BETTER_MATCH,
    BOOKED_NEXT,
    BOOKING_BLOCKERS,
    COACH_MATCH,
    CONTINUE_CHOICES,
    CONTINUE_WITH_COACH,
    EXPERIENCE,
    NOT_BOOKED_OTHER,
    NOT_BOOKED_REASON,
    NPS,
    OPEN_TO_CHAT,
    PROGRAM_OUTCOMES,
    TESTIMONIAL_CONSENT,
    WHATS_NOT_WORKING,
    YES_NO_CHOICES,
    visible_answers,
)

BLOCKER_LABELS = dict(BOOKING_BLOCKERS)
CONTINUE_LABELS = dict(CONTINUE_CHOICES)
YES_NO_LABELS = dict(YES_NO_CHOICES)


@dataclass
class SubmissionRecord:
    """Everything the submission store writes for one check-in."""

    email: str
    survey_type: str
    session_id: object
    session_number: int
    coach_name: str = ""
    outcomes: str = ""
    feedback: str = ""
    experience_rating: int = None
    match_rating: int = None
    nps: int = None
    next_session_booked: bool = None
    not_booked_reasons: list = None
    open_to_followup: bool = None
    open_to_testimonial: bool = False
    program_outcomes: str = ""
    first_name: str = ""
    last_name: str = ""
    account_name: str = ""
    program_title: str = ""
    wins_text: str = field(default="", repr=False)


def tri_state(value):
    """yes → True, no → False, anything else (unanswered) → None."""
    if value == "yes":
        return True
    if value == "no":
        return False
    return None


def survey_type_for_session(session_number):
    """Submission tag by sequence number: 1 → first_session, 3 → feedback, else touchpoint.

    This is deliberately independent of the program milestone schedules.
    """
    if session_number == 1:
        return "first_session"
    if session_number == 3:
        return "feedback"
    return "touchpoint"


def submission_survey_type(pending_survey):
    """End-of-program check-ins keep their own tag; others use the sequence rule."""
    if pending_survey.survey_type in END_OF_PROGRAM_TYPES:
        return pending_survey.survey_type
    return survey_type_for_session(pending_survey.session_number)


def _text(value):
    return str(value).strip() if value else ""


def not_booked_reasons(answers):
    """Single-element list with the reason label (or "Other: ..."), or None."""
    if answers.get(BOOKED_NEXT) != "no":
        return None
    reason = answers.get(NOT_BOOKED_REASON)
    if not reason:
        return None
    if reason == "other":
        other = _text(answers.get(NOT_BOOKED_OTHER))
        return [f"Other: {other}"] if other else [BLOCKER_LABELS["other"]]
    return [BLOCKER_LABELS.get(reason, reason)]


def feedback_lines(answers):
    """One human-readable line per answered section."""
    lines = []
    if answers.get(EXPERIENCE) is not None:
        lines.append(f"Experience: {answers[EXPERIENCE]}/10")
    if answers.get(COACH_MATCH) is not None:
        lines.append(f"Coach match: {answers[COACH_MATCH]}/10")
    if _text(answers.get(WHATS_NOT_WORKING)):
        lines.append(f"What's not working: {_text(answers[WHATS_NOT_WORKING])}")
    if answers.get(CONTINUE_WITH_COACH) in CONTINUE_LABELS:
        lines.append(f"Continue with coach: {CONTINUE_LABELS[answers[CONTINUE_WITH_COACH]]}")
    if _text(answers.get(BETTER_MATCH)):
        lines.append(f"Better match criteria: {_text(answers[BETTER_MATCH])}")
    if answers.get(BOOKED_NEXT) in YES_NO_LABELS:
        lines.append(f"Booked next session: {YES_NO_LABELS[answers[BOOKED_NEXT]]}")
    reasons = not_booked_reasons(answers)
    if reasons:
        lines.append(f"What's in the way: {reasons[0]}")
    if _text(answers.get(ANYTHING_ELSE)):
        lines.append(f"Anything else: {_text(answers[ANYTHING_ELSE])}")
    if _text(answers.get(PROGRAM_OUTCOMES)):
        lines.append(f"Program outcomes: {_text(answers[PROGRAM_OUTCOMES])}")
    if answers.get(NPS) is not None:
        lines.append(f"Likelihood to recommend: {answers[NPS]}/10")
    if answers.get(OPEN_TO_CHAT) in YES_NO_LABELS:
        lines.append(f"Open to a follow-up chat: {YES_NO_LABELS[answers[OPEN_TO_CHAT]]}")
    if answers.get(TESTIMONIAL_CONSENT) in YES_NO_LABELS:
        lines.append(f"Open to a testimonial: {YES_NO_LABELS[answers[TESTIMONIAL_CONSENT]]}")
    return lines


def build_outcomes(session_number, match_rating=None):
    """Outcomes text. Starts with the "Session N" token used to find the submission later."""
    parts = [f"Session {session_number}"]
    if match_rating:
        parts.append(f"Coach match: {match_rating}/10")
    return ", ".join(parts)


def normalize_checkin(answers, pending_survey, participant):
    """Build the SubmissionRecord for a finished check-in.

    Testimonial consent is asked outright in the end-of-program survey; in
    a regular check-in it follows a "yes" to the follow-up chat.
    """
    end_of_program = pending_survey.survey_type in END_OF_PROGRAM_TYPES
    answers = visible_answers(answers, end_of_program=end_of_program)
    open_to_followup = tri_state(answers.get(OPEN_TO_CHAT))
    if end_of_program:
        open_to_testimonial = tri_state(answers.get(TESTIMONIAL_CONSENT)) is True
    else:
        open_to_testimonial = open_to_followup is True

    return SubmissionRecord(
        email=participant.email.strip().lower(),
        survey_type=submission_survey_type(pending_survey),
        session_id=pending_survey.session_id,
        session_number=pending_survey.session_number,
        coach_name=pending_survey.coach_name,
        outcomes=build_outcomes(pending_survey.session_number, answers.get(COACH_MATCH)),
        feedback="\n".join(feedback_lines(answers)),
        experience_rating=answers.get(EXPERIENCE),
        match_rating=answers.get(COACH_MATCH),
        nps=answers.get(NPS),
        next_session_booked=tri_state(answers.get(BOOKED_NEXT)),
        not_booked_reasons=not_booked_reasons(answers),
        open_to_followup=open_to_followup,
        open_to_testimonial=open_to_testimonial,
        program_outcomes=_text(answers.get(PROGRAM_OUTCOMES)),
        first_name=participant.first_name,
        last_name=participant.last_name,
        account_name=participant.company_name,
        program_title=participant.program,
        wins_text=_text(answers.get("wins")),
    )
