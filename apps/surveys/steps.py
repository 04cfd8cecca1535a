"""Check-in questionnaire steps and the answer-derived step order.

The step list is never stored. ``step_order(answers)`` recomputes it from
the full answer set every time, so moving back and forth always lands on a
step consistent with the answers given so far, and a branch that no longer
applies simply drops out of the list.
"""

EXPERIENCE = "experience"
COACH_MATCH = "coach_match"
WHATS_NOT_WORKING = "whats_not_working"
WINS = "wins"
CONTINUE_WITH_COACH = "continue_with_coach"
BETTER_MATCH = "better_match"
BOOKED_NEXT = "booked_next"
NOT_BOOKED_REASON = "not_booked_reason"
ANYTHING_ELSE = "anything_else"
NPS = "nps"
OPEN_TO_CHAT = "open_to_chat"
PROGRAM_OUTCOMES = "program_outcomes"
TESTIMONIAL_CONSENT = "testimonial_consent"

SUBMITTING = "submitting"
COMPLETE = "complete"
TERMINAL_STEPS = (SUBMITTING, COMPLETE)

# Free-text sub-field of NOT_BOOKED_REASON, shown when the reason is "other".
NOT_BOOKED_OTHER = "not_booked_other"

# Coach-match ratings at or below this open the "what's not working" branch.
LOW_MATCH_THRESHOLD = 8

RATING_RANGES = {
    EXPERIENCE: (1, 10),
    COACH_MATCH: (1, 10),
    NPS: (0, 10),
}

YES_NO_CHOICES = [
    ("yes", "Yes"),
    ("no", "No"),
]

CONTINUE_CHOICES = [
    ("yes", "Yes, continue with my coach"),
    ("explore", "Explore other options"),
]

BOOKING_BLOCKERS = [
    ("busy_schedule", "Busy schedule"),
    ("unsure_what_to_discuss", "Not sure what to discuss"),
    ("forgot", "I forgot"),
    ("technical_issues", "Technical issues with booking"),
    ("other", "Other"),
]

OPTIONAL_STEPS = (WINS, ANYTHING_ELSE)

# Answer keys owned by each step.
STEP_FIELDS = {
    NOT_BOOKED_REASON: (NOT_BOOKED_REASON, NOT_BOOKED_OTHER),
}


def is_low_match(answers):
    rating = answers.get(COACH_MATCH)
    return rating is not None and rating <= LOW_MATCH_THRESHOLD


def step_order(answers, end_of_program=False):
    """Return the interactive steps, in order, for the given answers.

    The end-of-program survey adds a required outcomes question before NPS
    and closes with an explicit testimonial consent question.
    """
    steps = [EXPERIENCE, COACH_MATCH]
    low_match = is_low_match(answers)
    if low_match:
        steps.append(WHATS_NOT_WORKING)
    steps.append(WINS)
    if low_match:
        steps.append(CONTINUE_WITH_COACH)
        if answers.get(CONTINUE_WITH_COACH) == "explore":
            steps.append(BETTER_MATCH)
    steps.append(BOOKED_NEXT)
    if answers.get(BOOKED_NEXT) == "no":
        steps.append(NOT_BOOKED_REASON)
    steps.append(ANYTHING_ELSE)
    if end_of_program:
        steps.append(PROGRAM_OUTCOMES)
    steps.extend([NPS, OPEN_TO_CHAT])
    if end_of_program:
        steps.append(TESTIMONIAL_CONSENT)
    return steps


def _has_text(value):
    return bool(value and str(value).strip())


def is_answered(step, answers):
    """Admission guard: may the participant move past ``step``?"""
    if step in OPTIONAL_STEPS:
        return True
    if step in RATING_RANGES:
        return answers.get(step) is not None
    if step in (WHATS_NOT_WORKING, BETTER_MATCH, PROGRAM_OUTCOMES):
        return _has_text(answers.get(step))
    if step == CONTINUE_WITH_COACH:
        return answers.get(step) in dict(CONTINUE_CHOICES)
    if step in (BOOKED_NEXT, OPEN_TO_CHAT, TESTIMONIAL_CONSENT):
        return answers.get(step) in dict(YES_NO_CHOICES)
    if step == NOT_BOOKED_REASON:
        reason = answers.get(NOT_BOOKED_REASON)
        if reason not in dict(BOOKING_BLOCKERS):
            return False
        return reason != "other" or _has_text(answers.get(NOT_BOOKED_OTHER))
    return False


def step_fields(step):
    return STEP_FIELDS.get(step, (step,))


def visible_answers(answers, end_of_program=False):
    """Answers that belong to steps in the current order.

    Answers left behind on a branch the participant has since backed out of
    (e.g. "what's not working" after raising the coach-match rating) are
    dropped.
    """
    visible = {}
    for step in step_order(answers, end_of_program=end_of_program):
        for field in step_fields(step):
            if field in answers:
                visible[field] = answers[field]
    return visible
