"""Check-in step forms and the manual win form."""
from django import forms
from django.utils.translation import gettext_lazy as _

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
    RATING_RANGES,
    TESTIMONIAL_CONSENT,
    WHATS_NOT_WORKING,
    WINS,
    YES_NO_CHOICES,
)

MAX_TEXT_LENGTH = 2000

QUESTIONS = {
    EXPERIENCE: _("How would you rate your coaching experience so far?"),
    COACH_MATCH: _("How well matched do you feel with your coach?"),
    WHATS_NOT_WORKING: _("What's not working with your coach?"),
    WINS: _("Any wins you'd like to share since your last session?"),
    CONTINUE_WITH_COACH: _("Would you like to continue with your coach?"),
    BETTER_MATCH: _("What would make a better match for you?"),
    BOOKED_NEXT: _("Have you booked your next session?"),
    NOT_BOOKED_REASON: _("What's getting in the way?"),
    ANYTHING_ELSE: _("Anything else you'd like us to know?"),
    NPS: _("How likely are you to recommend coaching to a colleague?"),
    OPEN_TO_CHAT: _("Would you be open to a short follow-up chat?"),
    PROGRAM_OUTCOMES: _("What has changed for you since the start of your program?"),
    TESTIMONIAL_CONSENT: _("May we share your feedback as an anonymous testimonial?"),
}


def _rating_choices(step):
    low, high = RATING_RANGES[step]
    return [(n, str(n)) for n in range(low, high + 1)]


class RatingStepForm(forms.Form):

    def __init__(self, step, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.step = step
        self.fields[step] = forms.TypedChoiceField(
            label=QUESTIONS[step],
            choices=_rating_choices(step),
            coerce=int,
            widget=forms.RadioSelect,
            error_messages={"required": _("Please choose a rating.")},
        )


class TextStepForm(forms.Form):
    """Free-text step. Wins and "anything else" may be left blank."""

    def __init__(self, step, *args, required=True, **kwargs):
        super().__init__(*args, **kwargs)
        self.step = step
        self.fields[step] = forms.CharField(
            label=QUESTIONS[step],
            required=required,
            max_length=MAX_TEXT_LENGTH,
            strip=True,
            widget=forms.Textarea(attrs={"rows": 4}),
            error_messages={"required": _("Please tell us a little more.")},
        )


class ChoiceStepForm(forms.Form):

    def __init__(self, step, choices, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.step = step
        self.fields[step] = forms.ChoiceField(
            label=QUESTIONS[step],
            choices=choices,
            widget=forms.RadioSelect,
            error_messages={"required": _("Please choose an option.")},
        )


class NotBookedReasonForm(forms.Form):
    """Why the next session is not booked, with free text for "Other"."""

    not_booked_reason = forms.ChoiceField(
        label=QUESTIONS[NOT_BOOKED_REASON],
        choices=BOOKING_BLOCKERS,
        widget=forms.RadioSelect,
        error_messages={"required": _("Please choose an option.")},
    )
    not_booked_other = forms.CharField(
        label=_("Tell us more"),
        required=False,
        max_length=MAX_TEXT_LENGTH,
    )

    def __init__(self, step=NOT_BOOKED_REASON, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.step = step

    def clean(self):
        cleaned = super().clean()
        if cleaned.get(NOT_BOOKED_REASON) == "other" and not cleaned.get(NOT_BOOKED_OTHER):
            self.add_error(NOT_BOOKED_OTHER, _("Please tell us what's in the way."))
        return cleaned


def step_form(step, data=None, initial=None):
    """Build the form for one wizard step."""
    if step in RATING_RANGES:
        return RatingStepForm(step, data=data, initial=initial)
    if step in (WINS, ANYTHING_ELSE):
        return TextStepForm(step, data=data, initial=initial, required=False)
    if step in (WHATS_NOT_WORKING, BETTER_MATCH, PROGRAM_OUTCOMES):
        return TextStepForm(step, data=data, initial=initial)
    if step == CONTINUE_WITH_COACH:
        return ChoiceStepForm(step, CONTINUE_CHOICES, data=data, initial=initial)
    if step in (BOOKED_NEXT, OPEN_TO_CHAT, TESTIMONIAL_CONSENT):
        return ChoiceStepForm(step, YES_NO_CHOICES, data=data, initial=initial)
    if step == NOT_BOOKED_REASON:
        return NotBookedReasonForm(step, data=data, initial=initial)
    raise ValueError(f"No form for step {step!r}")


class WinForm(forms.Form):
    """A win added by the participant outside a check-in."""

    text = forms.CharField(
        label=_("Your win"),
        max_length=MAX_TEXT_LENGTH,
        widget=forms.Textarea(attrs={"rows": 3}),
    )
    session_number = forms.IntegerField(
        label=_("Session number"),
        required=False,
        min_value=1,
    )
    is_private = forms.BooleanField(
        label=_("Keep this private"),
        required=False,
        help_text=_("Private wins are left out of anonymised company reporting."),
    )
