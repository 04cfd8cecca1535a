"""Check-in wizard pages and participant wins.

The wizard state lives in the Django session under ``checkin_wizard``.
Dismissing the wizard deletes it; starting again always begins at the
first question.
"""
import logging

from django.conf import settings
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.http import Http404
from django.shortcuts import redirect, render
from django.utils.translation import gettext as _
from django.views.decorators.http import require_POST

from apps.participants.access import get_participant_or_404

from .engine import PendingSurveyResolver, is_checkin_enabled, pending_survey_for_session
from .forms import QUESTIONS, WinForm, step_form
from .models import CoachingWin
from .steps import step_fields
from .store import WinStore
from .wizard import CheckpointWizard

logger = logging.getLogger(__name__)

SESSION_KEY = "checkin_wizard"


def _checkin_or_404():
    """Raise 404 if check-in surveys are switched off."""
    if not is_checkin_enabled():
        raise Http404


def _load_wizard(request, participant):
    data = request.session.get(SESSION_KEY)
    if not data:
        return None
    try:
        return CheckpointWizard.from_dict(data, participant=participant)
    except (KeyError, TypeError, ValueError):
        logger.exception("Discarding unreadable check-in state")
        request.session.pop(SESSION_KEY, None)
        return None


def _save_wizard(request, wizard):
    request.session[SESSION_KEY] = wizard.to_dict()


def _begin(request, participant, pending_survey):
    wizard = CheckpointWizard(pending_survey, participant=participant)
    _save_wizard(request, wizard)
    logger.info(
        "Check-in started for session %s (%s)",
        pending_survey.session_number, pending_survey.survey_type,
    )
    return redirect("surveys:checkin_step")


@login_required
def checkin_start(request):
    """Start the check-in the dashboard is currently prompting for."""
    _checkin_or_404()
    participant = get_participant_or_404(request)

    pending_survey = PendingSurveyResolver().resolve(participant)
    if pending_survey is None:
        messages.info(request, _("You're all caught up. There's no check-in due right now."))
        return redirect("dashboard")
    return _begin(request, participant, pending_survey)


@login_required
def checkin_for_session(request, session_id):
    """Start a check-in for one specific session (direct feedback link)."""
    _checkin_or_404()
    participant = get_participant_or_404(request)

    pending_survey = pending_survey_for_session(participant, session_id)
    if pending_survey is None:
        raise Http404
    return _begin(request, participant, pending_survey)


@login_required
def checkin_step(request):
    """Show the current question and handle Next / Back."""
    _checkin_or_404()
    participant = get_participant_or_404(request)

    wizard = _load_wizard(request, participant)
    if wizard is None:
        return redirect("dashboard")
    if wizard.is_complete:
        return redirect("surveys:checkin_complete")

    step = wizard.current_step
    if request.method == "POST":
        if request.POST.get("action") == "back":
            wizard.back()
            _save_wizard(request, wizard)
            return redirect("surveys:checkin_step")

        form = step_form(step, data=request.POST)
        if form.is_valid():
            for field in step_fields(step):
                wizard.answer(field, form.cleaned_data.get(field))
            wizard.next()
            _save_wizard(request, wizard)
            if wizard.is_complete:
                return redirect("surveys:checkin_complete")
            return redirect("surveys:checkin_step")
    else:
        initial = {f: wizard.answers[f] for f in step_fields(step) if f in wizard.answers}
        form = step_form(step, initial=initial)

    return render(request, "surveys/checkin_step.html", {
        "wizard": wizard,
        "pending_survey": wizard.pending_survey,
        "form": form,
        "question": QUESTIONS[step],
        "progress": wizard.progress(),
        "action_label": wizard.action_label(),
        "can_go_back": wizard.steps.index(step) > 0,
        "error": wizard.error,
    })


@login_required
@require_POST
def checkin_dismiss(request):
    """Close the check-in without saving anything."""
    _checkin_or_404()
    participant = get_participant_or_404(request)

    wizard = _load_wizard(request, participant)
    if wizard is not None:
        wizard.dismiss()
    request.session.pop(SESSION_KEY, None)
    return redirect("dashboard")


@login_required
def checkin_complete(request):
    """Thank-you page. Returns to the dashboard after a short delay."""
    _checkin_or_404()
    participant = get_participant_or_404(request)

    wizard = _load_wizard(request, participant)
    if wizard is None or not wizard.is_complete:
        return redirect("dashboard")
    request.session.pop(SESSION_KEY, None)

    return render(request, "surveys/checkin_complete.html", {
        "pending_survey": wizard.pending_survey,
        "redirect_delay": getattr(settings, "CHECKIN_COMPLETE_DELAY_SECONDS", 2),
    })


# ---------------------------------------------------------------------------
# Wins
# ---------------------------------------------------------------------------

@login_required
def wins_list(request):
    participant = get_participant_or_404(request)
    wins = CoachingWin.objects.filter(participant=participant).order_by("-created_at")
    return render(request, "surveys/wins_list.html", {
        "participant": participant,
        "wins": wins,
        "form": WinForm(),
    })


@login_required
@require_POST
def win_create(request):
    """Add a win by hand, outside any check-in."""
    participant = get_participant_or_404(request)
    form = WinForm(request.POST)
    if form.is_valid():
        WinStore().append(
            participant,
            form.cleaned_data["text"],
            session_number=form.cleaned_data.get("session_number"),
            source=CoachingWin.SOURCE_MANUAL,
            is_private=form.cleaned_data["is_private"],
        )
        messages.success(request, _("Win saved."))
        return redirect("surveys:wins_list")

    wins = CoachingWin.objects.filter(participant=participant).order_by("-created_at")
    return render(request, "surveys/wins_list.html", {
        "participant": participant,
        "wins": wins,
        "form": form,
    })
