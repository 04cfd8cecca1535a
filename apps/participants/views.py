"""Participant dashboard. Hosts the check-in prompt."""
from django.contrib.auth.decorators import login_required
from django.shortcuts import render

from apps.surveys.engine import PendingSurveyResolver, is_checkin_enabled

from .access import get_participant_or_404


@login_required
def dashboard(request):
    """Home page. Asks the resolver once per load whether a check-in is due."""
    participant = get_participant_or_404(request)

    pending_survey = None
    if is_checkin_enabled():
        pending_survey = PendingSurveyResolver().resolve(participant)

    return render(request, "participants/dashboard.html", {
        "participant": participant,
        "pending_survey": pending_survey,
    })
