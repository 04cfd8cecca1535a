"""Look up the Participant behind the logged-in user."""
from django.http import Http404

from .models import Participant


def get_participant_for_user(user):
    """Return the user's Participant, matched by link first, then by email."""
    if not user.is_authenticated:
        return None
    participant = Participant.objects.filter(user=user).first()
    if participant is None and user.email:
        participant = Participant.objects.filter(email__iexact=user.email).first()
    return participant


def get_participant_or_404(request):
    participant = get_participant_for_user(request.user)
    if participant is None:
        raise Http404
    return participant
