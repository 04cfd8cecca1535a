"""Check-in URL configuration: participant-facing routes."""
from django.urls import path

from . import views

app_name = "surveys"

urlpatterns = [
    path("", views.checkin_start, name="checkin_start"),
    path(
        "session/<int:session_id>/",
        views.checkin_for_session,
        name="checkin_for_session",
    ),
    path("step/", views.checkin_step, name="checkin_step"),
    path("dismiss/", views.checkin_dismiss, name="checkin_dismiss"),
    path("complete/", views.checkin_complete, name="checkin_complete"),
    path("wins/", views.wins_list, name="wins_list"),
    path("wins/add/", views.win_create, name="win_create"),
]
