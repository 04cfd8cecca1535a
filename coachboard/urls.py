"""URL configuration for Coachboard."""
from django.contrib import admin
from django.urls import include, path

from apps.participants.views import dashboard

urlpatterns = [
    path("", dashboard, name="dashboard"),
    path("checkin/", include("apps.surveys.urls")),
    path("admin/", admin.site.urls),
]
