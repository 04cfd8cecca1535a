"""Participant admin configuration."""
from django.contrib import admin

from .models import CoachingSession, Participant


class CoachingSessionInline(admin.TabularInline):
    model = CoachingSession
    extra = 0
    fields = ("appointment_number", "status", "session_date", "coach_name")


@admin.register(Participant)
class ParticipantAdmin(admin.ModelAdmin):
    list_display = ("email", "first_name", "last_name", "program", "status")
    list_filter = ("status",)
    search_fields = ("email", "first_name", "last_name")
    raw_id_fields = ("user",)
    inlines = [CoachingSessionInline]


@admin.register(CoachingSession)
class CoachingSessionAdmin(admin.ModelAdmin):
    list_display = ("participant", "appointment_number", "status", "session_date", "coach_name")
    list_filter = ("status",)
    search_fields = ("participant__email", "coach_name", "external_id")
    raw_id_fields = ("participant",)
