"""Program admin configuration."""
from django.contrib import admin

from .models import Program


@admin.register(Program)
class ProgramAdmin(admin.ModelAdmin):
    list_display = ("name", "program_type", "sessions_per_employee", "program_end_date")
    list_filter = ("program_type",)
    search_fields = ("name",)
    readonly_fields = ("uuid",)
