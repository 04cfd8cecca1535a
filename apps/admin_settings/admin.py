"""Feature toggle admin."""
from django.contrib import admin

from .models import FeatureToggle


@admin.register(FeatureToggle)
class FeatureToggleAdmin(admin.ModelAdmin):
    list_display = ("feature_key", "is_enabled", "updated_at")
    list_filter = ("is_enabled",)
