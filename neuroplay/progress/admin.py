from django.contrib import admin

from .models import DailyChallenge
from .models import UserStats


@admin.register(UserStats)
class UserStatsAdmin(admin.ModelAdmin):
    list_display = ["user", "tasks_completed", "total_score", "streak", "last_activity"]
    search_fields = ["user__email"]
    ordering = ["-last_activity"]


@admin.register(DailyChallenge)
class DailyChallengeAdmin(admin.ModelAdmin):
    list_display = ["id", "user", "date", "completed"]
    list_filter = ["completed"]
    search_fields = ["user__email"]
