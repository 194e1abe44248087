from django.contrib import admin

from .models import Performance


@admin.register(Performance)
class PerformanceAdmin(admin.ModelAdmin):
    list_display = ["id", "user", "task_type", "score", "date"]
    list_filter = ["task_type"]
    search_fields = ["user__email"]
    ordering = ["-date"]
    readonly_fields = ["id", "user", "task_type", "score", "date", "metrics", "created_at"]
