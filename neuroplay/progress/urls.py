from django.urls import path

from .views import analytics_view, challenge_view, dashboard_view, reset_view, task_stats_view

app_name = "progress"
urlpatterns = [
    path("api/dashboard/", view=dashboard_view, name="dashboard"),
    path("api/challenge/", view=challenge_view, name="challenge"),
    path("api/task-stats/", view=task_stats_view, name="task_stats"),
    path("api/analytics/", view=analytics_view, name="analytics"),
    path("api/reset/", view=reset_view, name="reset"),
]
