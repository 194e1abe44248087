from django.urls import path

from .views import (
    decision_choose_view,
    decision_continue_view,
    decision_start_view,
    performance_submit_view,
    task_registry_view,
)

app_name = "tasks"
urlpatterns = [
    path("api/submit-performance/", view=performance_submit_view, name="submit_performance"),
    path("api/registry/", view=task_registry_view, name="registry"),
    path("api/decision/start/", view=decision_start_view, name="decision_start"),
    path("api/decision/choose/", view=decision_choose_view, name="decision_choose"),
    path("api/decision/continue/", view=decision_continue_view, name="decision_continue"),
]
