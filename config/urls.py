from django.contrib import admin
from django.urls import include
from django.urls import path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("tasks/", include("neuroplay.tasks.urls", namespace="tasks")),
    path("progress/", include("neuroplay.progress.urls", namespace="progress")),
]
