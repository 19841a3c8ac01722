"""URL configuration for core views."""

from __future__ import annotations

from django.urls import path

from core import views

app_name = "core"

urlpatterns = [
    path("parameters/<str:parameter_id>/", views.parameter_detail, name="parameter_detail"),
    path("parameters/<str:parameter_id>/chart.json", views.parameter_chart_config, name="parameter_chart_config"),
    path("parameters/<str:parameter_id>/data.csv", views.parameter_csv, name="parameter_csv"),
]
