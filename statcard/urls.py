"""
URL configuration for statcard app.
"""
from django.urls import path
from . import views

urlpatterns = [
    path('api/stats', views.stats_card_view, name='stats_card'),
]
