"""
URL configuration for the wakacard project.
"""
from django.urls import include, path

urlpatterns = [
    path('', include('statcard.urls')),
]
