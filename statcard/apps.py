from django.apps import AppConfig


class StatcardConfig(AppConfig):
    name = 'statcard'
    verbose_name = 'Wakapi stat card'
