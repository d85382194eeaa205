from django.apps import AppConfig


class RetailersConfig(AppConfig):
    name = "modules.retailers"
    label = "retailers"
