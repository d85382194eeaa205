from django.apps import AppConfig


class BranchesConfig(AppConfig):
    name = "modules.branches"
    label = "branches"
