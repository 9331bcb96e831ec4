from django.apps import AppConfig


class InstitutesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "institutes"
