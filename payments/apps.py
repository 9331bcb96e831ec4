from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"

    def ready(self):
        from django.conf import settings

        from .config import PaytmConfig

        self.paytm = PaytmConfig.from_settings(getattr(settings, "PAYTM", {}))
