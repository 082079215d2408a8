from django.apps import AppConfig


class PartnersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.partners"

    def ready(self):
        # Credits partner stats when an order reaches a terminal status
        from . import receivers  # noqa: F401
