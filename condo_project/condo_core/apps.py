from django.apps import AppConfig


class CondoCoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "condo_core"

    # ensure receivers are registered
    def ready(self):
        import condo_core.signals  # noqa: F401
