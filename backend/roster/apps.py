from django.apps import AppConfig


class RosterConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'roster'
    def ready(self):
        # Keep guardian memberships in step with Guardian rows.
        from . import signals  # noqa: F401
