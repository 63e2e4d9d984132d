from django.apps import AppConfig


class ConsoleConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'console'

    def ready(self):
        """Freeze the sanitization schema once settings are loaded."""
        from console.markdown.schema import get_schema

        get_schema()
