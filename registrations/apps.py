from django.apps import AppConfig


class RegistrationsConfig(AppConfig):
    name = 'registrations'

    def ready(self):
        # Connect change feed publishers
        from registrations import signals  # noqa: F401
