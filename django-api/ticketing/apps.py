import atexit

from django.apps import AppConfig


class TicketingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "ticketing"

    def ready(self) -> None:
        from ticketing import signals  # noqa: F401
        from ticketing.container import Container

        self.container = Container.from_settings()
        atexit.register(self.container.close)
