"""Explicit wiring of the store handle and the services that share it.

One container is built when the app registry is ready and closed at process
exit; handlers fetch services from it instead of reaching for module globals.
"""

from dataclasses import dataclass

import structlog
from django.apps import apps
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from ticketing.services import (
    AttendanceService,
    CatalogService,
    MockPaymentGateway,
    PaymentGateway,
    ReconciliationService,
    ReportingService,
    ReservationService,
)
from ticketing.stores.interfaces import TicketingStore

logger = structlog.get_logger(__name__)


def build_store(backend: str) -> TicketingStore:
    """Construct the store named by ``TICKETING_STORE_BACKEND``."""
    if backend == "django":
        from ticketing.stores.django_store import DjangoTicketingStore

        return DjangoTicketingStore()
    if backend == "memory":
        from ticketing.stores.memory_store import InMemoryTicketingStore

        return InMemoryTicketingStore()
    raise ImproperlyConfigured(f"Unknown TICKETING_STORE_BACKEND {backend!r}")


@dataclass
class Container:
    store: TicketingStore
    payments: PaymentGateway
    catalog: CatalogService
    reservations: ReservationService
    attendance: AttendanceService
    reporting: ReportingService
    reconciliation: ReconciliationService

    @classmethod
    def build(cls, store: TicketingStore, payments: PaymentGateway) -> "Container":
        return cls(
            store=store,
            payments=payments,
            catalog=CatalogService(store),
            reservations=ReservationService(store, payments),
            attendance=AttendanceService(store),
            reporting=ReportingService(store),
            reconciliation=ReconciliationService(store),
        )

    @classmethod
    def from_settings(cls) -> "Container":
        store = build_store(settings.TICKETING_STORE_BACKEND)
        payments = MockPaymentGateway(always_succeed=settings.MOCK_PAYMENT_SUCCESS)
        logger.info("ticketing_container_built", store=type(store).__name__)
        return cls.build(store, payments)

    def close(self) -> None:
        self.store.close()


def get_container() -> Container:
    """Return the container owned by the ticketing app config."""
    return apps.get_app_config("ticketing").container
