"""Pytest configuration and shared fixtures."""

import uuid
from decimal import Decimal

import pytest
from django.apps import apps
from rest_framework.test import APIClient

from ticketing.container import Container
from ticketing.services import MockPaymentGateway
from ticketing.stores.django_store import DjangoTicketingStore
from ticketing.stores.memory_store import InMemoryTicketingStore


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def fast_retries(settings):
    """Retry transient failures without sleeping between attempts."""
    settings.TICKETING_STORE_RETRY_ATTEMPTS = 3
    settings.TICKETING_STORE_RETRY_MULTIPLIER = 0
    settings.TICKETING_STORE_RETRY_MAX_WAIT = 0


@pytest.fixture
def event_id() -> str:
    return str(uuid.uuid4())


@pytest.fixture
def store() -> InMemoryTicketingStore:
    return InMemoryTicketingStore()


@pytest.fixture
def container(store) -> Container:
    return Container.build(store, MockPaymentGateway(always_succeed=True))


@pytest.fixture
def on_sale_ticket_type(container, event_id):
    """Factory creating an on-sale ticket type in the in-memory container."""

    def create(capacity: int = 100, price: str = "10.00", label: str = "General"):
        return container.catalog.create_ticket_type(
            event_id=event_id,
            label=label,
            unit_price=Decimal(price),
            total_capacity=capacity,
            status="onSale",
        )

    return create


@pytest.fixture
def django_container(monkeypatch) -> Container:
    """Replace the app's container with a fresh one over the test database."""
    fresh = Container.build(DjangoTicketingStore(), MockPaymentGateway(always_succeed=True))
    monkeypatch.setattr(apps.get_app_config("ticketing"), "container", fresh)
    return fresh


@pytest.fixture
def declining_container(monkeypatch) -> Container:
    """App container whose payment gateway declines everything but the test card."""
    fresh = Container.build(DjangoTicketingStore(), MockPaymentGateway(always_succeed=False))
    monkeypatch.setattr(apps.get_app_config("ticketing"), "container", fresh)
    return fresh
