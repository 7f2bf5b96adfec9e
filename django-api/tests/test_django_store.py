"""Tests for the Django ORM store.

These test the conditional updates against a real database.
Run with: pytest tests/test_django_store.py -v
"""

import uuid
from dataclasses import replace
from decimal import Decimal
from unittest import mock

import pytest
from django.db import OperationalError
from django.utils import timezone

from ticketing import models as orm
from ticketing.domain import (
    BuyerDetails,
    Capacity,
    DocumentNumber,
    EventId,
    LineItem,
    Money,
    Purchase,
    PurchaseId,
    PurchaseStatus,
    RsvpRecord,
    TicketType,
    TicketTypeId,
    TicketTypeStatus,
)
from ticketing.domain.errors import TransientStoreError
from ticketing.stores.django_store import DjangoTicketingStore


@pytest.fixture
def db_store() -> DjangoTicketingStore:
    return DjangoTicketingStore()


@pytest.fixture
def ticket_type(db_store) -> TicketType:
    now = timezone.now()
    ticket_type = TicketType(
        id=TicketTypeId.new(),
        event_id=EventId(uuid.uuid4()),
        label="General",
        unit_price=Money(Decimal("10.00")),
        total_capacity=Capacity(10),
        remaining_availability=10,
        perks=("Free drink",),
        status=TicketTypeStatus.ON_SALE,
        created_at=now,
        updated_at=now,
    )
    db_store.add_ticket_type(ticket_type)
    return ticket_type


def make_purchase(ticket_type: TicketType, quantity: int) -> Purchase:
    now = timezone.now()
    return Purchase(
        id=PurchaseId.new(),
        event_id=ticket_type.event_id,
        buyer=BuyerDetails(name="Ada Lovelace", email="ada@example.com", phone="+15550100"),
        line_items=(
            LineItem(
                ticket_type_id=ticket_type.id,
                label=ticket_type.label,
                unit_price_at_sale=ticket_type.unit_price,
                quantity=quantity,
            ),
        ),
        status=PurchaseStatus.COMPLETED,
        created_at=now,
        updated_at=now,
        payment_id="pi_test",
    )


@pytest.mark.django_db
class TestInventory:
    """Tests for availability counters."""

    def test_round_trip(self, db_store, ticket_type):
        assert db_store.get_ticket_type(ticket_type.id) == ticket_type
        assert db_store.list_ticket_types(ticket_type.event_id) == [ticket_type]
        assert db_store.list_ticket_types(EventId(uuid.uuid4())) == []

    def test_decrement_within_availability(self, db_store, ticket_type):
        assert db_store.try_decrement_availability(ticket_type.id, 10) is True

        stored = db_store.get_ticket_type(ticket_type.id)
        assert stored.remaining_availability == 0
        assert stored.has_purchases is True

    def test_decrement_beyond_availability_changes_nothing(self, db_store, ticket_type):
        assert db_store.try_decrement_availability(ticket_type.id, 11) is False
        assert db_store.get_ticket_type(ticket_type.id).remaining_availability == 10

    def test_decrement_refused_when_not_on_sale(self, db_store, ticket_type):
        db_store.save_ticket_type_details(replace(ticket_type, status=TicketTypeStatus.DRAFT))

        assert db_store.try_decrement_availability(ticket_type.id, 1) is False

    def test_increment_is_capped_at_capacity(self, db_store, ticket_type):
        db_store.try_decrement_availability(ticket_type.id, 3)

        assert db_store.increment_availability(ticket_type.id, 2) == 9
        assert db_store.increment_availability(ticket_type.id, 5) == 10

    def test_increment_unknown_ticket_type(self, db_store):
        assert db_store.increment_availability(TicketTypeId.new(), 1) is None

    def test_save_details_leaves_counters_alone(self, db_store, ticket_type):
        db_store.try_decrement_availability(ticket_type.id, 4)

        db_store.save_ticket_type_details(
            replace(ticket_type, label="Standing", unit_price=Money(Decimal("12")), remaining_availability=10)
        )

        stored = db_store.get_ticket_type(ticket_type.id)
        assert stored.label == "Standing"
        assert stored.unit_price == Money(Decimal("12.00"))
        assert stored.remaining_availability == 6

    def test_only_unsold_ticket_types_are_deleted(self, db_store, ticket_type):
        db_store.try_decrement_availability(ticket_type.id, 1)

        assert db_store.delete_unsold_ticket_type(ticket_type.id) is False
        assert db_store.get_ticket_type(ticket_type.id) is not None

    def test_unsold_ticket_type_is_deleted(self, db_store, ticket_type):
        assert db_store.delete_unsold_ticket_type(ticket_type.id) is True
        assert db_store.get_ticket_type(ticket_type.id) is None

    def test_atomic_rolls_back_on_error(self, db_store, ticket_type):
        with pytest.raises(RuntimeError):
            with db_store.atomic():
                db_store.try_decrement_availability(ticket_type.id, 5)
                raise RuntimeError("boom")

        assert db_store.rolls_back_on_error is True
        assert db_store.get_ticket_type(ticket_type.id).remaining_availability == 10

    def test_database_outage_becomes_transient_error(self, db_store, ticket_type):
        with mock.patch.object(orm.TicketType.objects, "using", side_effect=OperationalError("database is locked")):
            with pytest.raises(TransientStoreError) as exc_info:
                db_store.get_ticket_type(ticket_type.id)

        assert exc_info.value.operation == "get_ticket_type"


@pytest.mark.django_db
class TestPurchaseLedger:
    """Tests for purchase records."""

    def test_round_trip(self, db_store, ticket_type):
        purchase = make_purchase(ticket_type, 2)
        db_store.add_purchase(purchase)

        assert db_store.get_purchase(purchase.id) == purchase
        assert db_store.list_purchases(ticket_type.event_id) == [purchase]

    def test_replace_requires_expected_version(self, db_store, ticket_type):
        purchase = make_purchase(ticket_type, 2)
        db_store.add_purchase(purchase)
        refunded = replace(purchase.with_refund(ticket_type.id, 1, timezone.now()), version=2)

        assert db_store.replace_purchase(refunded, expected_version=1) is True
        assert db_store.replace_purchase(replace(refunded, version=3), expected_version=1) is False

        stored = db_store.get_purchase(purchase.id)
        assert stored.version == 2
        assert stored.status == PurchaseStatus.PARTIALLY_REFUNDED
        assert stored.line_items[0].quantity == 1

    def test_search_by_name_or_phone(self, db_store, ticket_type):
        purchase = make_purchase(ticket_type, 1)
        db_store.add_purchase(purchase)

        assert db_store.search_purchases("lovelace") == [purchase]
        assert db_store.search_purchases("0100") == [purchase]
        assert db_store.search_purchases("hopper") == []


@pytest.mark.django_db
class TestAttendanceStore:
    """Tests for RSVP counters."""

    @pytest.fixture
    def rsvp(self, db_store) -> RsvpRecord:
        rsvp = RsvpRecord(
            document_number=DocumentNumber.new(),
            event_id=EventId(uuid.uuid4()),
            full_name="Grace Hopper",
            email_address="grace@example.com",
            number_of_attendees=4,
            checked_in_count=0,
            created_at=timezone.now(),
        )
        db_store.add_rsvp(rsvp)
        return rsvp

    def test_admit_within_headcount(self, db_store, rsvp):
        at = timezone.now()

        admitted = db_store.try_admit(rsvp.document_number, 3, at)

        assert admitted.checked_in_count == 3
        assert admitted.remaining == 1
        assert admitted.last_checked_in_at == at
        assert db_store.get_rsvp(rsvp.document_number) == admitted

    def test_admit_beyond_headcount_changes_nothing(self, db_store, rsvp):
        db_store.try_admit(rsvp.document_number, 3, timezone.now())

        assert db_store.try_admit(rsvp.document_number, 2, timezone.now()) is None
        assert db_store.get_rsvp(rsvp.document_number).checked_in_count == 3

    def test_admit_more_than_whole_headcount(self, db_store, rsvp):
        """A count above number_of_attendees is refused without touching the row."""
        assert db_store.try_admit(rsvp.document_number, 5, timezone.now()) is None

        stored = db_store.get_rsvp(rsvp.document_number)
        assert stored.checked_in_count == 0
        assert stored.last_checked_in_at is None

    def test_admit_exact_headcount(self, db_store, rsvp):
        assert db_store.try_admit(rsvp.document_number, 4, timezone.now()).remaining == 0

    def test_admit_unknown_rsvp(self, db_store):
        assert db_store.try_admit(DocumentNumber.new(), 1, timezone.now()) is None
