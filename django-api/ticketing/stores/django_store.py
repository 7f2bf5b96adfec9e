"""Django ORM implementation of the TicketingStore.

Counter changes are single conditional ``UPDATE`` statements, so the database
decides whether a decrement or admit fits; ``atomic()`` is a database
transaction.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal

import structlog
from django.db import InterfaceError, OperationalError, connections, transaction
from django.db.models import F, Q
from django.db.models.functions import Least
from django.utils import timezone

from ticketing import models as orm
from ticketing.domain import (
    BuyerDetails,
    Capacity,
    CheckInEvent,
    CheckInId,
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
from ticketing.stores.interfaces import TicketingStore

logger = structlog.get_logger(__name__)


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except (OperationalError, InterfaceError) as exc:
        logger.warning("store_unavailable", operation=operation, error=str(exc))
        raise TransientStoreError(operation) from exc


class DjangoTicketingStore(TicketingStore):
    """Relational store backed by the Django ORM."""

    rolls_back_on_error = True

    def __init__(self, using: str = "default") -> None:
        self._using = using

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with _translate_errors("atomic"):
            with transaction.atomic(using=self._using):
                yield

    def close(self) -> None:
        connections[self._using].close()

    # Inventory

    def add_ticket_type(self, ticket_type: TicketType) -> None:
        with _translate_errors("add_ticket_type"):
            orm.TicketType.objects.using(self._using).create(
                id=ticket_type.id.value,
                event_id=ticket_type.event_id.value,
                label=ticket_type.label,
                unit_price=ticket_type.unit_price.amount,
                total_capacity=ticket_type.total_capacity.value,
                remaining_availability=ticket_type.remaining_availability,
                perks=list(ticket_type.perks),
                status=ticket_type.status.value,
                has_purchases=ticket_type.has_purchases,
                created_at=ticket_type.created_at,
                updated_at=ticket_type.updated_at,
            )

    def get_ticket_type(self, ticket_type_id: TicketTypeId) -> TicketType | None:
        with _translate_errors("get_ticket_type"):
            row = orm.TicketType.objects.using(self._using).filter(pk=ticket_type_id.value).first()
        return _ticket_type_from_row(row) if row else None

    def list_ticket_types(self, event_id: EventId | None = None) -> list[TicketType]:
        with _translate_errors("list_ticket_types"):
            queryset = orm.TicketType.objects.using(self._using).all()
            if event_id is not None:
                queryset = queryset.filter(event_id=event_id.value)
            rows = list(queryset)
        return [_ticket_type_from_row(row) for row in rows]

    def save_ticket_type_details(self, ticket_type: TicketType) -> None:
        with _translate_errors("save_ticket_type_details"):
            orm.TicketType.objects.using(self._using).filter(pk=ticket_type.id.value).update(
                label=ticket_type.label,
                unit_price=ticket_type.unit_price.amount,
                perks=list(ticket_type.perks),
                status=ticket_type.status.value,
                updated_at=ticket_type.updated_at,
            )

    def delete_unsold_ticket_type(self, ticket_type_id: TicketTypeId) -> bool:
        with _translate_errors("delete_unsold_ticket_type"):
            deleted, _ = (
                orm.TicketType.objects.using(self._using)
                .filter(pk=ticket_type_id.value, has_purchases=False)
                .delete()
            )
        return deleted > 0

    def try_decrement_availability(self, ticket_type_id: TicketTypeId, quantity: int) -> bool:
        with _translate_errors("try_decrement_availability"):
            updated = (
                orm.TicketType.objects.using(self._using)
                .filter(
                    pk=ticket_type_id.value,
                    status=TicketTypeStatus.ON_SALE.value,
                    remaining_availability__gte=quantity,
                )
                .update(
                    remaining_availability=F("remaining_availability") - quantity,
                    has_purchases=True,
                    updated_at=timezone.now(),
                )
            )
        return updated == 1

    def increment_availability(self, ticket_type_id: TicketTypeId, quantity: int) -> int | None:
        with _translate_errors("increment_availability"):
            with transaction.atomic(using=self._using):
                queryset = orm.TicketType.objects.using(self._using).filter(pk=ticket_type_id.value)
                updated = queryset.update(
                    remaining_availability=Least(F("remaining_availability") + quantity, F("total_capacity")),
                    updated_at=timezone.now(),
                )
                if not updated:
                    return None
                return queryset.values_list("remaining_availability", flat=True).get()

    # Purchases

    def add_purchase(self, purchase: Purchase) -> None:
        with _translate_errors("add_purchase"):
            orm.Purchase.objects.using(self._using).create(
                id=purchase.id.value,
                event_id=purchase.event_id.value,
                buyer_name=purchase.buyer.name,
                buyer_email=purchase.buyer.email,
                buyer_phone=purchase.buyer.phone,
                line_items=_line_items_to_json(purchase.line_items),
                status=purchase.status.value,
                refunded_quantity=purchase.refunded_quantity,
                payment_id=purchase.payment_id,
                version=purchase.version,
                created_at=purchase.created_at,
                updated_at=purchase.updated_at,
            )

    def get_purchase(self, purchase_id: PurchaseId) -> Purchase | None:
        with _translate_errors("get_purchase"):
            row = orm.Purchase.objects.using(self._using).filter(pk=purchase_id.value).first()
        return _purchase_from_row(row) if row else None

    def replace_purchase(self, purchase: Purchase, expected_version: int) -> bool:
        with _translate_errors("replace_purchase"):
            updated = (
                orm.Purchase.objects.using(self._using)
                .filter(pk=purchase.id.value, version=expected_version)
                .update(
                    line_items=_line_items_to_json(purchase.line_items),
                    status=purchase.status.value,
                    refunded_quantity=purchase.refunded_quantity,
                    updated_at=purchase.updated_at,
                    version=purchase.version,
                )
            )
        return updated == 1

    def list_purchases(self, event_id: EventId | None = None) -> list[Purchase]:
        with _translate_errors("list_purchases"):
            queryset = orm.Purchase.objects.using(self._using).all()
            if event_id is not None:
                queryset = queryset.filter(event_id=event_id.value)
            rows = list(queryset)
        return [_purchase_from_row(row) for row in rows]

    def search_purchases(self, term: str) -> list[Purchase]:
        with _translate_errors("search_purchases"):
            rows = list(
                orm.Purchase.objects.using(self._using).filter(
                    Q(buyer_name__icontains=term) | Q(buyer_phone__contains=term)
                )
            )
        return [_purchase_from_row(row) for row in rows]

    # Attendance

    def add_rsvp(self, rsvp: RsvpRecord) -> None:
        with _translate_errors("add_rsvp"):
            orm.Rsvp.objects.using(self._using).create(
                document_number=rsvp.document_number.value,
                event_id=rsvp.event_id.value,
                full_name=rsvp.full_name,
                email_address=rsvp.email_address,
                number_of_attendees=rsvp.number_of_attendees,
                checked_in_count=rsvp.checked_in_count,
                last_checked_in_at=rsvp.last_checked_in_at,
                created_at=rsvp.created_at,
            )

    def get_rsvp(self, document_number: DocumentNumber) -> RsvpRecord | None:
        with _translate_errors("get_rsvp"):
            row = orm.Rsvp.objects.using(self._using).filter(pk=document_number.value).first()
        return _rsvp_from_row(row) if row else None

    def list_rsvps(self, event_id: EventId | None = None) -> list[RsvpRecord]:
        with _translate_errors("list_rsvps"):
            queryset = orm.Rsvp.objects.using(self._using).all()
            if event_id is not None:
                queryset = queryset.filter(event_id=event_id.value)
            rows = list(queryset)
        return [_rsvp_from_row(row) for row in rows]

    def try_admit(self, document_number: DocumentNumber, count: int, at: datetime) -> RsvpRecord | None:
        rsvps = orm.Rsvp.objects.using(self._using).filter(pk=document_number.value)
        with _translate_errors("try_admit"):
            # Compared as a sum so unsigned columns never go negative.
            updated = (
                rsvps.alias(admitted=F("checked_in_count") + count)
                .filter(admitted__lte=F("number_of_attendees"))
                .update(
                    checked_in_count=F("checked_in_count") + count,
                    last_checked_in_at=at,
                )
            )
            if updated != 1:
                return None
            row = rsvps.get()
        return _rsvp_from_row(row)

    def add_check_in(self, check_in: CheckInEvent) -> None:
        with _translate_errors("add_check_in"):
            orm.CheckIn.objects.using(self._using).create(
                id=check_in.id.value,
                document_number=check_in.document_number.value,
                event_id=check_in.event_id.value,
                checked_in_count=check_in.checked_in_count,
                checked_in_at=check_in.checked_in_at,
                guest_name=check_in.guest_name,
                email_address=check_in.email_address,
            )

    def list_check_ins(self, document_number: DocumentNumber | None = None) -> list[CheckInEvent]:
        with _translate_errors("list_check_ins"):
            queryset = orm.CheckIn.objects.using(self._using).all()
            if document_number is not None:
                queryset = queryset.filter(document_number=document_number.value)
            rows = list(queryset)
        return [_check_in_from_row(row) for row in rows]


def _ticket_type_from_row(row: orm.TicketType) -> TicketType:
    return TicketType(
        id=TicketTypeId(row.id),
        event_id=EventId(row.event_id),
        label=row.label,
        unit_price=Money(row.unit_price),
        total_capacity=Capacity(row.total_capacity),
        remaining_availability=row.remaining_availability,
        perks=tuple(row.perks or ()),
        status=TicketTypeStatus(row.status),
        created_at=row.created_at,
        updated_at=row.updated_at,
        has_purchases=row.has_purchases,
    )


def _line_items_to_json(items: tuple[LineItem, ...]) -> list[dict]:
    return [
        {
            "ticketTypeId": str(item.ticket_type_id),
            "label": item.label,
            "unitPriceAtSale": str(item.unit_price_at_sale),
            "quantity": item.quantity,
        }
        for item in items
    ]


def _purchase_from_row(row: orm.Purchase) -> Purchase:
    return Purchase(
        id=PurchaseId(row.id),
        event_id=EventId(row.event_id),
        buyer=BuyerDetails(name=row.buyer_name, email=row.buyer_email, phone=row.buyer_phone),
        line_items=tuple(
            LineItem(
                ticket_type_id=TicketTypeId.from_string(item["ticketTypeId"]),
                label=item["label"],
                unit_price_at_sale=Money(Decimal(item["unitPriceAtSale"])),
                quantity=item["quantity"],
            )
            for item in row.line_items
        ),
        status=PurchaseStatus(row.status),
        created_at=row.created_at,
        updated_at=row.updated_at,
        refunded_quantity=row.refunded_quantity,
        payment_id=row.payment_id,
        version=row.version,
    )


def _rsvp_from_row(row: orm.Rsvp) -> RsvpRecord:
    return RsvpRecord(
        document_number=DocumentNumber(row.document_number),
        event_id=EventId(row.event_id),
        full_name=row.full_name,
        email_address=row.email_address,
        number_of_attendees=row.number_of_attendees,
        checked_in_count=row.checked_in_count,
        created_at=row.created_at,
        last_checked_in_at=row.last_checked_in_at,
    )


def _check_in_from_row(row: orm.CheckIn) -> CheckInEvent:
    return CheckInEvent(
        id=CheckInId(row.id),
        document_number=DocumentNumber(row.document_number),
        event_id=EventId(row.event_id),
        checked_in_count=row.checked_in_count,
        checked_in_at=row.checked_in_at,
        guest_name=row.guest_name,
        email_address=row.email_address,
    )
