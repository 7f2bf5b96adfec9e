"""Catalog service - organizer-side ticket type lifecycle.

Availability is never edited here: it starts at total capacity and only the
reservation service moves it afterwards.
"""

from dataclasses import replace
from enum import Enum

import structlog
from django.utils import timezone

from ticketing.domain import Capacity, EventId, TicketType, TicketTypeId, TicketTypeStatus
from ticketing.domain.errors import InvalidRequestError, TicketTypeNotFoundError
from ticketing.domain.rules import ensure_ticket_type_transition
from ticketing.services.retry import retry_transient
from ticketing.services.validation import (
    clean_perks,
    parse_id,
    require_count,
    require_money,
    require_text,
)
from ticketing.signals import ticket_sales_changed
from ticketing.stores.interfaces import TicketingStore

logger = structlog.get_logger(__name__)


class DeleteOutcome(str, Enum):
    DELETED = "deleted"
    RETIRED = "retired"


def _parse_status(value: str | TicketTypeStatus) -> TicketTypeStatus:
    try:
        return TicketTypeStatus(value)
    except ValueError:
        raise InvalidRequestError(f"Unknown status {value!r}") from None


class CatalogService:
    """Service for creating and maintaining ticket types."""

    def __init__(self, store: TicketingStore) -> None:
        self._store = store

    @retry_transient
    def create_ticket_type(
        self,
        event_id: str,
        label: str,
        unit_price: object,
        total_capacity: int,
        perks: list[str] | None = None,
        status: str | TicketTypeStatus = TicketTypeStatus.DRAFT,
    ) -> TicketType:
        """Create a ticket type whose availability starts at its capacity.

        Raises:
            InvalidIdentifierError: If the event_id is not a valid UUID.
            InvalidRequestError: If any other field is invalid.
        """
        parsed_event_id = parse_id(EventId, event_id, "eventId")
        capacity = require_count(total_capacity, "totalCapacity")
        parsed_status = _parse_status(status)
        if parsed_status == TicketTypeStatus.CLOSED:
            raise InvalidRequestError("A ticket type cannot be created closed")
        now = timezone.now()
        ticket_type = TicketType(
            id=TicketTypeId.new(),
            event_id=parsed_event_id,
            label=require_text(label, "label"),
            unit_price=require_money(unit_price),
            total_capacity=Capacity(capacity),
            remaining_availability=capacity,
            perks=clean_perks(perks),
            status=parsed_status,
            created_at=now,
            updated_at=now,
        )
        self._store.add_ticket_type(ticket_type)
        logger.info(
            "ticket_type_created",
            ticket_type_id=str(ticket_type.id),
            event_id=str(parsed_event_id),
            capacity=capacity,
            status=parsed_status.value,
        )
        ticket_sales_changed.send(sender=self.__class__, event_id=str(parsed_event_id))
        return ticket_type

    @retry_transient
    def list_ticket_types(self, event_id: str) -> list[TicketType]:
        """Return the ticket types of an event.

        Raises:
            InvalidIdentifierError: If the event_id is not a valid UUID.
        """
        return self._store.list_ticket_types(parse_id(EventId, event_id, "eventId"))

    @retry_transient
    def get_ticket_type(self, ticket_type_id: str) -> TicketType:
        """Return a ticket type by ID.

        Raises:
            InvalidIdentifierError: If the ticket_type_id is not a valid UUID.
            TicketTypeNotFoundError: If the ticket type does not exist.
        """
        return self._load(ticket_type_id)

    @retry_transient
    def update_ticket_type(
        self,
        ticket_type_id: str,
        label: str | None = None,
        unit_price: object | None = None,
        perks: list[str] | None = None,
        status: str | TicketTypeStatus | None = None,
    ) -> TicketType:
        """Change descriptive fields and lifecycle status.

        A new price only applies to future purchases; existing purchases keep
        the price captured at sale time.

        Raises:
            TicketTypeNotFoundError: If the ticket type does not exist.
            InvalidStatusTransitionError: If the status change is not allowed.
        """
        with self._store.atomic():
            current = self._load(ticket_type_id)
            changes: dict[str, object] = {}
            if label is not None:
                changes["label"] = require_text(label, "label")
            if unit_price is not None:
                changes["unit_price"] = require_money(unit_price)
            if perks is not None:
                changes["perks"] = clean_perks(perks)
            if status is not None:
                changes["status"] = ensure_ticket_type_transition(current.status, _parse_status(status))
            if not changes:
                return current
            updated = replace(current, updated_at=timezone.now(), **changes)
            self._store.save_ticket_type_details(updated)

        logger.info(
            "ticket_type_updated",
            ticket_type_id=str(updated.id),
            fields=sorted(changes),
            status=updated.status.value,
        )
        ticket_sales_changed.send(sender=self.__class__, event_id=str(updated.event_id))
        return updated

    @retry_transient
    def delete_ticket_type(self, ticket_type_id: str) -> DeleteOutcome:
        """Remove a ticket type, or close it if any purchase references it.

        Raises:
            TicketTypeNotFoundError: If the ticket type does not exist.
        """
        with self._store.atomic():
            current = self._load(ticket_type_id)
            if self._store.delete_unsold_ticket_type(current.id):
                outcome = DeleteOutcome.DELETED
            else:
                if current.status != TicketTypeStatus.CLOSED:
                    self._store.save_ticket_type_details(
                        replace(current, status=TicketTypeStatus.CLOSED, updated_at=timezone.now())
                    )
                outcome = DeleteOutcome.RETIRED

        logger.info("ticket_type_removed", ticket_type_id=str(current.id), outcome=outcome.value)
        ticket_sales_changed.send(sender=self.__class__, event_id=str(current.event_id))
        return outcome

    def _load(self, ticket_type_id: str) -> TicketType:
        parsed = parse_id(TicketTypeId, ticket_type_id, "ticketTypeId")
        ticket_type = self._store.get_ticket_type(parsed)
        if ticket_type is None:
            raise TicketTypeNotFoundError(str(parsed))
        return ticket_type
