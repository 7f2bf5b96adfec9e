"""In-process implementation of the TicketingStore.

Used for local development and service tests. Every method runs under one
re-entrant lock, which makes each conditional update atomic; ``atomic()``
holds the lock for the whole block and restores a snapshot if it raises.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime

from django.utils import timezone

from ticketing.domain import (
    CheckInEvent,
    DocumentNumber,
    EventId,
    Purchase,
    PurchaseId,
    RsvpRecord,
    TicketType,
    TicketTypeId,
)
from ticketing.domain.rules import remaining_after_refund
from ticketing.stores.interfaces import TicketingStore


class InMemoryTicketingStore(TicketingStore):
    """Dictionary-backed store. Records are immutable domain objects."""

    rolls_back_on_error = True

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._ticket_types: dict[TicketTypeId, TicketType] = {}
        self._purchases: dict[PurchaseId, Purchase] = {}
        self._rsvps: dict[DocumentNumber, RsvpRecord] = {}
        self._check_ins: list[CheckInEvent] = []

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            snapshot = (
                dict(self._ticket_types),
                dict(self._purchases),
                dict(self._rsvps),
                list(self._check_ins),
            )
            try:
                yield
            except BaseException:
                self._ticket_types, self._purchases, self._rsvps, self._check_ins = snapshot
                raise

    # Inventory

    def add_ticket_type(self, ticket_type: TicketType) -> None:
        with self._lock:
            self._ticket_types[ticket_type.id] = ticket_type

    def get_ticket_type(self, ticket_type_id: TicketTypeId) -> TicketType | None:
        with self._lock:
            return self._ticket_types.get(ticket_type_id)

    def list_ticket_types(self, event_id: EventId | None = None) -> list[TicketType]:
        with self._lock:
            found = [t for t in self._ticket_types.values() if event_id is None or t.event_id == event_id]
        return sorted(found, key=lambda t: t.created_at)

    def save_ticket_type_details(self, ticket_type: TicketType) -> None:
        with self._lock:
            current = self._ticket_types.get(ticket_type.id)
            if current is None:
                return
            self._ticket_types[ticket_type.id] = replace(
                current,
                label=ticket_type.label,
                unit_price=ticket_type.unit_price,
                perks=ticket_type.perks,
                status=ticket_type.status,
                updated_at=ticket_type.updated_at,
            )

    def delete_unsold_ticket_type(self, ticket_type_id: TicketTypeId) -> bool:
        with self._lock:
            current = self._ticket_types.get(ticket_type_id)
            if current is None or current.has_purchases:
                return False
            del self._ticket_types[ticket_type_id]
            return True

    def try_decrement_availability(self, ticket_type_id: TicketTypeId, quantity: int) -> bool:
        with self._lock:
            current = self._ticket_types.get(ticket_type_id)
            if current is None or not current.is_on_sale or current.remaining_availability < quantity:
                return False
            self._ticket_types[ticket_type_id] = replace(
                current,
                remaining_availability=current.remaining_availability - quantity,
                has_purchases=True,
                updated_at=timezone.now(),
            )
            return True

    def increment_availability(self, ticket_type_id: TicketTypeId, quantity: int) -> int | None:
        with self._lock:
            current = self._ticket_types.get(ticket_type_id)
            if current is None:
                return None
            remaining = remaining_after_refund(
                current.remaining_availability, quantity, current.total_capacity.value
            )
            self._ticket_types[ticket_type_id] = replace(
                current, remaining_availability=remaining, updated_at=timezone.now()
            )
            return remaining

    # Purchases

    def add_purchase(self, purchase: Purchase) -> None:
        with self._lock:
            self._purchases[purchase.id] = purchase

    def get_purchase(self, purchase_id: PurchaseId) -> Purchase | None:
        with self._lock:
            return self._purchases.get(purchase_id)

    def replace_purchase(self, purchase: Purchase, expected_version: int) -> bool:
        with self._lock:
            current = self._purchases.get(purchase.id)
            if current is None or current.version != expected_version:
                return False
            self._purchases[purchase.id] = purchase
            return True

    def list_purchases(self, event_id: EventId | None = None) -> list[Purchase]:
        with self._lock:
            found = [p for p in self._purchases.values() if event_id is None or p.event_id == event_id]
        return sorted(found, key=lambda p: p.created_at, reverse=True)

    def search_purchases(self, term: str) -> list[Purchase]:
        needle = term.lower()
        with self._lock:
            found = [
                p
                for p in self._purchases.values()
                if needle in p.buyer.name.lower() or term in p.buyer.phone
            ]
        return sorted(found, key=lambda p: p.created_at, reverse=True)

    # Attendance

    def add_rsvp(self, rsvp: RsvpRecord) -> None:
        with self._lock:
            self._rsvps[rsvp.document_number] = rsvp

    def get_rsvp(self, document_number: DocumentNumber) -> RsvpRecord | None:
        with self._lock:
            return self._rsvps.get(document_number)

    def list_rsvps(self, event_id: EventId | None = None) -> list[RsvpRecord]:
        with self._lock:
            found = [r for r in self._rsvps.values() if event_id is None or r.event_id == event_id]
        return sorted(found, key=lambda r: r.created_at)

    def try_admit(self, document_number: DocumentNumber, count: int, at: datetime) -> RsvpRecord | None:
        with self._lock:
            current = self._rsvps.get(document_number)
            if current is None or current.checked_in_count + count > current.number_of_attendees:
                return None
            admitted = replace(
                current,
                checked_in_count=current.checked_in_count + count,
                last_checked_in_at=at,
            )
            self._rsvps[document_number] = admitted
            return admitted

    def add_check_in(self, check_in: CheckInEvent) -> None:
        with self._lock:
            self._check_ins.append(check_in)

    def list_check_ins(self, document_number: DocumentNumber | None = None) -> list[CheckInEvent]:
        with self._lock:
            found = [
                c for c in self._check_ins if document_number is None or c.document_number == document_number
            ]
        return sorted(found, key=lambda c: c.checked_in_at)
