"""Consistency checks between counters and the records that justify them.

For every ticket type, units missing from availability must equal the units
held by purchases. For every RSVP, the admitted count must equal the sum of
its check-in events.
"""

from dataclasses import dataclass

import structlog

from ticketing.domain import EventId
from ticketing.services.retry import retry_transient
from ticketing.services.validation import parse_id
from ticketing.stores.interfaces import TicketingStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Discrepancy:
    """A counter whose stored value disagrees with its records."""

    kind: str
    record_id: str
    expected: int
    actual: int

    def __str__(self) -> str:
        return f"{self.kind} {self.record_id}: expected {self.expected}, stored {self.actual}"


class ReconciliationService:
    def __init__(self, store: TicketingStore) -> None:
        self._store = store

    @retry_transient
    def check_inventory(self, event_id: str | None = None) -> list[Discrepancy]:
        """Compare sold units per ticket type against purchase line items."""
        parsed = parse_id(EventId, event_id, "eventId") if event_id is not None else None
        held: dict[str, int] = {}
        for purchase in self._store.list_purchases(parsed):
            for item in purchase.line_items:
                key = str(item.ticket_type_id)
                held[key] = held.get(key, 0) + item.quantity

        found = []
        for ticket_type in self._store.list_ticket_types(parsed):
            key = str(ticket_type.id)
            if ticket_type.sold != held.get(key, 0):
                found.append(
                    Discrepancy(
                        kind="inventory",
                        record_id=key,
                        expected=held.get(key, 0),
                        actual=ticket_type.sold,
                    )
                )
        for discrepancy in found:
            logger.warning(
                "inventory_discrepancy",
                ticket_type_id=discrepancy.record_id,
                held=discrepancy.expected,
                sold=discrepancy.actual,
            )
        return found

    @retry_transient
    def check_attendance(self, event_id: str | None = None) -> list[Discrepancy]:
        """Compare each RSVP's checked-in count against its check-in events."""
        parsed = parse_id(EventId, event_id, "eventId") if event_id is not None else None
        admitted: dict[str, int] = {}
        for check_in in self._store.list_check_ins():
            key = str(check_in.document_number)
            admitted[key] = admitted.get(key, 0) + check_in.checked_in_count

        found = []
        for rsvp in self._store.list_rsvps(parsed):
            key = str(rsvp.document_number)
            if rsvp.checked_in_count != admitted.get(key, 0):
                found.append(
                    Discrepancy(
                        kind="attendance",
                        record_id=key,
                        expected=admitted.get(key, 0),
                        actual=rsvp.checked_in_count,
                    )
                )
        for discrepancy in found:
            logger.warning(
                "attendance_discrepancy",
                document_number=discrepancy.record_id,
                logged=discrepancy.expected,
                stored=discrepancy.actual,
            )
        return found
