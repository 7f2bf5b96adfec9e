"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.

The counters ``remaining_availability`` and ``checked_in_count`` are only
changed through the conditional-update methods below; implementations must
apply each of them as a single atomic step against the stored value, never as
a read-modify-write in application code.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime

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


class InventoryStore(ABC):
    """Interface for ticket type persistence and availability counters."""

    @abstractmethod
    def add_ticket_type(self, ticket_type: TicketType) -> None:
        """Persist a new ticket type."""
        ...

    @abstractmethod
    def get_ticket_type(self, ticket_type_id: TicketTypeId) -> TicketType | None:
        """Return a ticket type by ID, or None if not found."""
        ...

    @abstractmethod
    def list_ticket_types(self, event_id: EventId | None = None) -> list[TicketType]:
        """Return ticket types ordered by created_at ascending, optionally for one event."""
        ...

    @abstractmethod
    def save_ticket_type_details(self, ticket_type: TicketType) -> None:
        """Persist label, price, perks and status. Counters are left untouched."""
        ...

    @abstractmethod
    def delete_unsold_ticket_type(self, ticket_type_id: TicketTypeId) -> bool:
        """Physically remove a ticket type that has never been sold.

        Returns False, without changing anything, once any unit was sold.
        """
        ...

    @abstractmethod
    def try_decrement_availability(self, ticket_type_id: TicketTypeId, quantity: int) -> bool:
        """Take ``quantity`` units if the type is on sale and enough remain.

        Returns False, without changing anything, when the condition fails.
        Marks the ticket type as having purchases on success.
        """
        ...

    @abstractmethod
    def increment_availability(self, ticket_type_id: TicketTypeId, quantity: int) -> int | None:
        """Return ``quantity`` units, capped at total capacity.

        Returns the new remaining availability, or None if the type is missing.
        """
        ...


class PurchaseLedger(ABC):
    """Interface for purchase persistence."""

    @abstractmethod
    def add_purchase(self, purchase: Purchase) -> None:
        """Persist a new purchase."""
        ...

    @abstractmethod
    def get_purchase(self, purchase_id: PurchaseId) -> Purchase | None:
        """Return a purchase by ID, or None if not found."""
        ...

    @abstractmethod
    def replace_purchase(self, purchase: Purchase, expected_version: int) -> bool:
        """Overwrite a purchase if its stored version still equals ``expected_version``.

        The stored version becomes ``purchase.version``. Returns False on a
        version mismatch.
        """
        ...

    @abstractmethod
    def list_purchases(self, event_id: EventId | None = None) -> list[Purchase]:
        """Return purchases, newest first, optionally restricted to one event."""
        ...

    @abstractmethod
    def search_purchases(self, term: str) -> list[Purchase]:
        """Return purchases whose buyer name contains ``term`` (case-insensitive)
        or whose buyer phone contains it."""
        ...


class AttendanceStore(ABC):
    """Interface for RSVP and check-in persistence."""

    @abstractmethod
    def add_rsvp(self, rsvp: RsvpRecord) -> None:
        """Persist a new RSVP."""
        ...

    @abstractmethod
    def get_rsvp(self, document_number: DocumentNumber) -> RsvpRecord | None:
        """Return an RSVP by document number, or None if not found."""
        ...

    @abstractmethod
    def list_rsvps(self, event_id: EventId | None = None) -> list[RsvpRecord]:
        """Return RSVPs ordered by created_at ascending."""
        ...

    @abstractmethod
    def try_admit(self, document_number: DocumentNumber, count: int, at: datetime) -> RsvpRecord | None:
        """Add ``count`` to checked_in_count if it stays within number_of_attendees.

        Returns the RSVP as written by this update. Returns None, without
        changing anything, when the RSVP is missing or the condition fails.
        """
        ...

    @abstractmethod
    def add_check_in(self, check_in: CheckInEvent) -> None:
        """Append a check-in event."""
        ...

    @abstractmethod
    def list_check_ins(self, document_number: DocumentNumber | None = None) -> list[CheckInEvent]:
        """Return check-in events ordered by checked_in_at ascending."""
        ...


class TicketingStore(InventoryStore, PurchaseLedger, AttendanceStore):
    """A store handle offering every collection plus multi-record transactions.

    ``rolls_back_on_error`` declares that a block raising out of ``atomic()``
    leaves no trace of its writes. When it is False, a compensating write that
    fails is reported as a partial failure.
    """

    rolls_back_on_error: bool = False

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Return a context manager that commits every write inside it together,
        or none of them if the block raises."""
        ...

    def close(self) -> None:
        """Release resources held by the store."""
