"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in ticketing/models.py (persistence layer).
"""

from dataclasses import dataclass, replace
from datetime import datetime

from ticketing.domain.errors import AlreadyRefundedError, LineItemNotFoundError
from ticketing.domain.rules import (
    PurchaseStatus,
    TicketTypeStatus,
    held_after_refund,
    purchase_status_after_refund,
)
from ticketing.domain.value_objects import (
    Capacity,
    CheckInId,
    DocumentNumber,
    EventId,
    Money,
    PurchaseId,
    TicketTypeId,
)


@dataclass(frozen=True)
class TicketType:
    """Domain representation of a TicketType."""

    id: TicketTypeId
    event_id: EventId
    label: str
    unit_price: Money
    total_capacity: Capacity
    remaining_availability: int
    perks: tuple[str, ...]
    status: TicketTypeStatus
    created_at: datetime
    updated_at: datetime
    has_purchases: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.remaining_availability <= self.total_capacity.value:
            raise ValueError("Remaining availability must be between 0 and total capacity")

    @property
    def is_on_sale(self) -> bool:
        return self.status == TicketTypeStatus.ON_SALE

    @property
    def sold(self) -> int:
        return self.total_capacity.value - self.remaining_availability


@dataclass(frozen=True)
class BuyerDetails:
    """Contact details of the person who paid."""

    name: str
    email: str
    phone: str


@dataclass(frozen=True)
class LineItem:
    """Units of one ticket type inside a purchase, priced at sale time."""

    ticket_type_id: TicketTypeId
    label: str
    unit_price_at_sale: Money
    quantity: int

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("Line item quantity must be positive")

    @property
    def subtotal(self) -> Money:
        return self.unit_price_at_sale.times(self.quantity)


@dataclass(frozen=True)
class Purchase:
    """Domain representation of a Purchase."""

    id: PurchaseId
    event_id: EventId
    buyer: BuyerDetails
    line_items: tuple[LineItem, ...]
    status: PurchaseStatus
    created_at: datetime
    updated_at: datetime
    refunded_quantity: int = 0
    payment_id: str | None = None
    version: int = 1

    @property
    def total(self) -> Money:
        total = Money.zero()
        for item in self.line_items:
            total = total + item.subtotal
        return total

    @property
    def quantity(self) -> int:
        return sum(item.quantity for item in self.line_items)

    def line_item_for(self, ticket_type_id: TicketTypeId) -> LineItem | None:
        for item in self.line_items:
            if item.ticket_type_id == ticket_type_id:
                return item
        return None

    def with_refund(self, ticket_type_id: TicketTypeId, quantity: int, at: datetime) -> "Purchase":
        """Return the purchase as it looks after refunding ``quantity`` units.

        Raises:
            AlreadyRefundedError: If the purchase is fully refunded.
            LineItemNotFoundError: If no line item holds this ticket type.
            RefundExceedsPurchasedError: If fewer units are held than requested.
        """
        if self.status == PurchaseStatus.REFUNDED:
            raise AlreadyRefundedError(str(self.id))
        item = self.line_item_for(ticket_type_id)
        if item is None:
            raise LineItemNotFoundError(str(ticket_type_id))

        held = held_after_refund(item.quantity, quantity)
        items = []
        for existing in self.line_items:
            if existing.ticket_type_id != ticket_type_id:
                items.append(existing)
            elif held > 0:
                items.append(replace(existing, quantity=held))

        refunded = self.refunded_quantity + quantity
        return replace(
            self,
            line_items=tuple(items),
            refunded_quantity=refunded,
            status=purchase_status_after_refund(self.status, len(items), refunded),
            updated_at=at,
        )

    def with_full_refund(self, at: datetime) -> "Purchase":
        """Return the purchase with every remaining unit refunded.

        Raises:
            AlreadyRefundedError: If the purchase is fully refunded.
        """
        if self.status == PurchaseStatus.REFUNDED:
            raise AlreadyRefundedError(str(self.id))
        refunded = self.refunded_quantity + self.quantity
        return replace(
            self,
            line_items=(),
            refunded_quantity=refunded,
            status=purchase_status_after_refund(self.status, 0, refunded),
            updated_at=at,
        )


@dataclass(frozen=True)
class RefundResult:
    """Outcome of a successful refund.

    ``refunded_lines`` holds the units given back, priced at sale time. A
    single-line refund also names its ticket type and the availability left
    after it; a whole-purchase refund leaves both as None.
    """

    purchase: Purchase
    quantity: int
    amount: Money
    refunded_lines: tuple[LineItem, ...]
    ticket_type_id: TicketTypeId | None = None
    remaining_availability: int | None = None


@dataclass(frozen=True)
class RsvpRecord:
    """Domain representation of an RSVP."""

    document_number: DocumentNumber
    event_id: EventId
    full_name: str
    email_address: str
    number_of_attendees: int
    checked_in_count: int
    created_at: datetime
    last_checked_in_at: datetime | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.checked_in_count <= self.number_of_attendees:
            raise ValueError("Checked-in count must be between 0 and the number of attendees")

    @property
    def remaining(self) -> int:
        return self.number_of_attendees - self.checked_in_count


@dataclass(frozen=True)
class CheckInEvent:
    """Append-only audit record of guests admitted against an RSVP."""

    id: CheckInId
    document_number: DocumentNumber
    event_id: EventId
    checked_in_count: int
    checked_in_at: datetime
    guest_name: str
    email_address: str


@dataclass(frozen=True)
class CheckInResult:
    """A check-in together with the RSVP as it stood right after it."""

    check_in: CheckInEvent
    rsvp: RsvpRecord
