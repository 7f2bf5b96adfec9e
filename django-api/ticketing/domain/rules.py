"""State machines and counter rules shared by the reservation and attendance services.

Everything here is pure: functions take domain values and either return the
new value or raise a domain error. Stores enforce the same rules atomically
when they apply conditional updates.
"""

from enum import Enum

from ticketing.domain.errors import (
    ExceedsRemainingCapacityError,
    InvalidStatusTransitionError,
    RefundExceedsPurchasedError,
)


class TicketTypeStatus(str, Enum):
    """Lifecycle of a ticket type."""

    DRAFT = "draft"
    ON_SALE = "onSale"
    CLOSED = "closed"


class PurchaseStatus(str, Enum):
    """Lifecycle of a purchase. Transitions only move forward."""

    COMPLETED = "completed"
    PARTIALLY_REFUNDED = "partiallyRefunded"
    REFUNDED = "refunded"


TICKET_TYPE_TRANSITIONS: dict[TicketTypeStatus, frozenset[TicketTypeStatus]] = {
    TicketTypeStatus.DRAFT: frozenset({TicketTypeStatus.ON_SALE, TicketTypeStatus.CLOSED}),
    TicketTypeStatus.ON_SALE: frozenset({TicketTypeStatus.DRAFT, TicketTypeStatus.CLOSED}),
    TicketTypeStatus.CLOSED: frozenset(),
}

_PURCHASE_ORDER = {
    PurchaseStatus.COMPLETED: 0,
    PurchaseStatus.PARTIALLY_REFUNDED: 1,
    PurchaseStatus.REFUNDED: 2,
}


def ensure_ticket_type_transition(current: TicketTypeStatus, requested: TicketTypeStatus) -> TicketTypeStatus:
    """Return ``requested`` if the lifecycle allows moving there from ``current``."""
    if current == requested:
        return current
    if requested not in TICKET_TYPE_TRANSITIONS[current]:
        raise InvalidStatusTransitionError(current.value, requested.value)
    return requested


def purchase_status_after_refund(
    current: PurchaseStatus,
    items_remaining: int,
    refunded_quantity: int,
) -> PurchaseStatus:
    """Recompute a purchase status once a refund has been applied.

    ``refunded`` iff no line items remain; ``partiallyRefunded`` iff some
    quantity was ever refunded; otherwise the status is left unchanged.
    """
    if items_remaining == 0:
        new_status = PurchaseStatus.REFUNDED
    elif refunded_quantity > 0:
        new_status = PurchaseStatus.PARTIALLY_REFUNDED
    else:
        new_status = current
    if _PURCHASE_ORDER[new_status] < _PURCHASE_ORDER[current]:
        raise InvalidStatusTransitionError(current.value, new_status.value)
    return new_status


def remaining_after_refund(remaining: int, quantity: int, total_capacity: int) -> int:
    """Availability after returning ``quantity`` units, never above capacity."""
    return min(remaining + quantity, total_capacity)


def held_after_refund(held: int, quantity: int) -> int:
    """Units left on a line item after refunding ``quantity`` of them."""
    if quantity > held:
        raise RefundExceedsPurchasedError(held)
    return held - quantity


def ensure_can_admit(number_of_attendees: int, checked_in_count: int, count: int) -> int:
    """Return the new checked-in count, or raise if it would overflow the RSVP."""
    remaining = number_of_attendees - checked_in_count
    if count > remaining:
        raise ExceedsRemainingCapacityError(remaining=remaining)
    return checked_in_count + count
