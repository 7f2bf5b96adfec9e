"""Domain error codes for the ticketing module."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Domain error codes."""

    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_IDENTIFIER = "INVALID_IDENTIFIER"
    TICKET_TYPE_NOT_FOUND = "TICKET_TYPE_NOT_FOUND"
    TICKET_TYPE_NOT_ON_SALE = "TICKET_TYPE_NOT_ON_SALE"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    INSUFFICIENT_AVAILABILITY = "INSUFFICIENT_AVAILABILITY"
    PURCHASE_NOT_FOUND = "PURCHASE_NOT_FOUND"
    LINE_ITEM_NOT_FOUND = "LINE_ITEM_NOT_FOUND"
    REFUND_EXCEEDS_PURCHASED = "REFUND_EXCEEDS_PURCHASED"
    ALREADY_REFUNDED = "ALREADY_REFUNDED"
    PAYMENT_DECLINED = "PAYMENT_DECLINED"
    RSVP_NOT_FOUND = "RSVP_NOT_FOUND"
    EXCEEDS_REMAINING_CAPACITY = "EXCEEDS_REMAINING_CAPACITY"
    CONCURRENT_MODIFICATION = "CONCURRENT_MODIFICATION"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    PARTIAL_FAILURE = "PARTIAL_FAILURE"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    def details(self) -> dict[str, Any]:
        """Extra, user-safe context exposed alongside the message."""
        return {}


class ValidationError(DomainError):
    """Malformed input or a violated precondition. Never retried."""


class NotFoundError(DomainError):
    """A referenced record does not exist."""


class ConflictError(DomainError):
    """A business rule rejected the operation given the current state."""


class InvalidRequestError(ValidationError):
    """Raised when a request value fails validation."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_REQUEST, message=message)


class InvalidIdentifierError(ValidationError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, field: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_IDENTIFIER,
            message=f"Invalid {field} format",
        )
        self.field = field


class TicketTypeNotFoundError(NotFoundError):
    """Raised when a ticket type is not found."""

    def __init__(self, ticket_type_id: str) -> None:
        super().__init__(
            code=ErrorCode.TICKET_TYPE_NOT_FOUND,
            message="Ticket type not found",
        )
        self.ticket_type_id = ticket_type_id

    def details(self) -> dict[str, Any]:
        return {"ticketTypeId": self.ticket_type_id}


class TicketTypeNotOnSaleError(ValidationError):
    """Raised when a ticket type cannot be sold for the requested event."""

    def __init__(self, ticket_type_id: str) -> None:
        super().__init__(
            code=ErrorCode.TICKET_TYPE_NOT_ON_SALE,
            message="Ticket type is not on sale for this event",
        )
        self.ticket_type_id = ticket_type_id

    def details(self) -> dict[str, Any]:
        return {"ticketTypeId": self.ticket_type_id}


class InvalidStatusTransitionError(ValidationError):
    """Raised when a lifecycle status change is not allowed."""

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_STATUS_TRANSITION,
            message=f"Cannot change status from {current} to {requested}",
        )
        self.current = current
        self.requested = requested


class InsufficientAvailabilityError(ConflictError):
    """Raised when a ticket type has fewer units left than requested."""

    def __init__(self, ticket_type_id: str, remaining: int | None = None) -> None:
        super().__init__(
            code=ErrorCode.INSUFFICIENT_AVAILABILITY,
            message="Not enough tickets available",
        )
        self.ticket_type_id = ticket_type_id
        self.remaining = remaining

    def details(self) -> dict[str, Any]:
        return {"ticketTypeId": self.ticket_type_id, "remaining": self.remaining}


class PurchaseNotFoundError(NotFoundError):
    """Raised when a purchase is not found."""

    def __init__(self, purchase_id: str) -> None:
        super().__init__(
            code=ErrorCode.PURCHASE_NOT_FOUND,
            message="Purchase not found",
        )
        self.purchase_id = purchase_id


class LineItemNotFoundError(NotFoundError):
    """Raised when a purchase holds no units of the given ticket type."""

    def __init__(self, ticket_type_id: str) -> None:
        super().__init__(
            code=ErrorCode.LINE_ITEM_NOT_FOUND,
            message="Purchase has no tickets of this type",
        )
        self.ticket_type_id = ticket_type_id

    def details(self) -> dict[str, Any]:
        return {"ticketTypeId": self.ticket_type_id}


class RefundExceedsPurchasedError(ValidationError):
    """Raised when a refund asks for more units than the purchase still holds."""

    def __init__(self, held: int) -> None:
        super().__init__(
            code=ErrorCode.REFUND_EXCEEDS_PURCHASED,
            message=f"Cannot refund more than the {held} tickets held",
        )
        self.held = held

    def details(self) -> dict[str, Any]:
        return {"held": self.held}


class AlreadyRefundedError(ConflictError):
    """Raised when a refund targets a fully refunded purchase."""

    def __init__(self, purchase_id: str) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_REFUNDED,
            message="Purchase is already fully refunded",
        )
        self.purchase_id = purchase_id


class ConcurrentModificationError(ConflictError):
    """Raised when a record changed between read and compare-and-swap write."""

    def __init__(self, record: str) -> None:
        super().__init__(
            code=ErrorCode.CONCURRENT_MODIFICATION,
            message=f"The {record} was modified concurrently, retry the request",
        )
        self.record = record


class PaymentDeclinedError(DomainError):
    """Raised when the payment collaborator refuses the charge."""

    def __init__(self, reason: str = "Payment was declined") -> None:
        super().__init__(code=ErrorCode.PAYMENT_DECLINED, message=reason)


class RsvpNotFoundError(NotFoundError):
    """Raised when no RSVP matches a document number."""

    def __init__(self, document_number: str) -> None:
        super().__init__(
            code=ErrorCode.RSVP_NOT_FOUND,
            message="No RSVP found for this document number",
        )
        self.document_number = document_number


class ExceedsRemainingCapacityError(ConflictError):
    """Raised when a check-in asks for more guests than remain un-admitted."""

    def __init__(self, remaining: int) -> None:
        super().__init__(
            code=ErrorCode.EXCEEDS_REMAINING_CAPACITY,
            message=f"Cannot check in more than remaining {remaining} guests",
        )
        self.remaining = remaining

    def details(self) -> dict[str, Any]:
        return {"remaining": self.remaining}


class TransientStoreError(DomainError):
    """Raised by stores when the backing database is temporarily unavailable."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            code=ErrorCode.STORE_UNAVAILABLE,
            message="Storage is temporarily unavailable",
        )
        self.operation = operation


class PartialFailureError(DomainError):
    """Raised when a compensating action could not restore a counter.

    The listed ticket type ids still carry a decrement that no purchase
    accounts for; reconciliation must repair them.
    """

    def __init__(self, operation: str, unrestored: dict[str, int]) -> None:
        super().__init__(
            code=ErrorCode.PARTIAL_FAILURE,
            message="Operation failed and could not be fully rolled back",
        )
        self.operation = operation
        self.unrestored = unrestored
