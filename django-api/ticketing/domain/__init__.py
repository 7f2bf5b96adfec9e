from ticketing.domain.models import (
    BuyerDetails,
    CheckInEvent,
    CheckInResult,
    LineItem,
    Purchase,
    RefundResult,
    RsvpRecord,
    TicketType,
)
from ticketing.domain.rules import PurchaseStatus, TicketTypeStatus
from ticketing.domain.value_objects import (
    Capacity,
    CheckInId,
    DocumentNumber,
    EventId,
    Money,
    PurchaseId,
    Quantity,
    TicketTypeId,
)

__all__ = [
    "TicketType",
    "BuyerDetails",
    "LineItem",
    "Purchase",
    "RefundResult",
    "RsvpRecord",
    "CheckInEvent",
    "CheckInResult",
    "TicketTypeStatus",
    "PurchaseStatus",
    "EventId",
    "TicketTypeId",
    "PurchaseId",
    "DocumentNumber",
    "CheckInId",
    "Money",
    "Capacity",
    "Quantity",
]
