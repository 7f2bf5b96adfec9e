from ticketing.handlers.views import (
    AvailabilityView,
    CheckInView,
    PurchaseDetailView,
    PurchaseListView,
    RefundView,
    ReserveView,
    RsvpCheckInListView,
    RsvpCreateView,
    RsvpDetailView,
    TicketSalesView,
    TicketTypeDetailView,
    TicketTypeListView,
)

__all__ = [
    "AvailabilityView",
    "CheckInView",
    "PurchaseDetailView",
    "PurchaseListView",
    "RefundView",
    "ReserveView",
    "RsvpCheckInListView",
    "RsvpCreateView",
    "RsvpDetailView",
    "TicketSalesView",
    "TicketTypeDetailView",
    "TicketTypeListView",
]
