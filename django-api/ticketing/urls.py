from django.urls import path

from ticketing.handlers import (
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

urlpatterns = [
    path("tickets", TicketTypeListView.as_view(), name="ticket-type-list"),
    path("tickets/reserve", ReserveView.as_view(), name="ticket-reserve"),
    path("tickets/refund", RefundView.as_view(), name="ticket-refund"),
    path("tickets/availability", AvailabilityView.as_view(), name="ticket-availability"),
    path("tickets/analytics", TicketSalesView.as_view(), name="ticket-analytics"),
    path("tickets/<str:ticket_type_id>", TicketTypeDetailView.as_view(), name="ticket-type-detail"),
    path("purchases", PurchaseListView.as_view(), name="purchase-list"),
    path("purchases/<str:purchase_id>", PurchaseDetailView.as_view(), name="purchase-detail"),
    path("checkin", CheckInView.as_view(), name="checkin"),
    path("rsvps", RsvpCreateView.as_view(), name="rsvp-create"),
    path("rsvps/<str:document_number>", RsvpDetailView.as_view(), name="rsvp-detail"),
    path(
        "rsvps/<str:document_number>/checkins",
        RsvpCheckInListView.as_view(),
        name="rsvp-checkin-list",
    ),
]
