"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Leave domain error mapping to the exception handler
- Never contain business logic
"""

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from ticketing.container import get_container
from ticketing.handlers.serializers import (
    CheckInEventSerializer,
    CheckInRequestSerializer,
    EventQuerySerializer,
    PurchaseSearchSerializer,
    PurchaseSerializer,
    RefundRequestSerializer,
    RefundResultSerializer,
    ReserveRequestSerializer,
    RsvpCreateSerializer,
    RsvpSerializer,
    TicketSalesSerializer,
    TicketTypeCreateSerializer,
    TicketTypeQuerySerializer,
    TicketTypeSerializer,
    TicketTypeUpdateSerializer,
)


def _validated(serializer_class, data) -> dict:
    serializer = serializer_class(data=data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


class ReserveView(APIView):
    """Handler for POST /tickets/reserve"""

    def post(self, request: Request) -> Response:
        body = _validated(ReserveRequestSerializer, request.data)
        purchase = get_container().reservations.reserve(
            event_id=body["eventId"],
            line_items=[
                {"ticketTypeId": line["ticketTypeId"], "quantity": line["quantity"]} for line in body["lineItems"]
            ],
            buyer=body["buyerDetails"],
            payment_token=body.get("paymentToken") or None,
        )
        return Response(PurchaseSerializer(purchase).data, status=status.HTTP_201_CREATED)


class RefundView(APIView):
    """Handler for POST /tickets/refund

    Without ticketTypeId and quantity the whole purchase is refunded.
    """

    def post(self, request: Request) -> Response:
        body = _validated(RefundRequestSerializer, request.data)
        reservations = get_container().reservations
        if "ticketTypeId" in body:
            result = reservations.refund(
                purchase_id=body["purchaseId"],
                ticket_type_id=body["ticketTypeId"],
                quantity=body["quantity"],
            )
        else:
            result = reservations.refund_purchase(purchase_id=body["purchaseId"])
        return Response(RefundResultSerializer(result).data)


class AvailabilityView(APIView):
    """Handler for GET /tickets/availability?ticketTypeId="""

    def get(self, request: Request) -> Response:
        query = _validated(TicketTypeQuerySerializer, request.query_params)
        ticket_type = get_container().reservations.availability(query["ticketTypeId"])
        return Response(
            {
                "ticketTypeId": str(ticket_type.id),
                "remainingAvailability": ticket_type.remaining_availability,
            }
        )


class TicketTypeListView(APIView):
    """Handler for GET/POST /tickets"""

    def get(self, request: Request) -> Response:
        query = _validated(EventQuerySerializer, request.query_params)
        ticket_types = get_container().catalog.list_ticket_types(query["eventId"])
        return Response(TicketTypeSerializer(ticket_types, many=True).data)

    def post(self, request: Request) -> Response:
        body = _validated(TicketTypeCreateSerializer, request.data)
        ticket_type = get_container().catalog.create_ticket_type(
            event_id=body["eventId"],
            label=body["label"],
            unit_price=body["unitPrice"],
            total_capacity=body["totalCapacity"],
            perks=body["perks"],
            status=body["status"],
        )
        return Response(TicketTypeSerializer(ticket_type).data, status=status.HTTP_201_CREATED)


class TicketTypeDetailView(APIView):
    """Handler for GET/PATCH/DELETE /tickets/{ticket_type_id}"""

    def get(self, request: Request, ticket_type_id: str) -> Response:
        ticket_type = get_container().catalog.get_ticket_type(ticket_type_id)
        return Response(TicketTypeSerializer(ticket_type).data)

    def patch(self, request: Request, ticket_type_id: str) -> Response:
        body = _validated(TicketTypeUpdateSerializer, request.data)
        ticket_type = get_container().catalog.update_ticket_type(
            ticket_type_id,
            label=body.get("label"),
            unit_price=body.get("unitPrice"),
            perks=body.get("perks"),
            status=body.get("status"),
        )
        return Response(TicketTypeSerializer(ticket_type).data)

    def delete(self, request: Request, ticket_type_id: str) -> Response:
        outcome = get_container().catalog.delete_ticket_type(ticket_type_id)
        return Response({"ticketTypeId": ticket_type_id, "outcome": outcome.value})


class TicketSalesView(APIView):
    """Handler for GET /tickets/analytics?eventId="""

    def get(self, request: Request) -> Response:
        query = _validated(EventQuerySerializer, request.query_params)
        report = get_container().reporting.ticket_sales(query["eventId"])
        return Response({"chartData": TicketSalesSerializer(report, many=True).data})


class PurchaseListView(APIView):
    """Handler for GET /purchases?search="""

    def get(self, request: Request) -> Response:
        query = _validated(PurchaseSearchSerializer, request.query_params)
        purchases = get_container().reservations.search_purchases(query["search"])
        return Response({"purchases": PurchaseSerializer(purchases, many=True).data})


class PurchaseDetailView(APIView):
    """Handler for GET /purchases/{purchase_id}"""

    def get(self, request: Request, purchase_id: str) -> Response:
        purchase = get_container().reservations.get_purchase(purchase_id)
        return Response(PurchaseSerializer(purchase).data)


class CheckInView(APIView):
    """Handler for POST /checkin"""

    def post(self, request: Request) -> Response:
        body = _validated(CheckInRequestSerializer, request.data)
        result = get_container().attendance.check_in(body["documentNumber"], body["checkedInCount"])
        return Response(
            {
                "success": True,
                "checkInId": str(result.check_in.id),
                "checkedInCount": result.rsvp.checked_in_count,
                "remaining": result.rsvp.remaining,
            }
        )


class RsvpCreateView(APIView):
    """Handler for POST /rsvps"""

    def post(self, request: Request) -> Response:
        body = _validated(RsvpCreateSerializer, request.data)
        rsvp = get_container().attendance.register(
            event_id=body["eventId"],
            full_name=body["fullName"],
            email_address=body["emailAddress"],
            number_of_attendees=body["numberOfAttendees"],
        )
        return Response(RsvpSerializer(rsvp).data, status=status.HTTP_201_CREATED)


class RsvpDetailView(APIView):
    """Handler for GET /rsvps/{document_number}"""

    def get(self, request: Request, document_number: str) -> Response:
        rsvp = get_container().attendance.get_rsvp(document_number)
        return Response(RsvpSerializer(rsvp).data)


class RsvpCheckInListView(APIView):
    """Handler for GET /rsvps/{document_number}/checkins"""

    def get(self, request: Request, document_number: str) -> Response:
        check_ins = get_container().attendance.list_check_ins(document_number)
        return Response(CheckInEventSerializer(check_ins, many=True).data)
