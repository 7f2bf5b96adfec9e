"""Serializers for request schemas and domain model responses.

Request serializers are the typed schema of each operation: a body that
fails them is rejected before any service or store is touched. Response
serializers read domain models through dotted sources.
"""

from rest_framework import serializers

from ticketing.domain import TicketTypeStatus


class BuyerDetailsSerializer(serializers.Serializer):
    """Buyer contact details, used for both input and output."""

    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=32)


class ReservationLineSerializer(serializers.Serializer):
    ticketTypeId = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class ReserveRequestSerializer(serializers.Serializer):
    """Body of POST /tickets/reserve."""

    eventId = serializers.UUIDField()
    lineItems = ReservationLineSerializer(many=True, allow_empty=False)
    buyerDetails = BuyerDetailsSerializer()
    paymentToken = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=64)


class RefundRequestSerializer(serializers.Serializer):
    """Body of POST /tickets/refund.

    ticketTypeId and quantity come together; omitting both refunds the
    whole purchase.
    """

    purchaseId = serializers.UUIDField()
    ticketTypeId = serializers.UUIDField(required=False)
    quantity = serializers.IntegerField(min_value=1, required=False)

    def validate(self, attrs):
        if ("ticketTypeId" in attrs) != ("quantity" in attrs):
            raise serializers.ValidationError("ticketTypeId and quantity must be given together")
        return attrs


class CheckInRequestSerializer(serializers.Serializer):
    """Body of POST /checkin."""

    documentNumber = serializers.UUIDField()
    checkedInCount = serializers.IntegerField(min_value=1)


class TicketTypeQuerySerializer(serializers.Serializer):
    ticketTypeId = serializers.UUIDField()


class EventQuerySerializer(serializers.Serializer):
    eventId = serializers.UUIDField()


class PurchaseSearchSerializer(serializers.Serializer):
    search = serializers.CharField(max_length=100)


class TicketTypeCreateSerializer(serializers.Serializer):
    """Body of POST /tickets."""

    eventId = serializers.UUIDField()
    label = serializers.CharField(max_length=100)
    unitPrice = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    totalCapacity = serializers.IntegerField(min_value=0)
    perks = serializers.ListField(child=serializers.CharField(max_length=255), required=False, default=list)
    status = serializers.ChoiceField(
        choices=[TicketTypeStatus.DRAFT.value, TicketTypeStatus.ON_SALE.value],
        default=TicketTypeStatus.DRAFT.value,
    )


class TicketTypeUpdateSerializer(serializers.Serializer):
    """Body of PATCH /tickets/{ticket_type_id}. Availability is not editable."""

    label = serializers.CharField(max_length=100, required=False)
    unitPrice = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    perks = serializers.ListField(child=serializers.CharField(max_length=255), required=False)
    status = serializers.ChoiceField(choices=[status.value for status in TicketTypeStatus], required=False)


class RsvpCreateSerializer(serializers.Serializer):
    """Body of POST /rsvps."""

    eventId = serializers.UUIDField()
    fullName = serializers.CharField(max_length=255)
    emailAddress = serializers.EmailField()
    numberOfAttendees = serializers.IntegerField(min_value=1)


class TicketTypeSerializer(serializers.Serializer):
    """Serializer for TicketType domain model."""

    ticketTypeId = serializers.UUIDField(source="id.value")
    eventId = serializers.UUIDField(source="event_id.value")
    label = serializers.CharField()
    unitPrice = serializers.CharField(source="unit_price")
    totalCapacity = serializers.IntegerField(source="total_capacity.value")
    remainingAvailability = serializers.IntegerField(source="remaining_availability")
    perks = serializers.ListField(child=serializers.CharField())
    status = serializers.CharField(source="status.value")
    createdAt = serializers.DateTimeField(source="created_at")
    updatedAt = serializers.DateTimeField(source="updated_at")


class LineItemSerializer(serializers.Serializer):
    """Serializer for LineItem domain model."""

    ticketTypeId = serializers.UUIDField(source="ticket_type_id.value")
    label = serializers.CharField()
    unitPriceAtSale = serializers.CharField(source="unit_price_at_sale")
    quantity = serializers.IntegerField()


class PurchaseSerializer(serializers.Serializer):
    """Serializer for Purchase domain model."""

    purchaseId = serializers.UUIDField(source="id.value")
    eventId = serializers.UUIDField(source="event_id.value")
    buyerDetails = BuyerDetailsSerializer(source="buyer")
    lineItems = LineItemSerializer(source="line_items", many=True)
    status = serializers.CharField(source="status.value")
    total = serializers.CharField()
    refundedQuantity = serializers.IntegerField(source="refunded_quantity")
    paymentId = serializers.CharField(source="payment_id", allow_null=True)
    createdAt = serializers.DateTimeField(source="created_at")
    updatedAt = serializers.DateTimeField(source="updated_at")


class RefundResultSerializer(serializers.Serializer):
    """Serializer for RefundResult domain model."""

    purchaseId = serializers.UUIDField(source="purchase.id.value")
    status = serializers.CharField(source="purchase.status.value")
    ticketTypeId = serializers.UUIDField(source="ticket_type_id.value", allow_null=True)
    refundedQuantity = serializers.IntegerField(source="quantity")
    amount = serializers.CharField()
    remainingAvailability = serializers.IntegerField(source="remaining_availability", allow_null=True)
    refundedLineItems = LineItemSerializer(source="refunded_lines", many=True)
    lineItems = LineItemSerializer(source="purchase.line_items", many=True)


class RsvpSerializer(serializers.Serializer):
    """Serializer for RsvpRecord domain model."""

    documentNumber = serializers.UUIDField(source="document_number.value")
    eventId = serializers.UUIDField(source="event_id.value")
    fullName = serializers.CharField(source="full_name")
    emailAddress = serializers.EmailField(source="email_address")
    numberOfAttendees = serializers.IntegerField(source="number_of_attendees")
    checkedInCount = serializers.IntegerField(source="checked_in_count")
    remaining = serializers.IntegerField()
    lastCheckedInAt = serializers.DateTimeField(source="last_checked_in_at", allow_null=True)
    createdAt = serializers.DateTimeField(source="created_at")


class CheckInEventSerializer(serializers.Serializer):
    """Serializer for CheckInEvent domain model."""

    checkInId = serializers.UUIDField(source="id.value")
    documentNumber = serializers.UUIDField(source="document_number.value")
    checkedInCount = serializers.IntegerField(source="checked_in_count")
    checkedInAt = serializers.DateTimeField(source="checked_in_at")
    guestName = serializers.CharField(source="guest_name")
    emailAddress = serializers.EmailField(source="email_address")


class TicketSalesSerializer(serializers.Serializer):
    """Serializer for one row of the sales report."""

    ticketTypeId = serializers.UUIDField(source="ticket_type_id.value")
    type = serializers.CharField(source="label")
    sold = serializers.IntegerField()
    revenue = serializers.CharField()
