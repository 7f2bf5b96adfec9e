"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
Each model is an independent collection keyed by its identity field; references
between them are plain ids, so referential integrity is the services' job.
"""

import uuid

from django.db import models

from ticketing.domain.rules import PurchaseStatus, TicketTypeStatus


class TicketType(models.Model):
    """Persistence model for ticket types."""

    class Status(models.TextChoices):
        DRAFT = TicketTypeStatus.DRAFT.value, "Draft"
        ON_SALE = TicketTypeStatus.ON_SALE.value, "On sale"
        CLOSED = TicketTypeStatus.CLOSED.value, "Closed"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event_id = models.UUIDField(db_index=True)
    label = models.CharField(max_length=100)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    total_capacity = models.PositiveIntegerField()
    remaining_availability = models.PositiveIntegerField()
    perks = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.DRAFT)
    has_purchases = models.BooleanField(default=False)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(remaining_availability__lte=models.F("total_capacity")),
                name="ticket_type_remaining_within_capacity",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.label} - {self.unit_price}"


class Purchase(models.Model):
    """Persistence model for purchases.

    Line items are stored as a JSON document so a refund rewrites them in
    the same row update as the status and version.
    """

    class Status(models.TextChoices):
        COMPLETED = PurchaseStatus.COMPLETED.value, "Completed"
        PARTIALLY_REFUNDED = PurchaseStatus.PARTIALLY_REFUNDED.value, "Partially refunded"
        REFUNDED = PurchaseStatus.REFUNDED.value, "Refunded"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event_id = models.UUIDField(db_index=True)
    buyer_name = models.CharField(max_length=255)
    buyer_email = models.EmailField()
    buyer_phone = models.CharField(max_length=32)
    line_items = models.JSONField(default=list)
    status = models.CharField(max_length=24, choices=Status.choices, default=Status.COMPLETED)
    refunded_quantity = models.PositiveIntegerField(default=0)
    payment_id = models.CharField(max_length=64, blank=True, null=True)
    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["event_id", "status"], name="purchase_event_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.buyer_name} - {self.status}"


class Rsvp(models.Model):
    """Persistence model for RSVP records."""

    document_number = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event_id = models.UUIDField(db_index=True)
    full_name = models.CharField(max_length=255)
    email_address = models.EmailField()
    number_of_attendees = models.PositiveIntegerField()
    checked_in_count = models.PositiveIntegerField(default=0)
    last_checked_in_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField()

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(checked_in_count__lte=models.F("number_of_attendees")),
                name="rsvp_checked_in_within_attendees",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.full_name} ({self.checked_in_count}/{self.number_of_attendees})"


class CheckIn(models.Model):
    """Persistence model for check-in audit events."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    document_number = models.UUIDField(db_index=True)
    event_id = models.UUIDField()
    checked_in_count = models.PositiveIntegerField()
    checked_in_at = models.DateTimeField()
    guest_name = models.CharField(max_length=255)
    email_address = models.EmailField()

    class Meta:
        ordering = ["checked_in_at"]

    def __str__(self) -> str:
        return f"{self.guest_name} +{self.checked_in_count}"
