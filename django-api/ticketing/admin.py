from django.contrib import admin

from ticketing.models import CheckIn, Purchase, Rsvp, TicketType


class NoDeleteAdmin(admin.ModelAdmin):
    """Admin for records that are never deleted."""

    def has_delete_permission(self, request, obj=None) -> bool:
        return False


@admin.register(TicketType)
class TicketTypeAdmin(NoDeleteAdmin):
    list_display = ["label", "event_id", "unit_price", "remaining_availability", "total_capacity", "status"]
    list_filter = ["status"]
    search_fields = ["label", "event_id"]
    readonly_fields = ["remaining_availability", "total_capacity", "has_purchases", "status"]


@admin.register(Purchase)
class PurchaseAdmin(NoDeleteAdmin):
    list_display = ["buyer_name", "event_id", "status", "refunded_quantity", "created_at"]
    list_filter = ["status"]
    search_fields = ["buyer_name", "buyer_phone", "buyer_email"]
    readonly_fields = ["line_items", "status", "refunded_quantity", "version", "payment_id"]


@admin.register(Rsvp)
class RsvpAdmin(NoDeleteAdmin):
    list_display = ["full_name", "event_id", "number_of_attendees", "checked_in_count", "last_checked_in_at"]
    search_fields = ["full_name", "email_address"]
    readonly_fields = ["checked_in_count", "last_checked_in_at"]


@admin.register(CheckIn)
class CheckInAdmin(NoDeleteAdmin):
    list_display = ["guest_name", "document_number", "checked_in_count", "checked_in_at"]
    search_fields = ["guest_name", "email_address"]

    def has_change_permission(self, request, obj=None) -> bool:
        return False
