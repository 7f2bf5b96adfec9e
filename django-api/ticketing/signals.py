"""Django signals for cache invalidation.

The sales report is cached per event. Services send ``ticket_sales_changed``
after every committed purchase, refund or catalog change; ORM saves made
outside the services (admin edits) are caught by the model receivers.
"""

from django.core.cache import cache
from django.db.models.signals import post_delete, post_save
from django.dispatch import Signal, receiver

from ticketing.models import Purchase, TicketType

ticket_sales_changed = Signal()


def ticket_sales_cache_key(event_id: str) -> str:
    return f"ticketing:sales:{event_id}"


@receiver(ticket_sales_changed)
def invalidate_ticket_sales(sender, event_id: str, **kwargs):
    """Drop the cached sales report of an event."""
    cache.delete(ticket_sales_cache_key(event_id))


@receiver(post_save, sender=Purchase)
def invalidate_purchase_cache(sender, instance, **kwargs):
    """Invalidate the sales report when a purchase is saved."""
    cache.delete(ticket_sales_cache_key(str(instance.event_id)))


@receiver([post_save, post_delete], sender=TicketType)
def invalidate_ticket_type_cache(sender, instance, **kwargs):
    """Invalidate the sales report when a ticket type is saved or deleted."""
    cache.delete(ticket_sales_cache_key(str(instance.event_id)))
