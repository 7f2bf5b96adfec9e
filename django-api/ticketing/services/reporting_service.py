"""Read-side ticket sales report.

Figures are snapshots for dashboards: they are cached briefly and may trail
the counters by up to ``TICKETING_ANALYTICS_CACHE_SECONDS``.
"""

from dataclasses import dataclass

from django.conf import settings
from django.core.cache import cache

from ticketing.domain import EventId, Money, PurchaseStatus, TicketTypeId
from ticketing.services.retry import retry_transient
from ticketing.services.validation import parse_id
from ticketing.signals import ticket_sales_cache_key
from ticketing.stores.interfaces import TicketingStore

COUNTED_STATUSES = frozenset({PurchaseStatus.COMPLETED, PurchaseStatus.PARTIALLY_REFUNDED})


@dataclass(frozen=True)
class TicketSales:
    ticket_type_id: TicketTypeId
    label: str
    sold: int
    revenue: Money


class ReportingService:
    """Aggregates units sold and revenue per ticket type."""

    def __init__(self, store: TicketingStore) -> None:
        self._store = store

    def ticket_sales(self, event_id: str) -> list[TicketSales]:
        """Return sales per ticket type for an event, largest revenue first.

        Raises:
            InvalidIdentifierError: If the event_id is not a valid UUID.
        """
        parsed = parse_id(EventId, event_id, "eventId")
        key = ticket_sales_cache_key(str(parsed))
        report = cache.get(key)
        if report is None:
            report = self._aggregate(parsed)
            cache.set(key, report, timeout=settings.TICKETING_ANALYTICS_CACHE_SECONDS)
        return report

    @retry_transient
    def _aggregate(self, event_id: EventId) -> list[TicketSales]:
        sold: dict[TicketTypeId, int] = {}
        revenue: dict[TicketTypeId, Money] = {}
        labels: dict[TicketTypeId, str] = {}
        for purchase in self._store.list_purchases(event_id):
            if purchase.status not in COUNTED_STATUSES:
                continue
            for item in purchase.line_items:
                key = item.ticket_type_id
                labels.setdefault(key, item.label)
                sold[key] = sold.get(key, 0) + item.quantity
                revenue[key] = revenue.get(key, Money.zero()) + item.subtotal

        return sorted(
            (
                TicketSales(ticket_type_id=key, label=labels[key], sold=sold[key], revenue=revenue[key])
                for key in sold
            ),
            key=lambda row: (-row.revenue.amount, row.label),
        )
