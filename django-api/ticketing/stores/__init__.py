from ticketing.stores.interfaces import AttendanceStore, InventoryStore, PurchaseLedger, TicketingStore

__all__ = [
    "InventoryStore",
    "PurchaseLedger",
    "AttendanceStore",
    "TicketingStore",
]
