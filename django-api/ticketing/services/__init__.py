from ticketing.services.attendance_service import AttendanceService
from ticketing.services.catalog_service import CatalogService, DeleteOutcome
from ticketing.services.payments import MockPaymentGateway, PaymentConfirmation, PaymentGateway
from ticketing.services.reconciliation_service import Discrepancy, ReconciliationService
from ticketing.services.reporting_service import ReportingService, TicketSales
from ticketing.services.reservation_service import ReservationLine, ReservationService

__all__ = [
    "AttendanceService",
    "CatalogService",
    "DeleteOutcome",
    "PaymentGateway",
    "PaymentConfirmation",
    "MockPaymentGateway",
    "ReconciliationService",
    "Discrepancy",
    "ReportingService",
    "TicketSales",
    "ReservationService",
    "ReservationLine",
]
