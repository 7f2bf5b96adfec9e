"""Reservation service - ticket purchases and refunds.

Services:
- Depend only on interfaces (stores, payment gateway)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors

Every purchase or refund runs inside one store transaction. Within it the
availability counter only moves through the store's conditional updates, so
two buyers racing for the last unit cannot both win.
"""

import typing as t
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace

import structlog
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.utils import timezone

from ticketing.domain import (
    BuyerDetails,
    EventId,
    LineItem,
    Money,
    Purchase,
    PurchaseId,
    PurchaseStatus,
    RefundResult,
    TicketType,
    TicketTypeId,
)
from ticketing.domain.errors import (
    ConcurrentModificationError,
    InsufficientAvailabilityError,
    InvalidRequestError,
    PartialFailureError,
    PaymentDeclinedError,
    PurchaseNotFoundError,
    TicketTypeNotFoundError,
    TicketTypeNotOnSaleError,
    TransientStoreError,
)
from ticketing.services.payments import PaymentGateway
from ticketing.services.retry import retry_transient
from ticketing.services.validation import parse_id, require_quantity, require_text
from ticketing.signals import ticket_sales_changed
from ticketing.stores.interfaces import TicketingStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ReservationLine:
    """A requested quantity of one ticket type."""

    ticket_type_id: str
    quantity: int


def _clean_buyer(buyer: BuyerDetails | Mapping[str, t.Any]) -> BuyerDetails:
    if isinstance(buyer, BuyerDetails):
        fields = {"name": buyer.name, "email": buyer.email, "phone": buyer.phone}
    else:
        fields = {key: buyer.get(key) for key in ("name", "email", "phone")}
    cleaned = BuyerDetails(
        name=require_text(fields["name"], "buyerDetails.name"),
        email=require_text(fields["email"], "buyerDetails.email"),
        phone=require_text(fields["phone"], "buyerDetails.phone"),
    )
    try:
        validate_email(cleaned.email)
    except DjangoValidationError:
        raise InvalidRequestError("buyerDetails.email is not a valid email address") from None
    return cleaned


def _clean_lines(lines: Iterable[ReservationLine | Mapping[str, t.Any]]) -> list[tuple[TicketTypeId, int]]:
    cleaned: list[tuple[TicketTypeId, int]] = []
    seen: set[TicketTypeId] = set()
    for line in lines:
        if isinstance(line, Mapping):
            line = ReservationLine(ticket_type_id=line.get("ticketTypeId"), quantity=line.get("quantity"))
        ticket_type_id = parse_id(TicketTypeId, line.ticket_type_id, "ticketTypeId")
        if ticket_type_id in seen:
            raise InvalidRequestError("Each ticket type may appear only once per purchase")
        seen.add(ticket_type_id)
        cleaned.append((ticket_type_id, require_quantity(line.quantity)))
    if not cleaned:
        raise InvalidRequestError("At least one line item is required")
    return cleaned


class ReservationService:
    """Service for buying and refunding tickets."""

    def __init__(self, store: TicketingStore, payments: PaymentGateway) -> None:
        self._store = store
        self._payments = payments

    def reserve(
        self,
        event_id: str,
        line_items: Iterable[ReservationLine | Mapping[str, t.Any]],
        buyer: BuyerDetails | Mapping[str, t.Any],
        payment_token: str | None = None,
    ) -> Purchase:
        """Take inventory for every line item and record the purchase.

        Either every line item is decremented and the purchase is written, or
        availability is left exactly as it was before the call.

        Raises:
            InvalidIdentifierError: If an identifier is not a valid UUID.
            InvalidRequestError: If line items or buyer details are invalid.
            TicketTypeNotFoundError: If a ticket type does not exist.
            TicketTypeNotOnSaleError: If a ticket type is not on sale for the event.
            InsufficientAvailabilityError: If a ticket type has too few units left.
            PaymentDeclinedError: If the payment gateway refuses the charge.
            PartialFailureError: If a compensating increment could not be applied.
        """
        parsed_event_id = parse_id(EventId, event_id, "eventId")
        lines = _clean_lines(line_items)
        cleaned_buyer = _clean_buyer(buyer)
        # Generated once so that retries present the same reference to the gateway.
        purchase_id = PurchaseId.new()
        return self._reserve(purchase_id, parsed_event_id, lines, cleaned_buyer, payment_token)

    @retry_transient
    def _reserve(
        self,
        purchase_id: PurchaseId,
        event_id: EventId,
        lines: list[tuple[TicketTypeId, int]],
        buyer: BuyerDetails,
        payment_token: str | None,
    ) -> Purchase:
        with self._store.atomic():
            ticket_types = self._load_for_sale(event_id, lines)
            taken = self._take_inventory(lines)

            items = tuple(
                LineItem(
                    ticket_type_id=ticket_type_id,
                    label=ticket_types[ticket_type_id].label,
                    unit_price_at_sale=ticket_types[ticket_type_id].unit_price,
                    quantity=quantity,
                )
                for ticket_type_id, quantity in lines
            )
            total = Money.zero()
            for item in items:
                total = total + item.subtotal

            try:
                payment_id = self._confirm_payment(total, purchase_id, payment_token)
            except PaymentDeclinedError:
                self._release(taken, operation="reserve")
                raise

            now = timezone.now()
            purchase = Purchase(
                id=purchase_id,
                event_id=event_id,
                buyer=buyer,
                line_items=items,
                status=PurchaseStatus.COMPLETED,
                created_at=now,
                updated_at=now,
                payment_id=payment_id,
            )
            self._store.add_purchase(purchase)

        logger.info(
            "tickets_reserved",
            purchase_id=str(purchase.id),
            event_id=str(event_id),
            quantity=purchase.quantity,
            total=str(total),
        )
        ticket_sales_changed.send(sender=self.__class__, event_id=str(event_id))
        return purchase

    @retry_transient
    def refund(self, purchase_id: str, ticket_type_id: str, quantity: int) -> RefundResult:
        """Return ``quantity`` units of one line item to inventory.

        Availability is incremented first (capped at capacity), then the
        purchase is rewritten with a compare-and-swap on its version. Both
        happen in one transaction, so a failed write also undoes the increment.

        Raises:
            InvalidIdentifierError: If an identifier is not a valid UUID.
            InvalidRequestError: If quantity is not a positive integer.
            PurchaseNotFoundError: If the purchase does not exist.
            AlreadyRefundedError: If the purchase is already fully refunded.
            LineItemNotFoundError: If the purchase holds no units of the ticket type.
            RefundExceedsPurchasedError: If fewer units are held than requested.
            ConcurrentModificationError: If the purchase changed concurrently.
        """
        parsed_purchase_id = parse_id(PurchaseId, purchase_id, "purchaseId")
        parsed_ticket_type_id = parse_id(TicketTypeId, ticket_type_id, "ticketTypeId")
        units = require_quantity(quantity)

        with self._store.atomic():
            purchase = self._store.get_purchase(parsed_purchase_id)
            if purchase is None:
                raise PurchaseNotFoundError(str(parsed_purchase_id))

            updated = purchase.with_refund(parsed_ticket_type_id, units, timezone.now())
            updated = replace(updated, version=purchase.version + 1)
            line_item = purchase.line_item_for(parsed_ticket_type_id)

            remaining = self._store.increment_availability(parsed_ticket_type_id, units)
            if remaining is None:
                raise TicketTypeNotFoundError(str(parsed_ticket_type_id))
            if not self._store.replace_purchase(updated, expected_version=purchase.version):
                raise ConcurrentModificationError("purchase")

        amount = line_item.unit_price_at_sale.times(units)
        logger.info(
            "tickets_refunded",
            purchase_id=str(updated.id),
            ticket_type_id=str(parsed_ticket_type_id),
            quantity=units,
            amount=str(amount),
            status=updated.status.value,
            remaining_availability=remaining,
        )
        ticket_sales_changed.send(sender=self.__class__, event_id=str(updated.event_id))
        return RefundResult(
            purchase=updated,
            quantity=units,
            amount=amount,
            refunded_lines=(replace(line_item, quantity=units),),
            ticket_type_id=parsed_ticket_type_id,
            remaining_availability=remaining,
        )

    @retry_transient
    def refund_purchase(self, purchase_id: str) -> RefundResult:
        """Return every unit still held by a purchase to inventory.

        Each line item is incremented (capped at capacity) and the purchase is
        rewritten as refunded with a compare-and-swap on its version, all in
        one transaction.

        Raises:
            InvalidIdentifierError: If the purchase_id is not a valid UUID.
            PurchaseNotFoundError: If the purchase does not exist.
            AlreadyRefundedError: If the purchase is already fully refunded.
            ConcurrentModificationError: If the purchase changed concurrently.
        """
        parsed_purchase_id = parse_id(PurchaseId, purchase_id, "purchaseId")

        with self._store.atomic():
            purchase = self._store.get_purchase(parsed_purchase_id)
            if purchase is None:
                raise PurchaseNotFoundError(str(parsed_purchase_id))

            updated = purchase.with_full_refund(timezone.now())
            updated = replace(updated, version=purchase.version + 1)

            for item in purchase.line_items:
                if self._store.increment_availability(item.ticket_type_id, item.quantity) is None:
                    raise TicketTypeNotFoundError(str(item.ticket_type_id))
            if not self._store.replace_purchase(updated, expected_version=purchase.version):
                raise ConcurrentModificationError("purchase")

        logger.info(
            "purchase_refunded",
            purchase_id=str(updated.id),
            quantity=purchase.quantity,
            amount=str(purchase.total),
            line_items=len(purchase.line_items),
        )
        ticket_sales_changed.send(sender=self.__class__, event_id=str(updated.event_id))
        return RefundResult(
            purchase=updated,
            quantity=purchase.quantity,
            amount=purchase.total,
            refunded_lines=purchase.line_items,
        )

    @retry_transient
    def get_purchase(self, purchase_id: str) -> Purchase:
        """Return a purchase by ID.

        Raises:
            InvalidIdentifierError: If the purchase_id is not a valid UUID.
            PurchaseNotFoundError: If the purchase does not exist.
        """
        parsed = parse_id(PurchaseId, purchase_id, "purchaseId")
        purchase = self._store.get_purchase(parsed)
        if purchase is None:
            raise PurchaseNotFoundError(str(parsed))
        return purchase

    @retry_transient
    def search_purchases(self, term: str) -> list[Purchase]:
        """Find purchases by buyer name (case-insensitive) or phone number."""
        return self._store.search_purchases(require_text(term, "search"))

    @retry_transient
    def availability(self, ticket_type_id: str) -> TicketType:
        """Return the ticket type with its current remaining availability.

        Raises:
            InvalidIdentifierError: If the ticket_type_id is not a valid UUID.
            TicketTypeNotFoundError: If the ticket type does not exist.
        """
        parsed = parse_id(TicketTypeId, ticket_type_id, "ticketTypeId")
        ticket_type = self._store.get_ticket_type(parsed)
        if ticket_type is None:
            raise TicketTypeNotFoundError(str(parsed))
        return ticket_type

    def _load_for_sale(
        self, event_id: EventId, lines: list[tuple[TicketTypeId, int]]
    ) -> dict[TicketTypeId, TicketType]:
        ticket_types: dict[TicketTypeId, TicketType] = {}
        for ticket_type_id, _quantity in lines:
            ticket_type = self._store.get_ticket_type(ticket_type_id)
            if ticket_type is None:
                raise TicketTypeNotFoundError(str(ticket_type_id))
            if ticket_type.event_id != event_id or not ticket_type.is_on_sale:
                raise TicketTypeNotOnSaleError(str(ticket_type_id))
            ticket_types[ticket_type_id] = ticket_type
        return ticket_types

    def _take_inventory(self, lines: list[tuple[TicketTypeId, int]]) -> list[tuple[TicketTypeId, int]]:
        taken: list[tuple[TicketTypeId, int]] = []
        for ticket_type_id, quantity in lines:
            if self._store.try_decrement_availability(ticket_type_id, quantity):
                taken.append((ticket_type_id, quantity))
                continue
            self._release(taken, operation="reserve")
            raise self._shortfall(ticket_type_id)
        return taken

    def _shortfall(self, ticket_type_id: TicketTypeId) -> Exception:
        """Explain why a conditional decrement was refused, from a fresh read."""
        current = self._store.get_ticket_type(ticket_type_id)
        if current is None:
            return TicketTypeNotFoundError(str(ticket_type_id))
        if not current.is_on_sale:
            return TicketTypeNotOnSaleError(str(ticket_type_id))
        logger.info(
            "reservation_rejected",
            ticket_type_id=str(ticket_type_id),
            remaining=current.remaining_availability,
        )
        return InsufficientAvailabilityError(str(ticket_type_id), remaining=current.remaining_availability)

    def _release(self, taken: list[tuple[TicketTypeId, int]], operation: str) -> None:
        """Give back units taken earlier in the same call, newest first.

        On a store that rolls back on error, the enclosing transaction undoes
        the decrements anyway: a transient failure is re-raised so the whole
        operation is retried, and nothing is reported as partially applied.
        """
        unrestored: dict[str, int] = {}
        cause: Exception | None = None
        for ticket_type_id, quantity in reversed(taken):
            try:
                restored = self._store.increment_availability(ticket_type_id, quantity)
            except TransientStoreError as exc:
                if self._store.rolls_back_on_error:
                    raise
                restored, cause = None, exc
            if restored is None:
                unrestored[str(ticket_type_id)] = quantity
        if not unrestored:
            return
        if self._store.rolls_back_on_error:
            logger.warning("compensation_skipped", operation=operation, unrestored=unrestored)
            return
        logger.error("compensation_incomplete", operation=operation, unrestored=unrestored)
        raise PartialFailureError(operation, unrestored) from cause

    def _confirm_payment(self, total: Money, purchase_id: PurchaseId, token: str | None) -> str | None:
        if total == Money.zero():
            return None
        confirmation = self._payments.confirm(total, reference=str(purchase_id), token=token)
        if not confirmation.succeeded:
            raise PaymentDeclinedError(confirmation.reason or "Payment was declined")
        return confirmation.payment_id
