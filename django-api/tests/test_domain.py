"""Unit tests for domain primitives.

These test invariants that must hold at construction time.
Run with: pytest tests/test_domain.py -v
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from ticketing.domain import (
    BuyerDetails,
    Capacity,
    DocumentNumber,
    EventId,
    LineItem,
    Money,
    Purchase,
    PurchaseId,
    PurchaseStatus,
    Quantity,
    RsvpRecord,
    TicketType,
    TicketTypeId,
    TicketTypeStatus,
)
from ticketing.domain.errors import (
    AlreadyRefundedError,
    ErrorCode,
    ExceedsRemainingCapacityError,
    InvalidStatusTransitionError,
    LineItemNotFoundError,
    RefundExceedsPurchasedError,
)
from ticketing.domain.rules import (
    ensure_can_admit,
    ensure_ticket_type_transition,
    held_after_refund,
    purchase_status_after_refund,
    remaining_after_refund,
)

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_purchase(*items: tuple[TicketTypeId, int], price: str = "10.00") -> Purchase:
    return Purchase(
        id=PurchaseId.new(),
        event_id=EventId(uuid.uuid4()),
        buyer=BuyerDetails(name="Ada", email="ada@example.com", phone="555"),
        line_items=tuple(
            LineItem(ticket_type_id=tt_id, label="General", unit_price_at_sale=Money(Decimal(price)), quantity=qty)
            for tt_id, qty in items
        ),
        status=PurchaseStatus.COMPLETED,
        created_at=NOW,
        updated_at=NOW,
    )


class TestMoney:
    """Tests for Money value object."""

    def test_money_accepts_positive_amount(self):
        """Money can be created with positive amount."""
        assert Money(Decimal("12.5")).amount == Decimal("12.50")

    def test_money_accepts_zero(self):
        """Money can be created with zero."""
        assert Money.zero().amount == Decimal("0.00")

    def test_money_rejects_negative_amount(self):
        """Money raises ValueError for negative amount."""
        with pytest.raises(ValueError):
            Money(Decimal("-0.01"))

    def test_money_rejects_non_finite_amount(self):
        with pytest.raises(ValueError):
            Money(Decimal("NaN"))

    def test_money_str_format(self):
        """Money string representation is formatted to 2 decimal places."""
        assert str(Money(Decimal("7"))) == "7.00"

    def test_money_arithmetic(self):
        total = Money(Decimal("10.00")).times(3) + Money(Decimal("0.50"))
        assert total == Money(Decimal("30.50"))


class TestCapacity:
    """Tests for Capacity value object."""

    def test_capacity_accepts_positive_value(self):
        """Capacity can be created with positive value."""
        assert Capacity(100).value == 100

    def test_capacity_accepts_zero(self):
        """Capacity can be created with zero."""
        assert Capacity(0).value == 0

    def test_capacity_rejects_negative_value(self):
        """Capacity raises ValueError for negative value."""
        with pytest.raises(ValueError):
            Capacity(-1)


class TestQuantity:
    @pytest.mark.parametrize("value", [0, -3, 1.5, "2", True])
    def test_quantity_rejects_non_positive_or_non_integer(self, value):
        with pytest.raises(ValueError):
            Quantity(value)

    def test_quantity_accepts_one(self):
        assert Quantity(1).value == 1


class TestIdentifiers:
    """Tests for identifier value objects."""

    def test_from_string_valid_uuid(self):
        """TicketTypeId.from_string parses valid UUID."""
        raw = str(uuid.uuid4())
        assert str(TicketTypeId.from_string(raw)) == raw

    def test_from_string_invalid_uuid(self):
        """EventId.from_string raises ValueError for invalid UUID."""
        with pytest.raises(ValueError):
            EventId.from_string("not-a-uuid")

    def test_new_ids_are_unique(self):
        assert PurchaseId.new() != PurchaseId.new()


class TestTicketType:
    def _ticket_type(self, remaining: int) -> TicketType:
        return TicketType(
            id=TicketTypeId.new(),
            event_id=EventId(uuid.uuid4()),
            label="VIP",
            unit_price=Money(Decimal("50")),
            total_capacity=Capacity(10),
            remaining_availability=remaining,
            perks=("Lounge",),
            status=TicketTypeStatus.ON_SALE,
            created_at=NOW,
            updated_at=NOW,
        )

    def test_remaining_above_capacity_rejected(self):
        with pytest.raises(ValueError):
            self._ticket_type(remaining=11)

    def test_negative_remaining_rejected(self):
        with pytest.raises(ValueError):
            self._ticket_type(remaining=-1)

    def test_sold_is_capacity_minus_remaining(self):
        assert self._ticket_type(remaining=4).sold == 6


class TestRsvpRecord:
    def test_checked_in_above_attendees_rejected(self):
        with pytest.raises(ValueError):
            RsvpRecord(
                document_number=DocumentNumber.new(),
                event_id=EventId(uuid.uuid4()),
                full_name="Grace Hopper",
                email_address="grace@example.com",
                number_of_attendees=2,
                checked_in_count=3,
                created_at=NOW,
            )


class TestRules:
    """Tests for the lifecycle and counter rules."""

    def test_draft_can_go_on_sale(self):
        assert ensure_ticket_type_transition(TicketTypeStatus.DRAFT, TicketTypeStatus.ON_SALE) == (
            TicketTypeStatus.ON_SALE
        )

    def test_on_sale_can_return_to_draft(self):
        assert ensure_ticket_type_transition(TicketTypeStatus.ON_SALE, TicketTypeStatus.DRAFT) == (
            TicketTypeStatus.DRAFT
        )

    def test_closed_is_terminal(self):
        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            ensure_ticket_type_transition(TicketTypeStatus.CLOSED, TicketTypeStatus.ON_SALE)
        assert exc_info.value.code == ErrorCode.INVALID_STATUS_TRANSITION

    def test_same_status_is_a_no_op(self):
        assert ensure_ticket_type_transition(TicketTypeStatus.CLOSED, TicketTypeStatus.CLOSED) == (
            TicketTypeStatus.CLOSED
        )

    def test_remaining_after_refund_is_capped_at_capacity(self):
        assert remaining_after_refund(remaining=95, quantity=10, total_capacity=100) == 100
        assert remaining_after_refund(remaining=70, quantity=10, total_capacity=100) == 80

    def test_held_after_refund_rejects_overdraw(self):
        with pytest.raises(RefundExceedsPurchasedError):
            held_after_refund(held=2, quantity=3)

    def test_purchase_status_never_moves_backwards(self):
        with pytest.raises(InvalidStatusTransitionError):
            purchase_status_after_refund(PurchaseStatus.REFUNDED, items_remaining=1, refunded_quantity=1)

    def test_purchase_status_refunded_when_no_items_remain(self):
        assert purchase_status_after_refund(PurchaseStatus.COMPLETED, 0, 3) == PurchaseStatus.REFUNDED

    def test_ensure_can_admit_reports_remaining(self):
        assert ensure_can_admit(number_of_attendees=4, checked_in_count=1, count=3) == 4
        with pytest.raises(ExceedsRemainingCapacityError) as exc_info:
            ensure_can_admit(number_of_attendees=4, checked_in_count=3, count=2)
        assert exc_info.value.remaining == 1
        assert exc_info.value.details() == {"remaining": 1}


class TestPurchaseRefund:
    """Tests for Purchase.with_refund."""

    def test_partial_refund_reduces_line_item(self):
        tt_id = TicketTypeId.new()
        purchase = make_purchase((tt_id, 3))

        refunded = purchase.with_refund(tt_id, 1, NOW)

        assert refunded.line_item_for(tt_id).quantity == 2
        assert refunded.status == PurchaseStatus.PARTIALLY_REFUNDED
        assert refunded.refunded_quantity == 1
        assert refunded.total == Money(Decimal("20.00"))
        assert purchase.line_item_for(tt_id).quantity == 3

    def test_refunding_a_whole_line_removes_it(self):
        kept, removed = TicketTypeId.new(), TicketTypeId.new()
        purchase = make_purchase((kept, 1), (removed, 2))

        refunded = purchase.with_refund(removed, 2, NOW)

        assert [item.ticket_type_id for item in refunded.line_items] == [kept]
        assert refunded.status == PurchaseStatus.PARTIALLY_REFUNDED

    def test_refunding_everything_marks_refunded(self):
        tt_id = TicketTypeId.new()
        refunded = make_purchase((tt_id, 2)).with_refund(tt_id, 2, NOW)

        assert refunded.line_items == ()
        assert refunded.status == PurchaseStatus.REFUNDED

    def test_refunded_purchase_rejects_further_refunds(self):
        tt_id = TicketTypeId.new()
        refunded = make_purchase((tt_id, 1)).with_refund(tt_id, 1, NOW)

        with pytest.raises(AlreadyRefundedError):
            refunded.with_refund(tt_id, 1, NOW)

    def test_unknown_line_item_rejected(self):
        purchase = make_purchase((TicketTypeId.new(), 1))

        with pytest.raises(LineItemNotFoundError):
            purchase.with_refund(TicketTypeId.new(), 1, NOW)

    def test_refund_above_held_rejected(self):
        tt_id = TicketTypeId.new()

        with pytest.raises(RefundExceedsPurchasedError) as exc_info:
            make_purchase((tt_id, 2)).with_refund(tt_id, 3, NOW)
        assert exc_info.value.held == 2

    def test_full_refund_empties_every_line(self):
        first, second = TicketTypeId.new(), TicketTypeId.new()
        purchase = make_purchase((first, 3), (second, 2)).with_refund(first, 1, NOW)

        refunded = purchase.with_full_refund(NOW)

        assert refunded.line_items == ()
        assert refunded.status == PurchaseStatus.REFUNDED
        assert refunded.refunded_quantity == 5
        assert refunded.total == Money.zero()

    def test_full_refund_of_refunded_purchase_rejected(self):
        tt_id = TicketTypeId.new()
        refunded = make_purchase((tt_id, 1)).with_full_refund(NOW)

        with pytest.raises(AlreadyRefundedError):
            refunded.with_full_refund(NOW)
