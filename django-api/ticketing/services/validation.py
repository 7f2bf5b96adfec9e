"""Input checks applied at the service boundary, before any store access."""

import typing as t
from decimal import Decimal, InvalidOperation
from uuid import UUID

from ticketing.domain import DocumentNumber, EventId, Money, PurchaseId, Quantity, TicketTypeId
from ticketing.domain.errors import InvalidIdentifierError, InvalidRequestError

IdT = t.TypeVar("IdT", EventId, TicketTypeId, PurchaseId, DocumentNumber)


def parse_id(kind: type[IdT], value: str | UUID | IdT, field: str) -> IdT:
    """Build an identifier value object, raising InvalidIdentifierError on bad input."""
    if isinstance(value, kind):
        return value
    try:
        return kind.from_string(str(value))
    except (TypeError, ValueError, AttributeError):
        raise InvalidIdentifierError(field) from None


def require_text(value: t.Any, field: str) -> str:
    """Return ``value`` stripped, rejecting missing or blank strings."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidRequestError(f"{field} is required")
    return value.strip()


def require_quantity(value: t.Any, field: str = "quantity") -> int:
    """Return ``value`` if it is an integer of at least 1."""
    try:
        return Quantity(value).value
    except ValueError:
        raise InvalidRequestError(f"{field} must be a positive integer") from None


def require_count(value: t.Any, field: str) -> int:
    """Return ``value`` if it is a non-negative integer."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidRequestError(f"{field} must be a non-negative integer")
    return value


def require_money(value: t.Any, field: str = "unitPrice") -> Money:
    """Return ``value`` as Money, rejecting negative or non-numeric amounts."""
    try:
        return Money(Decimal(str(value)))
    except (InvalidOperation, ValueError):
        raise InvalidRequestError(f"{field} must be a non-negative amount") from None


def clean_perks(perks: t.Iterable[t.Any] | None) -> tuple[str, ...]:
    """Return perks as a tuple of non-blank strings, preserving order."""
    if perks is None:
        return ()
    if isinstance(perks, str):
        raise InvalidRequestError("perks must be a list of strings")
    return tuple(require_text(perk, "perk") for perk in perks)
