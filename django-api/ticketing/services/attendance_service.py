"""Attendance service - RSVPs and door check-ins.

An RSVP commits a headcount; check-ins consume it. The admitted count only
grows, never past the committed headcount, and every increment is paired with
exactly one CheckInEvent written in the same transaction.
"""

import structlog
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.utils import timezone

from ticketing.domain import CheckInEvent, CheckInId, CheckInResult, DocumentNumber, EventId, RsvpRecord
from ticketing.domain.errors import ExceedsRemainingCapacityError, InvalidRequestError, RsvpNotFoundError
from ticketing.domain.rules import ensure_can_admit
from ticketing.services.retry import retry_transient
from ticketing.services.validation import parse_id, require_quantity, require_text
from ticketing.stores.interfaces import TicketingStore

logger = structlog.get_logger(__name__)


class AttendanceService:
    """Service for RSVP registration and check-in."""

    def __init__(self, store: TicketingStore) -> None:
        self._store = store

    @retry_transient
    def register(
        self,
        event_id: str,
        full_name: str,
        email_address: str,
        number_of_attendees: int,
    ) -> RsvpRecord:
        """Record an RSVP committing ``number_of_attendees`` seats.

        Raises:
            InvalidIdentifierError: If the event_id is not a valid UUID.
            InvalidRequestError: If any other field is invalid.
        """
        email = require_text(email_address, "emailAddress")
        try:
            validate_email(email)
        except DjangoValidationError:
            raise InvalidRequestError("emailAddress is not a valid email address") from None

        rsvp = RsvpRecord(
            document_number=DocumentNumber.new(),
            event_id=parse_id(EventId, event_id, "eventId"),
            full_name=require_text(full_name, "fullName"),
            email_address=email,
            number_of_attendees=require_quantity(number_of_attendees, "numberOfAttendees"),
            checked_in_count=0,
            created_at=timezone.now(),
        )
        self._store.add_rsvp(rsvp)
        logger.info(
            "rsvp_registered",
            document_number=str(rsvp.document_number),
            event_id=str(rsvp.event_id),
            number_of_attendees=rsvp.number_of_attendees,
        )
        return rsvp

    @retry_transient
    def get_rsvp(self, document_number: str) -> RsvpRecord:
        """Return an RSVP by document number.

        Raises:
            InvalidIdentifierError: If the document number is not a valid UUID.
            RsvpNotFoundError: If no RSVP matches.
        """
        parsed = parse_id(DocumentNumber, document_number, "documentNumber")
        rsvp = self._store.get_rsvp(parsed)
        if rsvp is None:
            raise RsvpNotFoundError(str(parsed))
        return rsvp

    @retry_transient
    def check_in(self, document_number: str, count: int) -> CheckInResult:
        """Admit ``count`` guests against an RSVP.

        The remaining balance is checked against the stored value inside the
        transaction, and the store re-checks it in the conditional increment.
        The returned RSVP is the one written by that increment.

        Raises:
            InvalidIdentifierError: If the document number is not a valid UUID.
            InvalidRequestError: If count is not a positive integer.
            RsvpNotFoundError: If no RSVP matches.
            ExceedsRemainingCapacityError: If fewer guests remain than requested.
        """
        parsed = parse_id(DocumentNumber, document_number, "documentNumber")
        admitted = require_quantity(count, "checkedInCount")

        with self._store.atomic():
            rsvp = self._store.get_rsvp(parsed)
            if rsvp is None:
                raise RsvpNotFoundError(str(parsed))
            ensure_can_admit(rsvp.number_of_attendees, rsvp.checked_in_count, admitted)

            now = timezone.now()
            updated = self._store.try_admit(parsed, admitted, now)
            if updated is None:
                fresh = self._store.get_rsvp(parsed)
                if fresh is None:
                    raise RsvpNotFoundError(str(parsed))
                raise ExceedsRemainingCapacityError(remaining=fresh.remaining)

            check_in = CheckInEvent(
                id=CheckInId.new(),
                document_number=parsed,
                event_id=updated.event_id,
                checked_in_count=admitted,
                checked_in_at=now,
                guest_name=updated.full_name,
                email_address=updated.email_address,
            )
            self._store.add_check_in(check_in)

        logger.info(
            "guests_checked_in",
            document_number=str(parsed),
            check_in_id=str(check_in.id),
            count=admitted,
            checked_in_total=updated.checked_in_count,
        )
        return CheckInResult(check_in=check_in, rsvp=updated)

    @retry_transient
    def list_check_ins(self, document_number: str) -> list[CheckInEvent]:
        """Return the check-in history of an RSVP.

        Raises:
            RsvpNotFoundError: If no RSVP matches.
        """
        rsvp = self.get_rsvp(document_number)
        return self._store.list_check_ins(rsvp.document_number)
