"""Payment confirmation collaborator.

The gateway is external to ticketing; the services only need to know whether
a charge for a given amount went through.
"""

import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass

import structlog

from ticketing.domain import Money

logger = structlog.get_logger(__name__)

TEST_CARD_NUMBER = "4242424242424242"


@dataclass(frozen=True)
class PaymentConfirmation:
    """Result of asking the gateway to capture an amount."""

    succeeded: bool
    payment_id: str | None = None
    reason: str | None = None


class PaymentGateway(ABC):
    """Interface for confirming payments."""

    @abstractmethod
    def confirm(self, amount: Money, reference: str, token: str | None = None) -> PaymentConfirmation:
        """Capture ``amount`` for the purchase identified by ``reference``."""
        ...


class MockPaymentGateway(PaymentGateway):
    """Stand-in gateway: succeeds when configured to, or for the test card."""

    def __init__(self, always_succeed: bool = True) -> None:
        self._always_succeed = always_succeed

    def confirm(self, amount: Money, reference: str, token: str | None = None) -> PaymentConfirmation:
        if self._always_succeed or token == TEST_CARD_NUMBER:
            payment_id = f"pi_{secrets.token_hex(6)}"
            logger.info("payment_confirmed", reference=reference, amount=str(amount), payment_id=payment_id)
            return PaymentConfirmation(succeeded=True, payment_id=payment_id)
        logger.info("payment_declined", reference=reference, amount=str(amount))
        return PaymentConfirmation(succeeded=False, reason="Payment failed: Invalid card details")
