"""
Payment processor port and a configurable mock.

The checkout only needs an opaque intent handle; authorization and
capture happen on the processor side and come back as order status
updates (the webhook path).
"""

import logging
import uuid
from abc import ABC, abstractmethod
from typing import Optional

from ..errors import PaymentError
from ..models.order import PaymentIntent, PaymentIntentRequest

logger = logging.getLogger(__name__)


class PaymentProcessor(ABC):
    """Payment processor interface"""

    @abstractmethod
    async def create_payment_intent(self, request: PaymentIntentRequest) -> PaymentIntent:
        """
        Create a payment intent for an order.

        Raises:
            PaymentError: Processor rejected the request or was unreachable
        """


class MockPaymentProcessor(PaymentProcessor):
    """In-memory processor that can be told to fail"""

    def __init__(self):
        self.should_succeed = True
        self.failure_reason = "Payment processor unavailable"
        self.requests: list[PaymentIntentRequest] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Payment processor unavailable") -> None:
        """Configure processor behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    async def create_payment_intent(self, request: PaymentIntentRequest) -> PaymentIntent:
        self.requests.append(request)

        if not self.should_succeed:
            raise PaymentError(self.failure_reason)

        intent_id = f"pi_mock_{uuid.uuid4().hex[:16]}"
        logger.info(
            f"Created payment intent {intent_id} for order {request.order_id}: "
            f"{request.amount:.2f} {request.currency.upper()} "
            f"(application fee {request.platform_fee_amount:.2f})"
        )
        return PaymentIntent(client_secret=f"{intent_id}_secret_{uuid.uuid4().hex[:8]}", intent_id=intent_id)


_current_processor: Optional[PaymentProcessor] = None


def get_payment_processor() -> PaymentProcessor:
    """Return the active processor. Defaults to MockPaymentProcessor."""
    global _current_processor
    if _current_processor is None:
        _current_processor = MockPaymentProcessor()
    return _current_processor


def set_payment_processor(processor: Optional[PaymentProcessor]) -> None:
    """Override the active processor (None resets to the default)"""
    global _current_processor
    _current_processor = processor
