"""
Order Payment State Machine

Takes a priced cart from "payment intent created" to a final outcome.

Two triggers race to finish a payment attempt:

* the live order status feed (push), which reports what the processor's
  webhook wrote to the order document, and
* a one-shot fallback timer started when the attempt enters PROCESSING.

The timer exists because the push feed can be late or dropped. When it
fires first it completes the order without a confirmed payment; that path
lives in _on_fallback_timeout and always logs a WARNING so it can be
alerted on. A trigger claims the outcome in the same callback where it
decides, before any await, so a failure arriving after that is ignored.
_complete then checks and sets a single flag before doing anything else,
so the cart is cleared and the completion callback runs exactly once.
"""

import asyncio
import inspect
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

from ..core.config import settings
from ..database.orders import OrderDatabase, order_db
from ..errors import CheckoutValidationError, OrderStateError, PaymentError
from ..models.cart import CartState
from ..models.order import (
    CheckoutFormData,
    FailedOrderRecord,
    Order,
    PaymentIntent,
    PaymentIntentRequest,
    StatusUpdate,
)
from ..pricing.money import quantize_money, to_decimal
from .order_builder import build_order_data
from .order_utils import generate_order_id
from .payment_processor import PaymentProcessor, get_payment_processor
from .validation import validate_checkout_form

logger = logging.getLogger(__name__)

Callback = Callable[..., Union[None, Awaitable[None]]]

PAID_SIGNALS = frozenset({"paid", "confirmed"})
FAILED_SIGNALS = frozenset({"failed", "cancelled", "canceled"})

PAYMENT_DECLINED_MESSAGE = "Your payment could not be completed. Please try another payment method."
PAYMENT_UNCONFIRMED_MESSAGE = (
    "We have not received payment confirmation yet. "
    "Please check your order history before trying again."
)


class PaymentFlowState(str, Enum):
    PENDING_PAYMENT = "pending_payment"
    PROCESSING = "processing"
    CONFIRMED = "confirmed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class CompletionSource(str, Enum):
    PUSH = "push"
    FALLBACK_TIMEOUT = "fallback_timeout"


def status_signal(update: StatusUpdate) -> str:
    """
    Collapse a status snapshot into one signal.

    The payment axis wins over the fulfillment axis; captured and authorized
    payments count as paid.
    """
    payment_status = (update.payment_status or "").lower()
    status = (update.status or "").lower()

    if payment_status in ("paid", "captured", "authorized"):
        return "paid"
    if payment_status in FAILED_SIGNALS:
        return payment_status
    if status in PAID_SIGNALS or status in FAILED_SIGNALS:
        return status
    if payment_status == "processing" or status == "processing":
        return "processing"
    return status or payment_status


def calculate_application_fee(platform_fee: float, subtotal: float, commission_rate: float) -> float:
    """Platform share requested from the processor: platform fee + subtotal x commission"""
    fee = quantize_money(platform_fee) + quantize_money(to_decimal(subtotal) * to_decimal(commission_rate))
    return float(fee)


async def _maybe_await(result: Any) -> None:
    if inspect.isawaitable(result):
        await result


class OrderPaymentStateMachine:
    """
    One checkout's payment lifecycle.

    Created per checkout; call start_checkout, then submit_payment for each
    attempt, and close when the checkout goes away.
    """

    def __init__(
        self,
        orders: OrderDatabase = order_db,
        processor: Optional[PaymentProcessor] = None,
        clear_cart: Optional[Callback] = None,
        on_complete: Optional[Callback] = None,
        confirmation_delay: Optional[float] = None,
        fallback_timeout: Optional[float] = None,
        fallback_assumes_paid: Optional[bool] = None,
        currency: Optional[str] = None,
    ):
        """
        Args:
            orders: Order persistence and status feed
            processor: Payment processor (defaults to the active one)
            clear_cart: Called once when the order completes
            on_complete: Called once with the order ID after the cart is cleared
            confirmation_delay: Seconds between a paid push and completion
            fallback_timeout: Seconds after PROCESSING before the fallback fires
            fallback_assumes_paid: Whether the fallback completes the order
            currency: Currency code sent to the processor
        """
        self.orders = orders
        self.processor = processor or get_payment_processor()
        self.clear_cart = clear_cart
        self.on_complete = on_complete
        self.confirmation_delay = (
            settings.payment_confirmation_delay_seconds if confirmation_delay is None else confirmation_delay
        )
        self.fallback_timeout = (
            settings.payment_fallback_timeout_seconds if fallback_timeout is None else fallback_timeout
        )
        self.fallback_assumes_paid = (
            settings.fallback_assumes_paid if fallback_assumes_paid is None else fallback_assumes_paid
        )
        self.currency = currency or settings.currency

        self.state = PaymentFlowState.PENDING_PAYMENT
        self.order_id: Optional[str] = None
        self.store_id: str = ""
        self.user_id: str = ""
        self.client_secret: Optional[str] = None
        self.intent_id: Optional[str] = None
        self.error: Optional[str] = None
        self.completed_by: Optional[CompletionSource] = None
        self.done = asyncio.Event()

        # Order currently being watched for this attempt; None between attempts
        self.watched_order_id: Optional[str] = None
        self._order_data: dict[str, Any] = {}
        self._completed = False
        # Set the moment a trigger decides to complete; later signals are ignored
        self._claimed_by: Optional[CompletionSource] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._confirm_task: Optional[asyncio.Task] = None
        self._tasks: set[asyncio.Task] = set()
        self._last_failure_at: Optional[datetime] = None

    @property
    def completed(self) -> bool:
        return self._completed

    async def start_checkout(
        self,
        cart: CartState,
        form: CheckoutFormData,
        user_id: str = "",
        estimated_distance: Optional[float] = None,
        language: str = "en",
    ) -> PaymentIntent:
        """
        Create the order and its payment intent.

        The order ID is generated here, before either call, and used both as
        the order document ID and in the processor metadata so webhook
        updates land on the order this machine watches.

        Raises:
            CheckoutValidationError: Form invalid, cart empty, or delivery fee unknown
            PaymentError: Processor refused to create the intent
        """
        if self.order_id is not None:
            raise OrderStateError(f"Checkout already started for order {self.order_id}")

        validate_checkout_form(form)
        if cart.is_empty or not cart.store_id:
            raise CheckoutValidationError({"cart": "Your cart is empty"})
        if form.is_delivery and cart.summary.delivery_fee_pending:
            raise CheckoutValidationError({"delivery_fee": "Delivery fee has not been calculated yet"})

        order_id = generate_order_id()
        self.order_id = order_id
        self.store_id = cart.store_id
        self.user_id = user_id

        self._order_data = build_order_data(
            order_id,
            cart,
            form,
            user_id=user_id,
            estimated_distance=estimated_distance,
            language=language,
        )
        await self.orders.create_order(order_id, self._order_data)

        summary = cart.summary
        request = PaymentIntentRequest(
            order_id=order_id,
            store_id=cart.store_id,
            amount=summary.final_total,
            currency=self.currency,
            platform_fee_amount=calculate_application_fee(
                summary.platform_fee, summary.subtotal, summary.commission_rate
            ),
            metadata={"order_id": order_id, "store_id": cart.store_id, "user_id": user_id},
        )

        try:
            intent = await self.processor.create_payment_intent(request)
        except PaymentError as e:
            logger.error(f"Payment intent creation failed for order {order_id}: {e}")
            self.error = str(e)
            self._record_failure(str(e))
            # Next start_checkout creates a fresh order
            self.order_id = None
            raise

        self.client_secret = intent.client_secret
        self.intent_id = intent.intent_id
        self.state = PaymentFlowState.PENDING_PAYMENT
        logger.info(f"Checkout started for order {order_id} (intent {intent.intent_id})")
        return intent

    def submit_payment(self) -> None:
        """
        Enter PROCESSING for a payment attempt.

        Must be called from within the running event loop. Starts the
        one-shot fallback timer and subscribes to the order's status. A
        failed attempt may be resubmitted with the same intent.
        """
        if self._claimed_by is not None:
            raise OrderStateError(f"Order {self.order_id} is already complete")
        if self.order_id is None or self.client_secret is None:
            raise OrderStateError("Checkout has not been started")
        if self.state == PaymentFlowState.PROCESSING:
            raise OrderStateError(f"Payment for order {self.order_id} is already processing")

        self.state = PaymentFlowState.PROCESSING
        self.error = None
        self.watched_order_id = self.order_id

        loop = asyncio.get_running_loop()
        self._cancel_timer()
        self._timer = loop.call_later(self.fallback_timeout, self._on_fallback_timeout)

        self._stop_watching()
        self._unsubscribe = self.orders.subscribe_to_order_status(
            self.order_id, self._on_status_update, self._on_subscription_error
        )
        logger.info(f"Payment submitted for order {self.order_id}; waiting for confirmation")

    def _on_status_update(self, update: StatusUpdate) -> None:
        if self._claimed_by is not None or update.order_id != self.watched_order_id:
            return

        signal = status_signal(update)

        if signal == "processing":
            self.error = None
            return

        if signal in PAID_SIGNALS:
            if self._claim(CompletionSource.PUSH):
                self._cancel_timer()
                self._confirm_task = self._spawn(self._confirm_after_delay())
            return

        if signal in FAILED_SIGNALS:
            # Same failure already handled on a previous attempt
            if (
                self._last_failure_at is not None
                and update.updated_at is not None
                and update.updated_at <= self._last_failure_at
            ):
                return
            self._last_failure_at = update.updated_at or datetime.now(timezone.utc)
            self._fail(signal)

    def _on_subscription_error(self, error: Exception) -> None:
        # The fallback timer still covers this attempt
        logger.error(f"Order status subscription failed for {self.watched_order_id}: {error}")

    async def _confirm_after_delay(self) -> None:
        await asyncio.sleep(self.confirmation_delay)
        await self._complete(CompletionSource.PUSH)

    def _fail(self, signal: str) -> None:
        """Surface the failure and keep the payment form for a retry"""
        self._cancel_timer()
        self._stop_watching()
        self.watched_order_id = None
        self.state = PaymentFlowState.CANCELLED if signal != "failed" else PaymentFlowState.FAILED
        self.error = PAYMENT_DECLINED_MESSAGE
        logger.info(f"Payment {signal} for order {self.order_id}")
        self._record_failure(f"payment {signal}")

    def _on_fallback_timeout(self) -> None:
        self._timer = None
        if self._claimed_by is not None or self.state != PaymentFlowState.PROCESSING:
            return

        if self.fallback_assumes_paid:
            self._claim(CompletionSource.FALLBACK_TIMEOUT)
            logger.warning(
                f"No payment confirmation for order {self.order_id} after "
                f"{self.fallback_timeout:g}s; completing without confirmation"
            )
            self._spawn(self._complete(CompletionSource.FALLBACK_TIMEOUT))
        else:
            logger.warning(
                f"No payment confirmation for order {self.order_id} after "
                f"{self.fallback_timeout:g}s; outcome unknown"
            )
            self.error = PAYMENT_UNCONFIRMED_MESSAGE

    def _claim(self, source: CompletionSource) -> bool:
        """Claim the attempt's outcome for one trigger; False if already claimed"""
        if self._claimed_by is not None:
            return False
        self._claimed_by = source
        return True

    async def _complete(self, source: CompletionSource) -> bool:
        """
        Run the completion sequence once.

        Returns:
            False if another trigger already completed the order
        """
        if self._completed:
            return False
        self._completed = True
        self._claimed_by = self._claimed_by or source

        self.completed_by = source
        self.state = PaymentFlowState.CONFIRMED
        self.error = None
        self._cancel_timer()
        self._stop_watching()
        self.watched_order_id = None
        logger.info(f"Order {self.order_id} completed ({source.value})")

        try:
            if self.clear_cart:
                await _maybe_await(self.clear_cart())
            if self.on_complete:
                await _maybe_await(self.on_complete(self.order_id))
        finally:
            self.done.set()
        return True

    def _record_failure(self, error: str) -> None:
        """Write the failed-attempt record in the background"""
        record = FailedOrderRecord(
            order_id=self.order_id or "",
            store_id=self.store_id,
            user_id=self.user_id,
            error=error,
            payment_intent_id=self.intent_id,
            created_at=datetime.now(timezone.utc),
            order_data=Order.model_validate(self._order_data).model_dump(mode="json") if self._order_data else {},
        )
        self._spawn(self._write_failure(record))

    async def _write_failure(self, record: FailedOrderRecord) -> None:
        try:
            await self.orders.record_failed_order(record)
        except Exception as e:
            logger.error(f"Failed to record failed order {record.order_id}: {e}")

    def _spawn(self, coro: Awaitable[Any]) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _stop_watching(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait for completion; False on timeout"""
        try:
            await asyncio.wait_for(self.done.wait(), timeout)
            return True
        except asyncio.TimeoutError:
            return False

    async def close(self) -> None:
        """Tear down timer, subscription and background work"""
        self._cancel_timer()
        self._stop_watching()
        pending = [t for t in self._tasks if not t.done()]
        for task in pending:
            if task is self._confirm_task:
                task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def snapshot(self) -> dict[str, Any]:
        """Public view of the attempt, for the API"""
        return {
            "order_id": self.order_id,
            "state": self.state.value,
            "completed": self._completed,
            "completed_by": self.completed_by.value if self.completed_by else None,
            "error": self.error,
            "client_secret": self.client_secret,
            "intent_id": self.intent_id,
        }


class PaymentFlowRegistry:
    """
    Live state machines by order ID.

    A registered flow stays readable for a retention period after it
    completes, so clients polling for the result still find it, then it is
    closed and dropped. Flows that never complete are dropped after a
    maximum age.
    """

    def __init__(self, retention: Optional[float] = None, max_age: Optional[float] = None):
        self.flows: dict[str, OrderPaymentStateMachine] = {}
        self.retention = retention
        self.max_age = max_age
        self._expiry: dict[str, asyncio.Task] = {}

    def get(self, order_id: str) -> Optional[OrderPaymentStateMachine]:
        return self.flows.get(order_id)

    def put(self, flow: OrderPaymentStateMachine) -> OrderPaymentStateMachine:
        self.flows[flow.order_id] = flow
        previous = self._expiry.pop(flow.order_id, None)
        if previous:
            previous.cancel()
        self._expiry[flow.order_id] = asyncio.create_task(self._expire(flow))
        return flow

    async def discard(self, order_id: str) -> None:
        """Close a flow and forget it"""
        task = self._expiry.pop(order_id, None)
        if task and task is not asyncio.current_task():
            task.cancel()
        flow = self.flows.pop(order_id, None)
        if flow:
            await flow.close()

    async def _expire(self, flow: OrderPaymentStateMachine) -> None:
        retention = settings.payment_flow_retention_seconds if self.retention is None else self.retention
        max_age = settings.payment_flow_max_age_seconds if self.max_age is None else self.max_age

        if not await flow.wait(max_age):
            logger.info(f"Dropping checkout for order {flow.order_id}: not completed after {max_age:g}s")
        else:
            await asyncio.sleep(retention)
        if self.flows.get(flow.order_id) is flow:
            await self.discard(flow.order_id)

    async def close_all(self) -> None:
        for task in self._expiry.values():
            task.cancel()
        self._expiry.clear()
        for flow in list(self.flows.values()):
            await flow.close()
        self.flows.clear()


# Singleton instance
payment_flows = PaymentFlowRegistry()
