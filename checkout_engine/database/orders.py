"""Order persistence and live status feed"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from ..errors import OrderNotFoundError, OrderStateError
from ..models.order import (
    FailedOrderRecord,
    Order,
    OrderStatus,
    PaymentStatus,
    StatusUpdate,
    can_transition,
    is_final_state,
)
from .documents import DocumentStore, document_store

logger = logging.getLogger(__name__)

ORDERS_COLLECTION = "orders"
FAILED_ORDERS_COLLECTION = "failed_orders"


class OrderDatabase:
    """Orders collection plus the separate failed-attempt log"""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def create_order(self, order_id: str, data: dict[str, Any]) -> Order:
        """
        Persist a new order under a caller-generated ID.

        Args:
            order_id: Client-generated order ID, shared with the payment processor
            data: Order document fields (see build_order_data)

        Returns:
            The stored order
        """
        order = Order.model_validate({**data, "id": order_id})
        await self.store.set(ORDERS_COLLECTION, order_id, order.model_dump(mode="json"))
        logger.info(f"Created order {order_id} for store {order.store_id}")
        return order

    async def get_order(self, order_id: str) -> Optional[Order]:
        """Get an order by ID"""
        data = await self.store.get(ORDERS_COLLECTION, order_id)
        return Order.model_validate(data) if data is not None else None

    async def list_orders(self, store_id: Optional[str] = None) -> list[Order]:
        orders = [Order.model_validate(d) for d in await self.store.list_documents(ORDERS_COLLECTION)]
        if store_id:
            orders = [o for o in orders if o.store_id == store_id]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    async def update_order(self, order_id: str, updates: dict[str, Any]) -> Order:
        """
        Update fields on a non-terminal order.

        Raises:
            OrderNotFoundError: Order does not exist
            OrderStateError: Order is delivered or cancelled
        """
        order = await self.get_order(order_id)
        if order is None:
            raise OrderNotFoundError(f"Order {order_id} not found")
        if is_final_state(order.status):
            raise OrderStateError(f"Order {order_id} is {order.status.value} and can no longer change")

        merged = order.model_copy(update={**updates, "updated_at": datetime.now(timezone.utc)})
        # Round-trip through validation so enum fields stay typed
        merged = Order.model_validate(merged.model_dump())
        await self.store.set(ORDERS_COLLECTION, order_id, merged.model_dump(mode="json"))
        return merged

    async def update_status(
        self,
        order_id: str,
        status: Optional[OrderStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
    ) -> Order:
        """
        Move an order along its fulfillment and/or payment axis.

        This is the path the payment webhook and store operators use.

        Raises:
            OrderStateError: Transition not allowed from the current status
        """
        order = await self.get_order(order_id)
        if order is None:
            raise OrderNotFoundError(f"Order {order_id} not found")

        updates: dict[str, Any] = {}
        if status is not None and status != order.status:
            if not can_transition(order.status, status):
                raise OrderStateError(
                    f"Cannot move order {order_id} from {order.status.value} to {status.value}"
                )
            updates["status"] = status
        if payment_status is not None:
            updates["payment_status"] = payment_status

        if not updates:
            return order
        logger.info(f"Order {order_id} status update: {updates}")
        return await self.update_order(order_id, updates)

    def subscribe_to_order_status(
        self,
        order_id: str,
        on_update: Callable[[StatusUpdate], None],
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> Callable[[], None]:
        """
        Push status snapshots for one order.

        Returns:
            Function that stops the subscription
        """

        def handle_snapshot(doc: Optional[dict[str, Any]]) -> None:
            if doc is None:
                return
            on_update(StatusUpdate(
                order_id=order_id,
                status=doc.get("status", ""),
                payment_status=doc.get("payment_status"),
                updated_at=doc.get("updated_at"),
            ))

        return self.store.subscribe(ORDERS_COLLECTION, order_id, handle_snapshot, on_error)

    async def record_failed_order(self, record: FailedOrderRecord) -> bool:
        """
        Write a failed payment attempt to the failed-attempt log.

        Never raises: a failed write is logged and reported as False.
        """
        try:
            doc_id = f"{record.order_id}_{int(record.created_at.timestamp() * 1000)}"
            await self.store.set(FAILED_ORDERS_COLLECTION, doc_id, record.model_dump(mode="json"))
            logger.info(f"Recorded failed payment attempt for order {record.order_id}")
            return True
        except Exception as e:
            logger.error(f"Could not record failed order {record.order_id}: {e}")
            return False

    async def list_failed_orders(self, order_id: Optional[str] = None) -> list[FailedOrderRecord]:
        records = [
            FailedOrderRecord.model_validate(d)
            for d in await self.store.list_documents(FAILED_ORDERS_COLLECTION)
        ]
        if order_id:
            records = [r for r in records if r.order_id == order_id]
        return records


# Singleton instance
order_db = OrderDatabase(document_store)
