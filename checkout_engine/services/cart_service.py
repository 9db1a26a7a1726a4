"""
Cart mutation layer

Validates requests against the catalog and the single-store rule, runs
them through the session's reducer, then persists the result.
"""

import logging
from typing import Optional

from ..cart.reducer import ClearCart, RemoveItem, UpdateQuantity, add_item
from ..cart.refresh import RefreshResult
from ..database.carts import CartDatabase, cart_db
from ..database.fee_config import ConfigStore, config_store
from ..database.products import ProductDatabase, product_db
from ..errors import CartNotFoundError, ProductNotFoundError, StoreMismatchError
from ..models.cart import CartState
from .checkout_session import CheckoutSession, SessionRegistry, session_registry

logger = logging.getLogger(__name__)


class CartService:
    """Cart operations backed by the cart and product databases"""

    def __init__(
        self,
        carts: CartDatabase = cart_db,
        products: ProductDatabase = product_db,
        configs: ConfigStore = config_store,
        sessions: SessionRegistry = session_registry,
    ):
        self.carts = carts
        self.products = products
        self.configs = configs
        self.sessions = sessions

    async def create_session(self) -> CheckoutSession:
        """Start a new empty cart with fresh fee config"""
        cart_id, state = await self.carts.create_cart()
        session = self.sessions.put(CheckoutSession(cart_id, state))
        await session.load_config(self.configs)
        return session

    async def resume_session(self, cart_id: str) -> tuple[CheckoutSession, Optional[RefreshResult]]:
        """
        Restore a persisted cart and revalidate it against the catalog.

        Returns:
            The session and the refresh result (None if superseded)

        Raises:
            CartNotFoundError: No such cart
        """
        state = await self.carts.get_cart(cart_id)
        if state is None:
            raise CartNotFoundError(f"Cart {cart_id} not found")

        session = self.sessions.get(cart_id) or self.sessions.put(CheckoutSession(cart_id, state))
        await session.load_config(self.configs)
        result = await session.refresh_products(self.products)
        await self.carts.save_cart(cart_id, session.state)
        return session, result

    async def get_session(self, cart_id: str) -> CheckoutSession:
        """Live session for a cart, resuming it if needed"""
        session = self.sessions.get(cart_id)
        if session is None:
            session, _ = await self.resume_session(cart_id)
        return session

    async def add_item(
        self,
        session: CheckoutSession,
        product_id: str,
        quantity: int = 1,
        store_name: Optional[str] = None,
    ) -> CartState:
        """
        Add a product to the cart.

        Raises:
            ProductNotFoundError: Product missing or not sellable
            StoreMismatchError: Cart holds items from another store
        """
        product = await self.products.get_product_by_id(product_id)
        if product is None or not product.is_active:
            raise ProductNotFoundError(f"Product {product_id} is not available")

        if not session.state.can_add_from(product.store_id):
            raise StoreMismatchError(session.state.store_id, product.store_id)

        store = await self.products.get_store_by_id(product.store_id)
        state = session.dispatch(add_item(
            product,
            quantity,
            store_name=store_name or (store.name if store else None),
            store_image=store.image_url if store else None,
        ))
        await self.carts.save_cart(session.cart_id, state)
        logger.info(f"Added {quantity} x {product_id} to cart {session.cart_id}")
        return state

    async def update_quantity(self, session: CheckoutSession, item_id: str, quantity: int) -> CartState:
        """Set an item's quantity; zero removes it"""
        self._require_item(session, item_id)
        state = session.dispatch(UpdateQuantity(item_id, quantity))
        await self.carts.save_cart(session.cart_id, state)
        return state

    async def remove_item(self, session: CheckoutSession, item_id: str) -> CartState:
        self._require_item(session, item_id)
        state = session.dispatch(RemoveItem(item_id))
        await self.carts.save_cart(session.cart_id, state)
        return state

    async def clear(self, session: CheckoutSession) -> CartState:
        """Empty the cart; the delivery quote goes with it"""
        session.clear_delivery_quote()
        state = session.dispatch(ClearCart())
        await self.carts.save_cart(session.cart_id, state)
        logger.info(f"Cleared cart {session.cart_id}")
        return state

    async def delete(self, cart_id: str) -> bool:
        self.sessions.discard(cart_id)
        return await self.carts.delete_cart(cart_id)

    def _require_item(self, session: CheckoutSession, item_id: str) -> None:
        if not any(item.id == item_id for item in session.state.items):
            raise ProductNotFoundError(f"Item {item_id} is not in the cart")


# Singleton instance
cart_service = CartService()
