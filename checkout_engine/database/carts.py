"""Cart persistence adapter"""

import uuid
from typing import Optional

from ..models.cart import CartState
from .documents import DocumentStore, document_store

CARTS_COLLECTION = "carts"


class CartDatabase:
    """Saves and restores cart state; never computes anything"""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def create_cart(self) -> tuple[str, CartState]:
        """Create a new empty cart"""
        cart_id = str(uuid.uuid4())
        cart = CartState()
        await self.save_cart(cart_id, cart)
        return cart_id, cart

    async def get_cart(self, cart_id: str) -> Optional[CartState]:
        """Get a cart by ID"""
        data = await self.store.get(CARTS_COLLECTION, cart_id)
        return CartState.model_validate(data) if data is not None else None

    async def save_cart(self, cart_id: str, cart: CartState) -> None:
        """Overwrite the stored cart"""
        await self.store.set(CARTS_COLLECTION, cart_id, cart.model_dump(mode="json"))

    async def delete_cart(self, cart_id: str) -> bool:
        """Delete a cart"""
        return await self.store.delete(CARTS_COLLECTION, cart_id)


# Singleton instance
cart_db = CartDatabase(document_store)
