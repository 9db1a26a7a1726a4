"""Cart API routes"""

from fastapi import APIRouter, HTTPException

from ..errors import CartNotFoundError, ProductNotFoundError, StoreMismatchError
from ..models.cart import AddToCartRequest, CartResponse, UpdateCartItemRequest
from ..services.cart_service import cart_service
from ..services.checkout_session import CheckoutSession

router = APIRouter(prefix="/api/cart", tags=["Cart"])


async def load_session(cart_id: str) -> CheckoutSession:
    """Live session for a cart or 404"""
    try:
        return await cart_service.get_session(cart_id)
    except CartNotFoundError:
        raise HTTPException(status_code=404, detail="Cart not found")


@router.post("", response_model=CartResponse)
async def create_cart():
    """Create a new shopping cart"""
    session = await cart_service.create_session()
    return CartResponse(cart_id=session.cart_id, cart=session.state, message="Cart created")


@router.get("/{cart_id}", response_model=CartResponse)
async def get_cart(cart_id: str):
    """Get cart by ID"""
    session = await load_session(cart_id)
    return CartResponse(cart_id=cart_id, cart=session.state)


@router.post("/{cart_id}/refresh", response_model=CartResponse)
async def refresh_cart(cart_id: str):
    """Revalidate the cart against the catalog and reload fee config"""
    try:
        session, result = await cart_service.resume_session(cart_id)
    except CartNotFoundError:
        raise HTTPException(status_code=404, detail="Cart not found")

    removed = result.removed_names if result else []
    message = None
    if removed:
        message = f"Some items are no longer available and were removed: {', '.join(removed)}"
    return CartResponse(cart_id=cart_id, cart=session.state, message=message, removed_items=removed)


@router.post("/{cart_id}/items", response_model=CartResponse)
async def add_to_cart(cart_id: str, request: AddToCartRequest):
    """Add an item to the cart"""
    session = await load_session(cart_id)
    try:
        cart = await cart_service.add_item(session, request.product_id, request.quantity, request.store_name)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")
    except StoreMismatchError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return CartResponse(cart_id=cart_id, cart=cart, message=f"Added {request.quantity}x {request.product_id} to cart")


@router.put("/{cart_id}/items/{item_id}", response_model=CartResponse)
async def update_cart_item(cart_id: str, item_id: str, request: UpdateCartItemRequest):
    """Update item quantity in cart (0 removes it)"""
    session = await load_session(cart_id)
    try:
        cart = await cart_service.update_quantity(session, item_id, request.quantity)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Item not found in cart")

    message = "Item removed from cart" if request.quantity == 0 else "Cart updated"
    return CartResponse(cart_id=cart_id, cart=cart, message=message)


@router.delete("/{cart_id}/items/{item_id}", response_model=CartResponse)
async def remove_from_cart(cart_id: str, item_id: str):
    """Remove an item from the cart"""
    session = await load_session(cart_id)
    try:
        cart = await cart_service.remove_item(session, item_id)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Item not found in cart")
    return CartResponse(cart_id=cart_id, cart=cart, message="Item removed from cart")


@router.delete("/{cart_id}")
async def delete_cart(cart_id: str):
    """Delete a cart"""
    if not await cart_service.delete(cart_id):
        raise HTTPException(status_code=404, detail="Cart not found")
    return {"message": "Cart deleted"}
