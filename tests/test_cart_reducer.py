from checkout_engine.cart.reducer import (
    AddItem,
    ApplyRefresh,
    ClearCart,
    LoadCart,
    PricingInputs,
    RemoveItem,
    UpdateQuantity,
    add_item,
    cart_reducer,
    initial_cart_state,
)
from checkout_engine.core.config import settings
from checkout_engine.models.cart import Loaded

from .conftest import make_item, make_product


def _add(state, product, quantity=1, item_id=None, pricing=PricingInputs()):
    action = AddItem(
        item_id=item_id or f"{product.id}-line",
        product=product,
        quantity=quantity,
        store_id=product.store_id,
        store_name="Main Street Bakehouse",
    )
    return cart_reducer(state, action, pricing)


def test_add_sets_store_and_summary():
    state = _add(initial_cart_state(), make_product("a", price=4.00), quantity=2)

    assert state.store_id == "store-001"
    assert state.store_name == "Main Street Bakehouse"
    assert state.items[0].price_at_time == 4.00
    assert state.summary.subtotal == 8.00
    assert state.summary.item_count == 2


def test_adding_same_product_increments_quantity():
    product = make_product("a")
    state = _add(initial_cart_state(), product, 1, item_id="a-1")
    state = _add(state, product, 2, item_id="a-2")

    assert len(state.items) == 1
    assert state.items[0].id == "a-1"
    assert state.items[0].quantity == 3


def test_other_store_is_a_no_op():
    state = _add(initial_cart_state(), make_product("a"))
    unchanged = _add(state, make_product("z", store_id="store-002"))
    assert unchanged is state


def test_update_quantity_and_remove_on_zero():
    state = _add(initial_cart_state(), make_product("a"), item_id="a-1")
    state = _add(state, make_product("b"), item_id="b-1")

    state = cart_reducer(state, UpdateQuantity("a-1", 5))
    assert state.items[0].quantity == 5

    state = cart_reducer(state, UpdateQuantity("a-1", 0))
    assert [item.id for item in state.items] == ["b-1"]


def test_removing_last_item_resets_store():
    state = _add(initial_cart_state(), make_product("a"), item_id="a-1")
    state = cart_reducer(state, RemoveItem("a-1"))

    assert state.is_empty
    assert state.store_id is None
    assert state.can_add_from("store-002")


def test_clear_cart():
    state = _add(initial_cart_state(), make_product("a"))
    cleared = cart_reducer(state, ClearCart())

    assert cleared.is_empty
    assert cleared.store_id is None
    assert cleared.summary.final_total == 0


def test_refresh_removing_everything_resets():
    state = _add(initial_cart_state(), make_product("a"), item_id="a-1")
    state = cart_reducer(state, ApplyRefresh((), removed_ids=("a-1",)))
    assert state.is_empty
    assert state.store_id is None


def test_refresh_keeps_lines_changed_since_it_started():
    state = _add(initial_cart_state(), make_product("a", price=4.00), item_id="a-1")
    state = _add(state, make_product("c"), item_id="c-1")
    snapshot = state.items

    # Cart changes while the catalog lookups are in flight
    state = cart_reducer(state, UpdateQuantity("a-1", 5))
    state = cart_reducer(state, RemoveItem("c-1"))
    state = _add(state, make_product("b"), item_id="b-1")

    refreshed = tuple(
        item.model_copy(update={"price_at_time": 4.50}) if item.id == "a-1" else item
        for item in snapshot
    )
    state = cart_reducer(state, ApplyRefresh(refreshed))

    assert [item.id for item in state.items] == ["a-1", "b-1"]
    assert state.items[0].quantity == 5
    assert state.items[0].price_at_time == 4.50


def test_pricing_inputs_flow_into_summary():
    pricing = PricingInputs(delivery_fee=Loaded(5.00), platform_fee=Loaded(1.00), commission_rate=Loaded(0.10))
    state = _add(initial_cart_state(), make_product("a", price=20.00, gst=0), pricing=pricing)

    assert state.summary.delivery_fee == 5.00
    assert state.summary.platform_fee == 1.00
    assert state.summary.commission_amount == 2.00
    assert state.summary.final_total == 26.00


def test_load_cart_recomputes_summary():
    product = make_product("a", price=3.00, gst=0)
    stale = initial_cart_state().model_copy(update={"items": [make_item(product, 2)], "store_id": "store-001"})
    state = cart_reducer(initial_cart_state(), LoadCart(stale))
    assert state.summary.subtotal == 6.00


def test_add_item_action_creator():
    action = add_item(make_product("a"), 2, store_name="Main Street Bakehouse")
    assert action.store_id == "store-001"
    assert action.item_id.startswith("a-")
    assert action.quantity == 2


def test_pending_fees_use_configured_defaults(monkeypatch):
    monkeypatch.setattr(settings, "default_platform_fee", 3.00)
    monkeypatch.setattr(settings, "default_commission_rate", 0.10)

    state = _add(initial_cart_state(), make_product("a", price=20.00, gst=0))

    assert state.summary.platform_fee == 3.00
    assert state.summary.commission_amount == 2.00
