"""
Checkout session

Owns one cart and the pricing inputs around it for the duration of a
checkout: fee configuration, the delivery fee for the confirmed address,
and the new-customer discount. Every change goes through the cart reducer
so the summary is always re-derived, never patched.

Async effects (config fetch, product refresh) take a generation token
when they start and drop their result if a newer effect of the same kind
started in the meantime.
"""

import asyncio
import logging
from dataclasses import replace
from typing import Optional

from ..cart.reducer import (
    ApplyRefresh,
    CartAction,
    LoadCart,
    PricingInputs,
    cart_reducer,
    initial_cart_state,
)
from ..cart.refresh import ProductLookup, RefreshResult, refresh_cart_items
from ..errors import DeliveryNotAvailableError, GeocodingError
from ..models.cart import PENDING, CartState, Loaded
from ..models.delivery import (
    DeliveryFeeConfig,
    DeliveryQuote,
    FeeCalculationResult,
    PlatformFeeConfig,
)
from ..models.order import DeliveryAddress
from ..models.product import Store
from ..pricing.delivery_fee import DEFAULT_DELIVERY_FEE_CONFIG, calculate_delivery_fee
from ..pricing.discount import cached_delivery_discount, calculate_delivery_discount
from ..pricing.distance import check_delivery_distance, haversine_distance
from .geocoding import Geocoder

logger = logging.getLogger(__name__)


class CheckoutSession:
    """Cart plus pricing context for one checkout"""

    def __init__(self, cart_id: str, state: Optional[CartState] = None):
        self.cart_id = cart_id
        self.pricing = PricingInputs()
        self.delivery_fee_config: Optional[DeliveryFeeConfig] = None
        self.platform_fee_config: Optional[PlatformFeeConfig] = None
        self.quote: Optional[DeliveryQuote] = None
        self.completed_order_count = 0
        self.is_logged_in = False
        self._config_generation = 0
        self._refresh_generation = 0
        self.state = cart_reducer(initial_cart_state(), LoadCart(state or CartState()), self.pricing)

    @property
    def estimated_distance(self) -> Optional[float]:
        return self.quote.distance_check.distance if self.quote else None

    def dispatch(self, action: CartAction) -> CartState:
        """Apply a cart action with the current pricing inputs"""
        self.state = cart_reducer(self.state, action, self.pricing)
        return self.state

    def _reprice(self) -> None:
        self.state = cart_reducer(self.state, LoadCart(self.state), self.pricing)

    def apply_platform_fee_config(self, config: PlatformFeeConfig) -> None:
        """Replace the cached platform fee config with a fresh one"""
        self.platform_fee_config = config
        fee = config.fixed_amount if config.enabled else 0.0
        self.pricing = replace(
            self.pricing,
            platform_fee=Loaded(fee),
            commission_rate=Loaded(config.commission_rate),
        )
        self._reprice()

    def apply_delivery_fee_config(self, config: DeliveryFeeConfig) -> None:
        """
        Replace the cached delivery fee config with a fresh one.

        A quote computed under the old config no longer holds, so the
        delivery fee goes back to pending until the address is re-quoted.
        """
        self.delivery_fee_config = config
        if self.quote is not None:
            self.clear_delivery_quote()

    async def load_config(self, config_store) -> bool:
        """
        Fetch both fee configs and overwrite the cached ones.

        Returns:
            False if a newer load superseded this one
        """
        self._config_generation += 1
        token = self._config_generation

        delivery_config, platform_config = await asyncio.gather(
            config_store.get_delivery_fee_config(),
            config_store.get_platform_fee_config(),
        )

        if token != self._config_generation:
            logger.debug(f"Discarding superseded config load for cart {self.cart_id}")
            return False

        self.apply_delivery_fee_config(delivery_config)
        self.apply_platform_fee_config(platform_config)
        logger.info(
            f"Loaded fee config for cart {self.cart_id}: platform fee "
            f"{platform_config.fixed_amount:.2f}, commission {platform_config.commission_rate:.2%}"
        )
        return True

    async def refresh_products(self, catalog: ProductLookup) -> Optional[RefreshResult]:
        """
        Revalidate the cart against the catalog.

        Returns:
            The refresh result, or None if a newer refresh superseded this one
        """
        self._refresh_generation += 1
        token = self._refresh_generation

        result = await refresh_cart_items(self.state, catalog)

        if token != self._refresh_generation:
            logger.debug(f"Discarding superseded product refresh for cart {self.cart_id}")
            return None

        self.dispatch(ApplyRefresh(
            tuple(result.items),
            tuple(item.id for item in result.removed_items),
        ))
        if result.removed_items:
            logger.warning(
                f"Removed {len(result.removed_items)} unavailable item(s) from cart "
                f"{self.cart_id}: {', '.join(result.removed_names)}"
            )
        return result

    def set_customer(self, completed_order_count: int, is_logged_in: bool) -> None:
        """
        Update who is checking out.

        With a settled delivery fee the discount is re-derived right away.
        """
        self.completed_order_count = completed_order_count
        self.is_logged_in = is_logged_in
        if self.quote is None:
            return

        config = self.delivery_fee_config or DEFAULT_DELIVERY_FEE_CONFIG
        discount = cached_delivery_discount(
            self.quote.fee.total_fee,
            completed_order_count,
            is_logged_in,
            config.discount_percentage,
            config.discount_eligible_order_count,
        )
        self.quote = self.quote.model_copy(update={"discount": discount})
        self.pricing = replace(self.pricing, discount=discount)
        self._reprice()

    async def quote_delivery(
        self,
        address: DeliveryAddress,
        store: Store,
        geocoder: Geocoder,
    ) -> DeliveryQuote:
        """
        Price delivery to an address.

        Geocodes the address, measures the distance from the store, applies
        the distance gate, then the tiered fee and the new-customer discount.

        Raises:
            GeocodingError: Address could not be located, or the store has no location
            DeliveryNotAvailableError: Address is beyond the maximum distance
        """
        if store.coordinates is None:
            raise GeocodingError("Store location is not available")

        config = self.delivery_fee_config or DEFAULT_DELIVERY_FEE_CONFIG
        customer = address.coordinates or await geocoder.geocode(address)

        distance = haversine_distance(store.coordinates, customer)
        distance_check = check_delivery_distance(distance, config.max_delivery_distance_km)
        if not distance_check.is_supported:
            self.clear_delivery_quote()
            raise DeliveryNotAvailableError(distance_check.reason, distance)

        if config.enabled:
            fee = calculate_delivery_fee(distance, config)
        else:
            fee = FeeCalculationResult(total_fee=0.0, base_fee=0.0, distance_fee=0.0, distance=distance)
        # Fee was just computed: the discount must come from the pure form
        discount = calculate_delivery_discount(
            fee.total_fee,
            self.completed_order_count,
            self.is_logged_in,
            config.discount_percentage,
            config.discount_eligible_order_count,
        )

        self.quote = DeliveryQuote(
            customer_coordinates=customer,
            distance_check=distance_check,
            fee=fee,
            discount=discount,
        )
        self.pricing = replace(self.pricing, delivery_fee=Loaded(fee.total_fee), discount=discount)
        self._reprice()

        logger.info(
            f"Delivery quote for cart {self.cart_id}: {distance:.1f} km, fee {fee.total_fee:.2f}"
            + (f", discounted to {discount.discounted_fee:.2f}" if discount.is_eligible else "")
        )
        return self.quote

    def clear_delivery_quote(self) -> None:
        """Forget the delivery fee; the summary goes back to pending"""
        self.quote = None
        self.pricing = replace(self.pricing, delivery_fee=PENDING, discount=None)
        self._reprice()


class SessionRegistry:
    """Live checkout sessions by cart ID"""

    def __init__(self):
        self.sessions: dict[str, CheckoutSession] = {}

    def get(self, cart_id: str) -> Optional[CheckoutSession]:
        return self.sessions.get(cart_id)

    def put(self, session: CheckoutSession) -> CheckoutSession:
        self.sessions[session.cart_id] = session
        return session

    def discard(self, cart_id: str) -> None:
        self.sessions.pop(cart_id, None)

    def clear(self) -> None:
        self.sessions.clear()


# Singleton instance
session_registry = SessionRegistry()
