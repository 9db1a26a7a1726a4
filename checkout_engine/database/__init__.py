# In-memory collaborators

from .documents import DocumentStore, DocumentNotFoundError, document_store
from .products import ProductDatabase, product_db
from .carts import CartDatabase, cart_db
from .orders import OrderDatabase, order_db
from .fee_config import (
    ConfigStore,
    config_store,
    DEFAULT_PLATFORM_FEE_CONFIG,
    validate_delivery_fee_config,
    validate_platform_fee_config,
)

__all__ = [
    "DocumentStore",
    "DocumentNotFoundError",
    "document_store",
    "ProductDatabase",
    "product_db",
    "CartDatabase",
    "cart_db",
    "OrderDatabase",
    "order_db",
    "ConfigStore",
    "config_store",
    "DEFAULT_PLATFORM_FEE_CONFIG",
    "validate_delivery_fee_config",
    "validate_platform_fee_config",
]
