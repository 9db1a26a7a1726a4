"""Mock product catalog"""

from typing import Optional

from ..models.delivery import Coordinates
from ..models.product import Product, ProductStatus, Store

STORES: dict[str, Store] = {
    "store-001": Store(
        id="store-001",
        name="Main Street Bakehouse",
        province="BC",
        coordinates=Coordinates(lat=49.2827, lng=-123.1207),
    ),
    "store-002": Store(
        id="store-002",
        name="Sabor Latino Market",
        province="BC",
        coordinates=Coordinates(lat=49.2488, lng=-122.9805),
    ),
    "store-003": Store(
        id="store-003",
        name="Pop-up Stall",
        province="BC",
    ),
}

# Mock product catalog
PRODUCTS: dict[str, Product] = {
    "prod-001": Product(
        id="prod-001",
        name="Sourdough Loaf",
        description="Naturally leavened, baked daily.",
        price=8.50,
        store_id="store-001",
        gst_percentage=0.0,
        pst_percentage=0.0,
        stock=40,
    ),
    "prod-002": Product(
        id="prod-002",
        name="Cold Brew Coffee (1L)",
        description="Small-batch cold brew concentrate.",
        price=12.00,
        store_id="store-001",
        gst_percentage=5.0,
        pst_percentage=0.0,
        stock=25,
    ),
    "prod-003": Product(
        id="prod-003",
        name="Ceramic Mug",
        description="Hand-thrown stoneware mug, 350ml.",
        price=22.00,
        store_id="store-001",
        gst_percentage=5.0,
        pst_percentage=7.0,
        stock=15,
    ),
    "prod-004": Product(
        id="prod-004",
        name="Empanada Box (6)",
        description="Beef and chicken empanadas, frozen.",
        price=18.75,
        store_id="store-002",
        gst_percentage=5.0,
        pst_percentage=0.0,
        stock=30,
    ),
    "prod-005": Product(
        id="prod-005",
        name="Arepa Flour (1kg)",
        description="Pre-cooked white corn meal.",
        price=6.25,
        store_id="store-002",
        gst_percentage=0.0,
        pst_percentage=0.0,
        stock=60,
    ),
    "prod-006": Product(
        id="prod-006",
        name="Seasonal Hot Sauce",
        description="Limited run, no longer produced.",
        price=9.99,
        store_id="store-002",
        status=ProductStatus.DRAFT,
        stock=0,
    ),
}


class ProductDatabase:
    """In-memory product catalog"""

    def __init__(self):
        self.products = {pid: p.model_copy() for pid, p in PRODUCTS.items()}
        self.stores = {sid: s.model_copy() for sid, s in STORES.items()}

    async def get_store_by_id(self, store_id: str) -> Optional[Store]:
        """Get a store by ID"""
        return self.stores.get(store_id)

    async def get_product_by_id(self, product_id: str) -> Optional[Product]:
        """Get a product by ID (None when it does not exist)"""
        product = self.products.get(product_id)
        return product.model_copy() if product else None

    def get_all_products(self, store_id: Optional[str] = None) -> list[Product]:
        """Get all products, optionally for one store"""
        products = list(self.products.values())
        if store_id:
            products = [p for p in products if p.store_id == store_id]
        return products

    def upsert_product(self, product: Product) -> Product:
        """Create or replace a product"""
        self.products[product.id] = product
        return product

    def set_status(self, product_id: str, status: ProductStatus) -> bool:
        """
        Change a product's status.

        Returns:
            True if the product exists
        """
        product = self.products.get(product_id)
        if not product:
            return False
        product.status = status
        return True

    def delete_product(self, product_id: str) -> bool:
        return self.products.pop(product_id, None) is not None


# Singleton instance
product_db = ProductDatabase()
