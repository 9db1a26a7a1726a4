"""Product models for the checkout engine"""

from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum

from .delivery import Coordinates


class ProductStatus(str, Enum):
    ACTIVE = "active"
    DRAFT = "draft"
    OUT_OF_STOCK = "outOfStock"


class Product(BaseModel):
    """Product snapshot as seen by the cart"""
    id: str
    name: str
    description: str = ""
    price: float = Field(ge=0)
    store_id: str
    status: ProductStatus = ProductStatus.ACTIVE
    available: bool = True
    stock: int = Field(ge=0, default=100)
    # Percent units (5.0 == 5%)
    gst_percentage: float = Field(ge=0, default=5.0)
    pst_percentage: float = Field(ge=0, default=0.0)
    image_url: Optional[str] = None

    class Config:
        from_attributes = True

    @property
    def is_active(self) -> bool:
        return self.status == ProductStatus.ACTIVE and self.available


class Store(BaseModel):
    """Store as needed by checkout: where it is and what it is called"""
    id: str
    name: str
    image_url: Optional[str] = None
    province: str = "BC"
    coordinates: Optional[Coordinates] = None
