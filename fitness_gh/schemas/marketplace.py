"""
Pydantic schemas for marketplace products and orders.
"""
from typing import Optional, List, Dict, Any
from datetime import datetime
from pydantic import BaseModel, Field

from fitness_gh.core.enums import ProductStatus, OrderStatus


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    category: Optional[str] = Field(None, max_length=50, description="e.g. supplements, apparel, equipment")
    price: float = Field(..., gt=0, le=1000000)
    currency: str = Field(default="GHS", min_length=3, max_length=3)
    stock: int = Field(default=0, ge=0)
    sku: Optional[str] = Field(None, max_length=64)
    image_url: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    category: Optional[str] = Field(None, max_length=50)
    price: Optional[float] = Field(None, gt=0, le=1000000)
    stock: Optional[int] = Field(None, ge=0)
    sku: Optional[str] = Field(None, max_length=64)
    image_url: Optional[str] = None
    status: Optional[ProductStatus] = None


class ProductResponse(BaseModel):
    id: int
    vendor_id: int
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    price: float
    currency: str
    stock: int
    sku: Optional[str] = None
    image_url: Optional[str] = None
    status: ProductStatus
    rating: Optional[float] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ProductFilter(BaseModel):
    category: Optional[str] = None
    search: Optional[str] = Field(None, description="Matches name or description")
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    sort_by: str = Field(default="newest", pattern="^(newest|price_asc|price_desc|name)$")


class OrderItemCreate(BaseModel):
    product_id: int = Field(..., ge=1)
    quantity: int = Field(..., ge=1, le=1000)


class OrderCreate(BaseModel):
    items: List[OrderItemCreate] = Field(..., min_length=1)
    shipping_address: Optional[Dict[str, Any]] = None
    notes: Optional[str] = Field(None, max_length=500)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderItemResponse(BaseModel):
    id: int
    product_id: int
    quantity: int
    price: float
    subtotal: float

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: int
    customer_id: int
    order_number: str
    total: float
    currency: str
    status: OrderStatus
    shipping_address: Optional[Dict[str, Any]] = None
    notes: Optional[str] = None
    items: List[OrderItemResponse] = []
    created_at: datetime

    class Config:
        from_attributes = True
