from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fitness_gh.core.auth_dependency import get_current_account, get_current_profile_id
from fitness_gh.core.responses import success_response
from fitness_gh.db.models.account import Account
from fitness_gh.db.session import get_db
from fitness_gh.schemas.marketplace import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductFilter,
    OrderCreate,
    OrderStatusUpdate,
    OrderResponse,
)
from fitness_gh.services import marketplace_service

router = APIRouter(prefix="/marketplace", tags=["Marketplace"])


def _products(products):
    return [ProductResponse.model_validate(p) for p in products]


def _orders(orders):
    return [OrderResponse.model_validate(o) for o in orders]


@router.get("/products")
def list_products(
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    sort_by: str = Query("newest", pattern="^(newest|price_asc|price_desc|name)$"),
    db: Session = Depends(get_db),
):
    filters = ProductFilter(
        category=category, search=search, min_price=min_price, max_price=max_price, sort_by=sort_by
    )
    return success_response(_products(marketplace_service.list_products(db, filters)))


@router.get("/products/mine")
def my_products(profile_id: int = Depends(get_current_profile_id), db: Session = Depends(get_db)):
    return success_response(_products(marketplace_service.get_vendor_products(db, profile_id)))


@router.get("/products/{product_id}")
def get_product(product_id: int, db: Session = Depends(get_db)):
    return success_response(ProductResponse.model_validate(marketplace_service.get_product(db, product_id)))


@router.post("/products", status_code=201)
def create_product(
    data: ProductCreate,
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    product = marketplace_service.create_product(db, profile_id, data)
    return success_response(ProductResponse.model_validate(product), "Product created")


@router.put("/products/{product_id}")
def update_product(
    product_id: int,
    data: ProductUpdate,
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    product = marketplace_service.update_product(db, product_id, profile_id, data)
    return success_response(ProductResponse.model_validate(product), "Product updated")


@router.delete("/products/{product_id}")
def delete_product(
    product_id: int,
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    marketplace_service.delete_product(db, product_id, profile_id)
    return success_response(None, "Product deleted")


@router.post("/orders", status_code=201)
def create_order(
    data: OrderCreate,
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    order = marketplace_service.create_order(db, profile_id, data)
    return success_response(OrderResponse.model_validate(order), "Order placed")


@router.get("/orders/my")
def my_orders(profile_id: int = Depends(get_current_profile_id), db: Session = Depends(get_db)):
    return success_response(_orders(marketplace_service.get_customer_orders(db, profile_id)))


@router.get("/orders/vendor")
def vendor_orders(profile_id: int = Depends(get_current_profile_id), db: Session = Depends(get_db)):
    return success_response(_orders(marketplace_service.get_vendor_orders(db, profile_id)))


@router.get("/orders/{order_id}")
def get_order(
    order_id: int,
    account: Account = Depends(get_current_account),
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    order = marketplace_service.get_order(db, order_id, profile_id, account.user_type)
    return success_response(OrderResponse.model_validate(order))


@router.patch("/orders/{order_id}/status")
def update_order_status(
    order_id: int,
    data: OrderStatusUpdate,
    account: Account = Depends(get_current_account),
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    order = marketplace_service.update_order_status(db, order_id, profile_id, account.user_type, data.status)
    return success_response(OrderResponse.model_validate(order), "Order status updated")
