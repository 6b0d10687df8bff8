"""
Marketplace: vendor products and customer orders.
"""
import logging
import secrets
import time
from typing import List

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from fitness_gh.core.enums import OrderStatus, ProductStatus, UserType
from fitness_gh.core.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from fitness_gh.db.models.order import Order, OrderItem
from fitness_gh.db.models.product import Product
from fitness_gh.schemas.marketplace import (
    ProductCreate,
    ProductUpdate,
    ProductFilter,
    OrderCreate,
)

logger = logging.getLogger(__name__)

PRODUCT_SORTS = {
    "newest": (Product.created_at.desc(), Product.id.desc()),
    "price_asc": (Product.price.asc(), Product.id.asc()),
    "price_desc": (Product.price.desc(), Product.id.desc()),
    "name": (Product.name.asc(), Product.id.asc()),
}


def generate_order_number() -> str:
    return f"ORD-{int(time.time() * 1000)}-{secrets.token_hex(3).upper()}"


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------

def list_products(db: Session, filters: ProductFilter) -> List[Product]:
    query = db.query(Product).filter(
        Product.is_active.is_(True),
        Product.status == ProductStatus.ACTIVE.value,
    )
    if filters.category:
        query = query.filter(Product.category == filters.category)
    if filters.search:
        pattern = f"%{filters.search}%"
        query = query.filter(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))
    if filters.min_price is not None:
        query = query.filter(Product.price >= filters.min_price)
    if filters.max_price is not None:
        query = query.filter(Product.price <= filters.max_price)
    return query.order_by(*PRODUCT_SORTS[filters.sort_by]).all()


def get_product(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id, Product.is_active.is_(True)).first()
    if not product:
        raise NotFoundError("Product not found")
    return product


def get_vendor_products(db: Session, vendor_id: int) -> List[Product]:
    return (
        db.query(Product)
        .filter(Product.vendor_id == vendor_id, Product.is_active.is_(True))
        .order_by(Product.created_at.desc(), Product.id.desc())
        .all()
    )


def _ensure_sku_free(db: Session, sku: str, exclude_id: int = None) -> None:
    query = db.query(Product.id).filter(Product.sku == sku)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    if query.first():
        raise ConflictError(f"A product with SKU '{sku}' already exists")


def create_product(db: Session, vendor_id: int, data: ProductCreate) -> Product:
    """New products start as DRAFT until the vendor publishes them."""
    if data.sku:
        _ensure_sku_free(db, data.sku)
    product = Product(vendor_id=vendor_id, status=ProductStatus.DRAFT.value, **data.model_dump())
    db.add(product)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"A product with SKU '{data.sku}' already exists")
    db.refresh(product)
    logger.info(f"Product created: product_id={product.id}, vendor_id={vendor_id}")
    return product


def _owned_product(db: Session, product_id: int, vendor_id: int) -> Product:
    product = get_product(db, product_id)
    if product.vendor_id != vendor_id:
        raise ForbiddenError("You can only manage your own products")
    return product


def update_product(db: Session, product_id: int, vendor_id: int, data: ProductUpdate) -> Product:
    product = _owned_product(db, product_id, vendor_id)
    changes = data.model_dump(exclude_unset=True)
    if changes.get("sku"):
        _ensure_sku_free(db, changes["sku"], exclude_id=product_id)
    for field, value in changes.items():
        setattr(product, field, getattr(value, "value", value))
    db.commit()
    db.refresh(product)
    return product


def delete_product(db: Session, product_id: int, vendor_id: int) -> None:
    product = _owned_product(db, product_id, vendor_id)
    product.is_active = False
    product.status = ProductStatus.INACTIVE.value
    db.commit()
    logger.info(f"Product removed: product_id={product_id}")


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------

def _take_stock(db: Session, product: Product, quantity: int) -> None:
    # Conditional decrement; the rows loaded above may already be stale
    product_id, name = product.id, product.name
    updated = (
        db.query(Product)
        .filter(Product.id == product_id, Product.is_active.is_(True), Product.stock >= quantity)
        .update({Product.stock: Product.stock - quantity}, synchronize_session=False)
    )
    if not updated:
        db.rollback()
        logger.warning(f"Stock taken concurrently: product_id={product_id}, requested={quantity}")
        raise ConflictError(
            f"Insufficient stock for {name}",
            details={"product_id": product_id, "requested": quantity},
        )
    db.query(Product).filter(Product.id == product_id, Product.stock == 0).update(
        {Product.status: ProductStatus.OUT_OF_STOCK.value}, synchronize_session=False
    )


def _return_stock(db: Session, product_id: int, quantity: int) -> None:
    db.query(Product).filter(Product.id == product_id).update(
        {Product.stock: Product.stock + quantity}, synchronize_session=False
    )
    db.query(Product).filter(
        Product.id == product_id,
        Product.status == ProductStatus.OUT_OF_STOCK.value,
        Product.stock > 0,
    ).update({Product.status: ProductStatus.ACTIVE.value}, synchronize_session=False)


def create_order(db: Session, customer_id: int, data: OrderCreate) -> Order:
    """
    Place an order and take the stock in a single transaction.

    Raises:
        NotFoundError: A product does not exist or is not for sale
        ConflictError: Not enough stock for a line
        BadRequestError: Lines in different currencies
    """
    quantities = {}
    for line in data.items:
        quantities[line.product_id] = quantities.get(line.product_id, 0) + line.quantity

    products = (
        db.query(Product)
        .filter(Product.id.in_(list(quantities)), Product.is_active.is_(True))
        .all()
    )
    by_id = {p.id: p for p in products}
    missing = [pid for pid in quantities if pid not in by_id]
    if missing:
        raise NotFoundError("Product not found", details={"product_ids": missing})

    for product_id, quantity in quantities.items():
        product = by_id[product_id]
        if product.stock < quantity:
            raise ConflictError(
                f"Insufficient stock for {product.name}",
                details={"product_id": product_id, "available": product.stock, "requested": quantity},
            )

    currencies = {p.currency for p in products}
    if len(currencies) > 1:
        raise BadRequestError("All products in an order must share a currency")

    for product_id, quantity in quantities.items():
        _take_stock(db, by_id[product_id], quantity)

    try:
        order = Order(
            customer_id=customer_id,
            order_number=generate_order_number(),
            total=0,
            currency=currencies.pop(),
            status=OrderStatus.PENDING.value,
            shipping_address=data.shipping_address,
            notes=data.notes,
        )
        total = 0.0
        for product_id, quantity in quantities.items():
            product = by_id[product_id]
            subtotal = round(product.price * quantity, 2)
            order.items.append(OrderItem(
                product_id=product_id,
                quantity=quantity,
                price=product.price,
                subtotal=subtotal,
            ))
            total += subtotal
        order.total = round(total, 2)
        db.add(order)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Order creation failed: {e.orig}")
        raise ConflictError("Order could not be placed, please retry")

    db.refresh(order)
    logger.info(f"Order placed: order_number={order.order_number}, total={order.total} {order.currency}")
    return order


def get_customer_orders(db: Session, customer_id: int) -> List[Order]:
    return (
        db.query(Order)
        .options(selectinload(Order.items))
        .filter(Order.customer_id == customer_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def get_order(db: Session, order_id: int, profile_id: int, user_type: str) -> Order:
    order = db.query(Order).options(selectinload(Order.items)).filter(Order.id == order_id).first()
    if not order:
        raise NotFoundError("Order not found")
    if order.customer_id != profile_id and user_type != UserType.SUPER_ADMIN.value:
        raise ForbiddenError("You cannot view this order")
    return order


def get_vendor_orders(db: Session, vendor_id: int) -> List[Order]:
    """Orders containing at least one of the vendor's products."""
    return (
        db.query(Order)
        .options(selectinload(Order.items))
        .join(Order.items)
        .join(OrderItem.product)
        .filter(Product.vendor_id == vendor_id)
        .distinct()
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def update_order_status(db: Session, order_id: int, profile_id: int, user_type: str, status: OrderStatus) -> Order:
    """
    Customers may only cancel their own pending orders; vendors of a
    product in the order and admins may set any status. Cancelling puts
    the stock back.
    """
    order = db.query(Order).options(selectinload(Order.items)).filter(Order.id == order_id).first()
    if not order:
        raise NotFoundError("Order not found")

    status = getattr(status, "value", status)
    is_admin = user_type == UserType.SUPER_ADMIN.value
    is_vendor = any(item.product.vendor_id == profile_id for item in order.items)
    is_customer = order.customer_id == profile_id

    if not (is_admin or is_vendor):
        if not is_customer:
            raise ForbiddenError("You cannot update this order")
        if status != OrderStatus.CANCELLED.value or order.status != OrderStatus.PENDING.value:
            raise ForbiddenError("Customers can only cancel pending orders")

    if order.status == OrderStatus.CANCELLED.value and status != OrderStatus.CANCELLED.value:
        raise ConflictError("Cancelled orders cannot be reopened")

    if status == OrderStatus.CANCELLED.value and order.status != OrderStatus.CANCELLED.value:
        for item in order.items:
            _return_stock(db, item.product_id, item.quantity)

    order.status = status
    db.commit()
    db.refresh(order)
    logger.info(f"Order {order.order_number} -> {status}")
    return order
