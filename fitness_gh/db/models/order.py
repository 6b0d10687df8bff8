from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship

from fitness_gh.core.dates import utcnow
from fitness_gh.core.enums import OrderStatus
from fitness_gh.db.base import Base


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("user_profiles.id"), nullable=False, index=True)
    order_number = Column(String(64), unique=True, index=True, nullable=False)
    total = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    currency = Column(String(3), nullable=False, default="GHS")
    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value)
    shipping_address = Column(JSON, nullable=True)
    notes = Column(String, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    customer = relationship("UserProfile")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)  # unit price at order time
    subtotal = Column(Numeric(12, 2, asdecimal=False), nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship("Product")
