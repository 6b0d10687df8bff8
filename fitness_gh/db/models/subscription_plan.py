from sqlalchemy import (
    Column, Integer, String, Text, Numeric, Boolean, DateTime, ForeignKey, JSON,
    CheckConstraint, Index,
)
from sqlalchemy.orm import relationship

from fitness_gh.core.dates import utcnow
from fitness_gh.core.enums import DurationUnit
from fitness_gh.db.base import Base


class SubscriptionPlan(Base):
    """
    A purchasable plan offered by one gym.

    Plans are never deleted; ``is_active`` is cleared instead so existing
    memberships keep their plan.
    """
    __tablename__ = "subscription_plans"

    id = Column(Integer, primary_key=True, index=True)
    gym_id = Column(Integer, ForeignKey("gyms.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    currency = Column(String(3), nullable=False, default="GHS")
    duration = Column(Integer, nullable=False)
    duration_unit = Column(String(10), nullable=False, default=DurationUnit.MONTHS.value)
    features = Column(JSON, nullable=True, default=list)
    max_visits = Column(Integer, nullable=True)  # None = unlimited
    is_active = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    gym = relationship("Gym", back_populates="plans")

    __table_args__ = (
        CheckConstraint("duration > 0", name="ck_subscription_plan_duration_positive"),
        Index("idx_plan_gym_sort", "gym_id", "sort_order"),
    )

    def __repr__(self):
        return f"<SubscriptionPlan(id={self.id}, gym_id={self.gym_id}, name='{self.name}')>"
