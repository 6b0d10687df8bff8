from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship

from fitness_gh.core.dates import utcnow
from fitness_gh.core.enums import PaymentStatus, PaymentChannel, PAYMENT_PROVIDER
from fitness_gh.db.base import Base


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    profile_id = Column(Integer, ForeignKey("user_profiles.id"), nullable=False, index=True)
    gym_id = Column(Integer, ForeignKey("gyms.id"), nullable=False, index=True)
    membership_id = Column(Integer, ForeignKey("memberships.id"), nullable=True, index=True)

    reference = Column(String(64), unique=True, index=True, nullable=False)
    amount = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    currency = Column(String(3), nullable=False, default="GHS")
    status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    provider = Column(String(32), nullable=False, default=PAYMENT_PROVIDER)
    channel = Column(String(20), nullable=False, default=PaymentChannel.MOBILE_MONEY.value)
    payment_metadata = Column("metadata", JSON, nullable=True)
    paid_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    profile = relationship("UserProfile")
    gym = relationship("Gym")
    membership = relationship("Membership")

    def __repr__(self):
        return f"<Payment(id={self.id}, reference='{self.reference}', status='{self.status}')>"
