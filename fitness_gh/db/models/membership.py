from sqlalchemy import Column, Integer, Boolean, String, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import relationship

from fitness_gh.core.dates import utcnow
from fitness_gh.core.enums import MembershipStatus
from fitness_gh.db.base import Base

OPEN_STATUS_CLAUSE = "status IN ('PENDING', 'ACTIVE')"


class Membership(Base):
    __tablename__ = "memberships"

    id = Column(Integer, primary_key=True, index=True)
    profile_id = Column(Integer, ForeignKey("user_profiles.id"), nullable=False, index=True)
    gym_id = Column(Integer, ForeignKey("gyms.id"), nullable=False, index=True)
    plan_id = Column(Integer, ForeignKey("subscription_plans.id"), nullable=False)

    status = Column(String(20), nullable=False, default=MembershipStatus.PENDING.value)
    start_date = Column(DateTime, nullable=False, default=utcnow)
    end_date = Column(DateTime, nullable=True)
    auto_renew = Column(Boolean, nullable=False, default=False)
    visits_used = Column(Integer, nullable=False, default=0)
    cancelled_at = Column(DateTime, nullable=True)
    # Plain column, payments point back at memberships and a second FK would make a cycle
    last_payment_id = Column(Integer, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    profile = relationship("UserProfile")
    gym = relationship("Gym")
    plan = relationship("SubscriptionPlan")

    __table_args__ = (
        # At most one pending or active membership per (profile, gym, plan)
        Index(
            "uq_membership_open_per_plan",
            "profile_id", "gym_id", "plan_id",
            unique=True,
            sqlite_where=text(OPEN_STATUS_CLAUSE),
            postgresql_where=text(OPEN_STATUS_CLAUSE),
        ),
        Index("idx_membership_gym_status", "gym_id", "status"),
    )

    def __repr__(self):
        return f"<Membership(id={self.id}, profile_id={self.profile_id}, status='{self.status}')>"
