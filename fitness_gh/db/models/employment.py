from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from fitness_gh.core.dates import utcnow
from fitness_gh.core.enums import EmployeeRole
from fitness_gh.db.base import Base


class Employment(Base):
    """Links a profile to a gym as staff. Removal deactivates the row instead of deleting it."""
    __tablename__ = "employments"

    id = Column(Integer, primary_key=True, index=True)
    profile_id = Column(Integer, ForeignKey("user_profiles.id"), nullable=False, index=True)
    gym_id = Column(Integer, ForeignKey("gyms.id"), nullable=False, index=True)
    role = Column(String(20), nullable=False, default=EmployeeRole.STAFF.value)
    is_active = Column(Boolean, nullable=False, default=True)
    start_date = Column(DateTime, nullable=False, default=utcnow)
    end_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    profile = relationship("UserProfile")
    gym = relationship("Gym")

    __table_args__ = (
        UniqueConstraint("profile_id", "gym_id", name="uq_employment_profile_gym"),
    )
