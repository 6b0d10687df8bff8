from sqlalchemy import Column, Integer, String, Text, Float, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship

from fitness_gh.core.dates import utcnow
from fitness_gh.db.base import Base


class Gym(Base):
    __tablename__ = "gyms"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("user_profiles.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    slug = Column(String(200), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)

    # Location
    address = Column(String, nullable=True)
    city = Column(String(100), nullable=True)
    region = Column(String(100), nullable=True)
    country = Column(String(100), nullable=False, default="Ghana")
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    # Contact
    phone = Column(String(32), nullable=True)
    email = Column(String(255), nullable=True)
    website = Column(String, nullable=True)

    logo_url = Column(String, nullable=True)
    cover_image_url = Column(String, nullable=True)
    operating_hours = Column(JSON, nullable=True)  # {"mon": "06:00-22:00", ...}

    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    owner = relationship("UserProfile")
    plans = relationship("SubscriptionPlan", back_populates="gym")

    def __repr__(self):
        return f"<Gym(id={self.id}, slug='{self.slug}')>"
