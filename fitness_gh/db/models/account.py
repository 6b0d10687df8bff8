from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship

from fitness_gh.core.dates import utcnow
from fitness_gh.core.enums import UserType
from fitness_gh.db.base import Base


class Account(Base):
    """Login identity. Exactly one UserProfile hangs off each account."""
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(32), unique=True, nullable=True)
    password_hash = Column(String, nullable=False)
    user_type = Column(String(20), nullable=False, default=UserType.MEMBER.value)

    email_verified = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    profile = relationship("UserProfile", back_populates="account", uselist=False)
    refresh_tokens = relationship("RefreshToken", back_populates="account", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Account(id={self.id}, email='{self.email}', user_type='{self.user_type}')>"
