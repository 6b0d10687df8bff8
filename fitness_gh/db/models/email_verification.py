from sqlalchemy import Column, Integer, String, DateTime, ForeignKey

from fitness_gh.core.dates import utcnow
from fitness_gh.db.base import Base


class EmailVerification(Base):
    """One-time code sent to an email address. Only the newest code per email is kept."""
    __tablename__ = "email_verifications"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, index=True)
    otp = Column(String(6), nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=True)
    expires_at = Column(DateTime, nullable=False)
    verified_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
