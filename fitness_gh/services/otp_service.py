"""
Email verification codes.

Codes live in the ``email_verifications`` table. When the database cannot
be written or read, the code is kept in a process-local TTL cache instead,
which means a fallback code only verifies on the worker that issued it.
"""
import logging
import secrets
from datetime import timedelta
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fitness_gh.core.config import OTP_TTL_SECONDS
from fitness_gh.core.dates import utcnow
from fitness_gh.core.errors import BadRequestError
from fitness_gh.core.ttl_cache import TTLCache, otp_fallback_cache
from fitness_gh.db.models.account import Account
from fitness_gh.db.models.email_verification import EmailVerification
from fitness_gh.services import email_service

logger = logging.getLogger(__name__)

OTP_LENGTH = 6


def generate_otp() -> str:
    return f"{secrets.randbelow(10 ** OTP_LENGTH):0{OTP_LENGTH}d}"


def _cache_key(email: str) -> str:
    return f"otp:{email.lower()}"


def create_email_otp(
    db: Session,
    email: str,
    account_id: Optional[int] = None,
    cache: TTLCache = otp_fallback_cache,
) -> str:
    """
    Issue a fresh code for ``email`` and send it.

    Earlier unverified codes for the same address are discarded. Returns the code.
    """
    email = email.lower()
    otp = generate_otp()
    expires_at = utcnow() + timedelta(seconds=OTP_TTL_SECONDS)

    try:
        if account_id is None:
            account = db.query(Account).filter(Account.email == email).first()
            account_id = account.id if account else None
        db.query(EmailVerification).filter(
            EmailVerification.email == email,
            EmailVerification.verified_at.is_(None),
        ).delete(synchronize_session=False)
        db.add(EmailVerification(email=email, otp=otp, account_id=account_id, expires_at=expires_at))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Storing OTP for {email} failed, using in-memory store: {e}")
        cache.set(_cache_key(email), {"otp": otp, "account_id": account_id}, OTP_TTL_SECONDS)

    email_service.send_otp_email(email, otp)
    logger.info(f"OTP issued for {email}")
    return otp


def _mark_account_verified(db: Session, email: str, account_id: Optional[int]) -> None:
    query = db.query(Account)
    account = query.filter(Account.id == account_id).first() if account_id else None
    if account is None:
        account = query.filter(Account.email == email).first()
    if account is not None:
        account.email_verified = True


def _verify_from_cache(db: Session, email: str, otp: str, cache: TTLCache) -> bool:
    entry = cache.get(_cache_key(email))
    if not entry or entry["otp"] != otp:
        raise BadRequestError("Invalid or expired OTP")
    cache.delete(_cache_key(email))
    try:
        _mark_account_verified(db, email, entry.get("account_id"))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"OTP for {email} verified from memory but account flag not saved: {e}")
    logger.info(f"Email verified from in-memory OTP: {email}")
    return True


def verify_email_otp(db: Session, email: str, otp: str, cache: TTLCache = otp_fallback_cache) -> bool:
    """
    Check ``otp`` for ``email`` and flag the account as verified.

    Raises:
        BadRequestError: Unknown, wrong or expired code
    """
    email = email.lower()
    try:
        record = (
            db.query(EmailVerification)
            .filter(EmailVerification.email == email, EmailVerification.verified_at.is_(None))
            .order_by(EmailVerification.created_at.desc(), EmailVerification.id.desc())
            .first()
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"OTP lookup for {email} failed, checking in-memory store: {e}")
        return _verify_from_cache(db, email, otp, cache)

    if record is None:
        return _verify_from_cache(db, email, otp, cache)

    if record.expires_at < utcnow():
        raise BadRequestError("OTP has expired")
    if not secrets.compare_digest(record.otp, otp):
        raise BadRequestError("Invalid OTP")

    record.verified_at = utcnow()
    _mark_account_verified(db, email, record.account_id)
    db.commit()
    logger.info(f"Email verified: {email}")
    return True
