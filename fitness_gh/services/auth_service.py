"""
Account registration, login and refresh-token rotation.
"""
import logging
from datetime import timedelta
from typing import Optional

from jose import JWTError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fitness_gh.core.config import REFRESH_TOKEN_EXPIRE_DAYS
from fitness_gh.core.dates import utcnow
from fitness_gh.core.enums import UserType
from fitness_gh.core.errors import ConflictError, NotFoundError, UnauthorizedError
from fitness_gh.core.security import (
    hash_password,
    verify_password,
    create_token_pair,
    decode_refresh_token,
)
from fitness_gh.db.models.account import Account
from fitness_gh.db.models.profile import UserProfile
from fitness_gh.db.models.refresh_token import RefreshToken
from fitness_gh.schemas.auth import RegisterRequest
from fitness_gh.schemas.gym import GymCreate
from fitness_gh.schemas.user import ProfileUpdate
from fitness_gh.services import gym_service, otp_service, email_service

logger = logging.getLogger(__name__)


def _issue_tokens(db: Session, account: Account) -> dict:
    """Mint an access/refresh pair and persist the refresh token. Caller commits."""
    profile_id = account.profile.id if account.profile else None
    tokens = create_token_pair(account.id, account.user_type, profile_id)
    db.add(RefreshToken(
        account_id=account.id,
        token=tokens["refresh_token"],
        expires_at=utcnow() + timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS),
    ))
    return tokens


def register(db: Session, data: RegisterRequest) -> dict:
    """
    Create an account with its profile (and a gym for owners) in one transaction.

    Tokens are only returned once the email is verified, so a fresh
    registration gets an OTP email instead.

    Raises:
        ConflictError: Email, username or phone already in use
    """
    email = data.email.lower()
    if db.query(Account.id).filter(Account.email == email).first():
        raise ConflictError("Email already registered")
    if db.query(UserProfile.id).filter(UserProfile.username == data.username).first():
        raise ConflictError("Username already taken")
    if data.phone and db.query(Account.id).filter(Account.phone == data.phone).first():
        raise ConflictError("Phone number already registered")

    gym = None
    try:
        account = Account(
            email=email,
            phone=data.phone,
            password_hash=hash_password(data.password),
            user_type=data.user_type.value,
        )
        db.add(account)
        db.flush()

        profile = UserProfile(
            account_id=account.id,
            username=data.username,
            first_name=data.first_name,
            last_name=data.last_name,
        )
        db.add(profile)
        db.flush()

        if data.user_type == UserType.GYM_OWNER and data.gym_name:
            gym = gym_service.build_gym(db, profile.id, GymCreate(name=data.gym_name))

        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Registration conflict for {email}: {e.orig}")
        raise ConflictError("Account details already in use")

    db.refresh(account)
    logger.info(f"Account registered: account_id={account.id}, user_type={account.user_type}")

    tokens = None
    if account.email_verified:
        tokens = _issue_tokens(db, account)
        db.commit()
    else:
        otp_service.create_email_otp(db, email, account.id)
    email_service.send_welcome_email(email, profile.full_name)

    return {"account": account, "profile": account.profile, "gym": gym, "tokens": tokens}


def login(db: Session, email: str, password: str) -> dict:
    account = db.query(Account).filter(Account.email == email.lower()).first()
    if not account or not verify_password(password, account.password_hash):
        logger.info(f"Failed login for {email}")
        raise UnauthorizedError("Invalid email or password")
    if not account.is_active:
        raise UnauthorizedError("Account is deactivated")

    account.last_login_at = utcnow()
    tokens = _issue_tokens(db, account)
    db.commit()
    db.refresh(account)
    logger.info(f"Login: account_id={account.id}")
    return {"account": account, "profile": account.profile, "tokens": tokens}


def refresh_tokens(db: Session, refresh_token: str) -> dict:
    """
    Rotate a refresh token: the presented one is revoked and a new pair issued.

    Raises:
        UnauthorizedError: Token invalid, unknown, revoked, expired, or account inactive
    """
    try:
        payload = decode_refresh_token(refresh_token)
    except JWTError:
        raise UnauthorizedError("Invalid refresh token")

    stored = db.query(RefreshToken).filter(RefreshToken.token == refresh_token).first()
    if not stored or stored.revoked_at is not None:
        raise UnauthorizedError("Refresh token has been revoked")
    if stored.expires_at < utcnow():
        raise UnauthorizedError("Refresh token has expired")

    account = db.query(Account).filter(Account.id == stored.account_id).first()
    if not account or not account.is_active or str(account.id) != str(payload.get("sub")):
        raise UnauthorizedError("Account is not active")

    stored.revoked_at = utcnow()
    tokens = _issue_tokens(db, account)
    db.commit()
    return tokens


def logout(db: Session, refresh_token: str) -> None:
    stored = db.query(RefreshToken).filter(RefreshToken.token == refresh_token).first()
    if stored and stored.revoked_at is None:
        stored.revoked_at = utcnow()
        db.commit()


def logout_all(db: Session, account_id: int) -> int:
    """Revoke every live refresh token of the account. Returns how many were revoked."""
    count = (
        db.query(RefreshToken)
        .filter(RefreshToken.account_id == account_id, RefreshToken.revoked_at.is_(None))
        .update({RefreshToken.revoked_at: utcnow()}, synchronize_session=False)
    )
    db.commit()
    logger.info(f"Revoked {count} refresh tokens for account_id={account_id}")
    return count


def get_account(db: Session, account_id: int) -> Account:
    account = db.query(Account).filter(Account.id == account_id).first()
    if not account:
        raise NotFoundError("Account not found")
    return account


def change_password(db: Session, account_id: int, current_password: str, new_password: str) -> None:
    account = get_account(db, account_id)
    if not verify_password(current_password, account.password_hash):
        raise UnauthorizedError("Current password is incorrect")

    account.password_hash = hash_password(new_password)
    # Same transaction: every session is signed out with the password change
    db.query(RefreshToken).filter(
        RefreshToken.account_id == account_id,
        RefreshToken.revoked_at.is_(None),
    ).update({RefreshToken.revoked_at: utcnow()}, synchronize_session=False)
    db.commit()
    logger.info(f"Password changed: account_id={account_id}")


def get_profile(db: Session, profile_id: int) -> UserProfile:
    profile = db.query(UserProfile).filter(UserProfile.id == profile_id).first()
    if not profile:
        raise NotFoundError("Profile not found")
    return profile


def update_profile(db: Session, profile_id: int, data: ProfileUpdate) -> UserProfile:
    profile = get_profile(db, profile_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(profile, field, value)
    db.commit()
    db.refresh(profile)
    return profile


def find_profile_by_email(db: Session, email: str) -> Optional[UserProfile]:
    account = db.query(Account).filter(Account.email == email.lower()).first()
    return account.profile if account else None
