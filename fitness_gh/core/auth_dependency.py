from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from fitness_gh.core.errors import ForbiddenError, UnauthorizedError
from fitness_gh.core.security import decode_access_token
from fitness_gh.db.session import get_db
from fitness_gh.db.models.account import Account

bearer_scheme = HTTPBearer(auto_error=False)


def get_token_payload(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> dict:
    """Decode the bearer access token."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Authentication required")
    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError:
        raise UnauthorizedError("Invalid or expired token")
    if payload.get("sub") is None:
        raise UnauthorizedError("Invalid token")
    return payload


def get_current_account(
    payload: dict = Depends(get_token_payload),
    db: Session = Depends(get_db),
) -> Account:
    """Current Account from the JWT. Deactivated accounts are rejected."""
    account = db.query(Account).filter(Account.id == int(payload["sub"])).first()
    if not account or not account.is_active:
        raise UnauthorizedError("Account not found or inactive")
    return account


def get_current_profile_id(account: Account = Depends(get_current_account)) -> int:
    if account.profile is None:
        raise ForbiddenError("Profile required")
    return account.profile.id
