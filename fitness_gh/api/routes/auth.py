from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fitness_gh.core.auth_dependency import get_current_account
from fitness_gh.core.responses import success_response
from fitness_gh.db.models.account import Account
from fitness_gh.db.session import get_db
from fitness_gh.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    RefreshRequest,
    ChangePasswordRequest,
    SendOtpRequest,
    VerifyOtpRequest,
    AccountResponse,
)
from fitness_gh.schemas.gym import GymResponse
from fitness_gh.schemas.user import ProfileResponse
from fitness_gh.services import auth_service, otp_service

router = APIRouter(prefix="/auth", tags=["Auth"])


def _session_payload(result: dict) -> dict:
    payload = {
        "account": AccountResponse.model_validate(result["account"]),
        "profile": ProfileResponse.model_validate(result["profile"]) if result.get("profile") else None,
    }
    if result.get("gym") is not None:
        payload["gym"] = GymResponse.model_validate(result["gym"])
    tokens = result.get("tokens")
    if tokens:
        payload.update(tokens)
    return payload


@router.post("/register", status_code=201)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    result = auth_service.register(db, data)
    message = (
        "Registration successful"
        if result["tokens"]
        else "Registration successful. Check your email for a verification code."
    )
    return success_response(_session_payload(result), message)


@router.post("/login")
def login(data: LoginRequest, db: Session = Depends(get_db)):
    result = auth_service.login(db, data.email, data.password)
    return success_response(_session_payload(result), "Login successful")


@router.post("/refresh")
def refresh(data: RefreshRequest, db: Session = Depends(get_db)):
    return success_response(auth_service.refresh_tokens(db, data.refresh_token))


@router.post("/logout")
def logout(data: RefreshRequest, db: Session = Depends(get_db)):
    auth_service.logout(db, data.refresh_token)
    return success_response(None, "Logged out")


@router.post("/logout-all")
def logout_all(account: Account = Depends(get_current_account), db: Session = Depends(get_db)):
    revoked = auth_service.logout_all(db, account.id)
    return success_response({"revoked": revoked}, "Logged out of all sessions")


@router.get("/me")
def me(account: Account = Depends(get_current_account)):
    return success_response(_session_payload({"account": account, "profile": account.profile}))


@router.post("/change-password")
def change_password(
    data: ChangePasswordRequest,
    account: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
):
    auth_service.change_password(db, account.id, data.current_password, data.new_password)
    return success_response(None, "Password changed. Please log in again.")


@router.post("/send-otp")
def send_otp(data: SendOtpRequest, db: Session = Depends(get_db)):
    otp_service.create_email_otp(db, data.email)
    return success_response(None, "Verification code sent")


@router.post("/verify-otp")
def verify_otp(data: VerifyOtpRequest, db: Session = Depends(get_db)):
    otp_service.verify_email_otp(db, data.email, data.otp)
    return success_response({"email": data.email, "verified": True}, "Email verified")
