import json
import logging

from fastapi import APIRouter, Depends, Header, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from fitness_gh.core.auth_dependency import get_current_profile_id
from fitness_gh.core.enums import EmployeeRole
from fitness_gh.core.logging_config import sanitize_log_data
from fitness_gh.core.responses import success_response
from fitness_gh.db.session import get_db
from fitness_gh.schemas.payment import (
    InitiatePaymentRequest,
    InitiatePaymentResponse,
    VerifyPaymentResponse,
    WebhookEvent,
    PaymentHistoryItem,
)
from fitness_gh.services import gym_service, payment_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("/initiate")
def initiate_payment(
    data: InitiatePaymentRequest,
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    result = payment_service.initiate_payment(db, profile_id, data)
    return success_response(InitiatePaymentResponse(**result), "Payment initiated")


@router.get("/verify/{reference}")
def verify_payment(reference: str, db: Session = Depends(get_db)):
    payment = payment_service.verify_payment(db, reference)
    return success_response(VerifyPaymentResponse.model_validate(payment))


@router.post("/webhook")
async def payment_webhook(
    request: Request,
    x_payment_signature: str = Header(None),
    db: Session = Depends(get_db),
):
    """
    Provider callback. Always answers 200 so the provider does not retry;
    failures are logged instead.
    """
    payload = await request.body()

    if not payment_service.verify_webhook_signature(payload, x_payment_signature):
        logger.warning("Webhook rejected: bad signature")
        return {"received": True}

    try:
        raw = json.loads(payload or b"{}")
        event = WebhookEvent.model_validate(raw)
    except (ValueError, ValidationError) as e:
        logger.warning(f"Webhook payload rejected: {e}")
        return {"received": True}

    try:
        payment_service.handle_webhook(db, event)
    except Exception:
        db.rollback()
        logger.exception(f"Webhook processing failed: {sanitize_log_data(raw)}")

    return {"received": True}


@router.get("/my")
def my_payments(profile_id: int = Depends(get_current_profile_id), db: Session = Depends(get_db)):
    items = payment_service.get_profile_payments(db, profile_id)
    return success_response([PaymentHistoryItem(**item) for item in items])


@router.get("/gyms/{gym_id}")
def gym_payments(
    gym_id: int,
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    gym_service.check_gym_access(db, gym_id, profile_id, [EmployeeRole.MANAGER])
    items = payment_service.get_gym_payments(db, gym_id)
    return success_response([PaymentHistoryItem(**item) for item in items])
