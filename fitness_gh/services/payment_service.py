"""
Simulated payment provider.

Payments are created PENDING with a checkout URL on the simulator. The
provider later posts a ``charge.success`` webhook, which completes the
payment and activates the linked membership.
"""
import hashlib
import hmac
import logging
import secrets
import time
from typing import Optional, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from fitness_gh.core.config import CHECKOUT_BASE_URL, PAYMENT_WEBHOOK_SECRET
from fitness_gh.core.dates import utcnow
from fitness_gh.core.enums import PaymentStatus, PAYMENT_PROVIDER
from fitness_gh.core.errors import ConflictError, NotFoundError
from fitness_gh.db.models.membership import Membership
from fitness_gh.db.models.payment import Payment
from fitness_gh.schemas.payment import InitiatePaymentRequest, WebhookEvent
from fitness_gh.services import gym_service, subscription_service

logger = logging.getLogger(__name__)

CHARGE_SUCCESS = "charge.success"


def generate_reference() -> str:
    """``REF-<8 hex chars>-<epoch millis>``"""
    return f"REF-{secrets.token_hex(4).upper()}-{int(time.time() * 1000)}"


def format_amount(amount: float) -> str:
    # 50.0 -> "50", 49.5 -> "49.5"
    return f"{amount:.2f}".rstrip("0").rstrip(".")


def build_authorization_url(reference: str, amount: float) -> str:
    return f"{CHECKOUT_BASE_URL.rstrip('/')}/{reference}?amount={format_amount(amount)}"


def initiate_payment(db: Session, profile_id: int, data: InitiatePaymentRequest) -> dict:
    """
    Record a PENDING payment and return where the payer should be sent.

    Raises:
        NotFoundError: Gym or referenced membership does not exist
        ConflictError: Reference collision
    """
    gym_service.get_gym_by_id(db, data.gym_id)
    if data.membership_id is not None:
        if not db.query(Membership.id).filter(Membership.id == data.membership_id).first():
            raise NotFoundError("Membership not found")

    payment = Payment(
        profile_id=profile_id,
        gym_id=data.gym_id,
        membership_id=data.membership_id,
        reference=generate_reference(),
        amount=data.amount,
        currency=data.currency,
        status=PaymentStatus.PENDING.value,
        provider=PAYMENT_PROVIDER,
        channel=data.channel.value,
        payment_metadata=data.metadata,
    )
    db.add(payment)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Payment reference collision: {e.orig}")
        raise ConflictError("Payment reference already exists, please retry")
    db.refresh(payment)

    logger.info(
        f"Payment initiated: reference={payment.reference}, amount={payment.amount} {payment.currency}, "
        f"membership_id={payment.membership_id}"
    )
    return {
        "id": payment.id,
        "reference": payment.reference,
        "amount": payment.amount,
        "currency": payment.currency,
        "status": payment.status,
        "channel": payment.channel,
        "authorization_url": build_authorization_url(payment.reference, payment.amount),
    }


def get_payment_by_reference(db: Session, reference: str) -> Optional[Payment]:
    return db.query(Payment).filter(Payment.reference == reference).first()


def verify_payment(db: Session, reference: str) -> Payment:
    """Look up a payment's current state. Read only."""
    payment = get_payment_by_reference(db, reference)
    if not payment:
        raise NotFoundError("Payment not found")
    return payment


def verify_webhook_signature(payload: bytes, signature: Optional[str], secret: Optional[str] = PAYMENT_WEBHOOK_SECRET) -> bool:
    """
    HMAC-SHA256 check of the raw body against the ``x-payment-signature`` header.

    Without a configured secret every payload is accepted.
    """
    if not secret:
        return True
    if not signature:
        return False
    expected = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature)


def handle_webhook(db: Session, event: WebhookEvent) -> Optional[Payment]:
    """
    Apply a provider event. Only ``charge.success`` changes anything.

    Completing the payment and activating its membership commit together.
    If the activation is refused the payment stays PENDING and a later
    redelivery can retry it. Redelivery for a completed payment is a no-op,
    so the membership is activated at most once per payment.

    Raises:
        ConflictError: The linked membership cannot be activated
    """
    if event.event != CHARGE_SUCCESS:
        logger.info(f"Ignoring webhook event {event.event!r} for {event.data.reference}")
        return None

    reference = event.data.reference
    payment = get_payment_by_reference(db, reference)
    if not payment:
        logger.warning(f"Webhook for unknown payment reference: {reference}")
        return None

    if payment.status == PaymentStatus.COMPLETED.value:
        logger.info(f"Payment already completed, skipping: reference={reference}")
        return payment

    payment.status = PaymentStatus.COMPLETED.value
    payment.paid_at = utcnow()

    membership = None
    if payment.membership_id:
        membership = subscription_service.get_membership_by_id(db, payment.membership_id)
        if membership:
            subscription_service.apply_activation(membership, payment.id)
        else:
            logger.warning(f"Payment {reference} points at missing membership_id={payment.membership_id}")

    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.error(
            f"Membership activation refused, payment left pending: reference={reference}, "
            f"membership_id={payment.membership_id}: {e.orig}"
        )
        raise ConflictError(subscription_service.DUPLICATE_MEMBERSHIP_MESSAGE)

    logger.info(f"Payment completed: reference={reference}, payment_id={payment.id}")
    if membership:
        logger.info(f"Membership activated: membership_id={membership.id}, payment_id={payment.id}")

    db.refresh(payment)
    return payment


def _history_item(payment: Payment) -> dict:
    membership = payment.membership
    return {
        "id": payment.id,
        "reference": payment.reference,
        "amount": payment.amount,
        "currency": payment.currency,
        "status": payment.status,
        "provider": payment.provider,
        "channel": payment.channel,
        "gym_id": payment.gym_id,
        "gym_name": payment.gym.name if payment.gym else None,
        "membership_id": payment.membership_id,
        "plan_name": membership.plan.name if membership and membership.plan else None,
        "payer_username": payment.profile.username if payment.profile else None,
        "paid_at": payment.paid_at,
        "created_at": payment.created_at,
    }


def _history_query(db: Session):
    return db.query(Payment).options(
        joinedload(Payment.gym),
        joinedload(Payment.profile),
        joinedload(Payment.membership).joinedload(Membership.plan),
    )


def get_profile_payments(db: Session, profile_id: int) -> List[dict]:
    payments = (
        _history_query(db)
        .filter(Payment.profile_id == profile_id)
        .order_by(Payment.created_at.desc(), Payment.id.desc())
        .all()
    )
    return [_history_item(p) for p in payments]


def get_gym_payments(db: Session, gym_id: int) -> List[dict]:
    payments = (
        _history_query(db)
        .filter(Payment.gym_id == gym_id)
        .order_by(Payment.created_at.desc(), Payment.id.desc())
        .all()
    )
    return [_history_item(p) for p in payments]
