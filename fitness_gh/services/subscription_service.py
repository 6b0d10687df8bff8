"""
Subscription plans and the membership lifecycle.

Memberships move PENDING -> ACTIVE (staff activation or a completed payment)
and end CANCELLED. EXPIRED is never written: a membership whose end date
has passed is treated as expired when a visit is recorded.
"""
import logging
from datetime import datetime
from typing import Optional, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from fitness_gh.core.dates import add_duration, utcnow
from fitness_gh.core.enums import MembershipStatus, OPEN_MEMBERSHIP_STATUSES
from fitness_gh.core.errors import ConflictError, NotFoundError
from fitness_gh.db.models.membership import Membership
from fitness_gh.db.models.subscription_plan import SubscriptionPlan
from fitness_gh.schemas.subscription import PlanCreate, PlanUpdate, MembershipUpdate
from fitness_gh.services.auth_service import find_profile_by_email

logger = logging.getLogger(__name__)

DUPLICATE_MEMBERSHIP_MESSAGE = "User already has an active or pending membership for this plan"

# Explicit null clears these; for every other field null means "leave as is"
CLEARABLE_PLAN_FIELDS = {"description", "max_visits", "features"}


# ---------------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------------

def create_plan(db: Session, gym_id: int, data: PlanCreate) -> SubscriptionPlan:
    values = data.model_dump()
    values["duration_unit"] = data.duration_unit.value
    plan = SubscriptionPlan(gym_id=gym_id, is_active=True, **values)
    db.add(plan)
    db.commit()
    db.refresh(plan)
    logger.info(f"Plan created: plan_id={plan.id}, gym_id={gym_id}, name={plan.name!r}")
    return plan


def get_gym_plans(db: Session, gym_id: int, active_only: bool = True) -> List[SubscriptionPlan]:
    query = db.query(SubscriptionPlan).filter(SubscriptionPlan.gym_id == gym_id)
    if active_only:
        query = query.filter(SubscriptionPlan.is_active.is_(True))
    return query.order_by(SubscriptionPlan.sort_order.asc(), SubscriptionPlan.name.asc()).all()


def get_plan_by_id(db: Session, plan_id: int) -> Optional[SubscriptionPlan]:
    return db.query(SubscriptionPlan).filter(SubscriptionPlan.id == plan_id).first()


def _require_plan(db: Session, plan_id: int) -> SubscriptionPlan:
    plan = get_plan_by_id(db, plan_id)
    if not plan:
        raise NotFoundError("Subscription plan not found")
    return plan


def update_plan(db: Session, plan_id: int, data: PlanUpdate) -> SubscriptionPlan:
    plan = _require_plan(db, plan_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None and field not in CLEARABLE_PLAN_FIELDS:
            continue
        setattr(plan, field, getattr(value, "value", value))
    db.commit()
    db.refresh(plan)
    return plan


def delete_plan(db: Session, plan_id: int) -> None:
    """Soft delete; memberships keep pointing at the plan."""
    plan = _require_plan(db, plan_id)
    plan.is_active = False
    db.commit()
    logger.info(f"Plan deactivated: plan_id={plan_id}")


# ---------------------------------------------------------------------------
# Memberships
# ---------------------------------------------------------------------------

def _commit_membership(db: Session, membership: Membership) -> Membership:
    # The partial unique index is the backstop for the open-membership rule
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Open membership conflict: {e.orig}")
        raise ConflictError(DUPLICATE_MEMBERSHIP_MESSAGE)
    db.refresh(membership)
    return membership


def create_membership(
    db: Session,
    profile_id: int,
    gym_id: int,
    plan_id: int,
    start_date: Optional[datetime] = None,
    auto_renew: bool = False,
) -> Membership:
    """
    Create a PENDING membership with its end date derived from the plan.

    Raises:
        NotFoundError: Plan does not exist
        ConflictError: An open (PENDING or ACTIVE) membership already exists
            for the same profile, gym and plan
    """
    plan = _require_plan(db, plan_id)

    existing = (
        db.query(Membership.id)
        .filter(
            Membership.profile_id == profile_id,
            Membership.gym_id == gym_id,
            Membership.plan_id == plan_id,
            Membership.status.in_(OPEN_MEMBERSHIP_STATUSES),
        )
        .first()
    )
    if existing:
        raise ConflictError(DUPLICATE_MEMBERSHIP_MESSAGE)

    start = start_date or utcnow()
    membership = Membership(
        profile_id=profile_id,
        gym_id=gym_id,
        plan_id=plan_id,
        status=MembershipStatus.PENDING.value,
        start_date=start,
        end_date=add_duration(start, plan.duration, plan.duration_unit),
        auto_renew=auto_renew,
        visits_used=0,
    )
    db.add(membership)
    membership = _commit_membership(db, membership)
    logger.info(
        f"Membership created: membership_id={membership.id}, profile_id={profile_id}, "
        f"gym_id={gym_id}, plan_id={plan_id}"
    )
    return membership


def create_membership_by_email(
    db: Session,
    gym_id: int,
    email: str,
    plan_id: int,
    start_date: Optional[datetime] = None,
    auto_renew: bool = False,
) -> Membership:
    profile = find_profile_by_email(db, email)
    if not profile:
        raise NotFoundError("No user found with that email")
    return create_membership(db, profile.id, gym_id, plan_id, start_date, auto_renew)


def get_membership_by_id(db: Session, membership_id: int) -> Optional[Membership]:
    return (
        db.query(Membership)
        .options(joinedload(Membership.plan), joinedload(Membership.profile))
        .filter(Membership.id == membership_id)
        .first()
    )


def _require_membership(db: Session, membership_id: int) -> Membership:
    membership = get_membership_by_id(db, membership_id)
    if not membership:
        raise NotFoundError("Membership not found")
    return membership


def get_gym_memberships(db: Session, gym_id: int, status: Optional[str] = None) -> List[Membership]:
    query = (
        db.query(Membership)
        .options(joinedload(Membership.plan), joinedload(Membership.profile))
        .filter(Membership.gym_id == gym_id)
    )
    if status:
        query = query.filter(Membership.status == getattr(status, "value", status))
    return query.order_by(Membership.created_at.desc(), Membership.id.desc()).all()


def get_profile_memberships(db: Session, profile_id: int) -> List[Membership]:
    return (
        db.query(Membership)
        .options(joinedload(Membership.plan))
        .filter(Membership.profile_id == profile_id)
        .order_by(Membership.created_at.desc(), Membership.id.desc())
        .all()
    )


def apply_activation(membership: Membership, payment_id: Optional[int] = None) -> None:
    """Stage the activation on the session; the caller commits."""
    plan = membership.plan
    now = utcnow()
    membership.start_date = now
    membership.end_date = add_duration(now, plan.duration, plan.duration_unit)
    membership.status = MembershipStatus.ACTIVE.value
    membership.last_payment_id = payment_id


def activate_membership(db: Session, membership_id: int, payment_id: Optional[int] = None) -> Membership:
    """
    Activate a membership starting now.

    The period is recomputed from the current plan settings regardless of
    the previous status, so a late payment still buys a full period.
    """
    membership = _require_membership(db, membership_id)
    apply_activation(membership, payment_id)
    membership = _commit_membership(db, membership)
    logger.info(
        f"Membership activated: membership_id={membership_id}, payment_id={payment_id}, "
        f"end_date={membership.end_date.isoformat()}"
    )
    return membership


def cancel_membership(db: Session, membership_id: int) -> Membership:
    """Cancel from any state. Cancelling twice just restamps ``cancelled_at``."""
    membership = _require_membership(db, membership_id)
    membership.status = MembershipStatus.CANCELLED.value
    membership.cancelled_at = utcnow()
    membership.auto_renew = False
    db.commit()
    db.refresh(membership)
    logger.info(f"Membership cancelled: membership_id={membership_id}")
    return membership


def update_membership(db: Session, membership_id: int, data: MembershipUpdate) -> Membership:
    membership = _require_membership(db, membership_id)
    changes = data.model_dump(exclude_unset=True)

    if changes.get("status") is not None:
        membership.status = getattr(changes["status"], "value", changes["status"])
        if membership.status == MembershipStatus.CANCELLED.value:
            membership.cancelled_at = utcnow()
    if changes.get("auto_renew") is not None:
        membership.auto_renew = changes["auto_renew"]
    if "end_date" in changes:
        membership.end_date = changes["end_date"]

    return _commit_membership(db, membership)


def record_visit(db: Session, membership_id: int) -> Membership:
    """
    Count a gym visit against the membership.

    Raises:
        NotFoundError: Membership does not exist
        ConflictError: Membership not active, past its end date, or out of visits
    """
    membership = _require_membership(db, membership_id)

    if membership.status != MembershipStatus.ACTIVE.value:
        raise ConflictError("Membership is not active")
    if membership.end_date is not None and membership.end_date < utcnow():
        raise ConflictError("Membership has expired")

    max_visits = membership.plan.max_visits if membership.plan else None
    if max_visits is not None and membership.visits_used >= max_visits:
        raise ConflictError("Visit limit reached for this membership")

    # Guarded increment; another session may have taken the last visit
    query = db.query(Membership).filter(
        Membership.id == membership_id,
        Membership.status == MembershipStatus.ACTIVE.value,
    )
    if max_visits is not None:
        query = query.filter(Membership.visits_used < max_visits)
    updated = query.update(
        {Membership.visits_used: Membership.visits_used + 1},
        synchronize_session=False,
    )
    if not updated:
        db.rollback()
        raise ConflictError("Visit limit reached for this membership")
    db.commit()
    db.refresh(membership)
    logger.info(f"Visit recorded: membership_id={membership_id}, visits_used={membership.visits_used}")
    return membership
