from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fitness_gh.core.auth_dependency import get_current_profile_id
from fitness_gh.core.enums import EmployeeRole, MembershipStatus
from fitness_gh.core.errors import NotFoundError
from fitness_gh.core.responses import success_response
from fitness_gh.db.session import get_db
from fitness_gh.schemas.subscription import (
    PlanCreate,
    PlanUpdate,
    PlanResponse,
    MembershipSelfCreate,
    MembershipStaffCreate,
    MembershipUpdate,
    MembershipResponse,
)
from fitness_gh.services import gym_service, subscription_service

router = APIRouter(tags=["Subscriptions"])

PLAN_ADMINS = [EmployeeRole.MANAGER]
FRONT_DESK = [EmployeeRole.MANAGER, EmployeeRole.RECEPTIONIST]


def _membership(membership):
    return MembershipResponse.model_validate(membership)


def _gym_membership(db: Session, gym_id: int, membership_id: int):
    membership = subscription_service.get_membership_by_id(db, membership_id)
    if not membership or membership.gym_id != gym_id:
        raise NotFoundError("Membership not found")
    return membership


def _gym_plan(db: Session, gym_id: int, plan_id: int):
    plan = subscription_service.get_plan_by_id(db, plan_id)
    if not plan or plan.gym_id != gym_id:
        raise NotFoundError("Subscription plan not found")
    return plan


# Plans

@router.get("/gyms/{gym_id}/plans")
def list_plans(gym_id: int, db: Session = Depends(get_db)):
    plans = subscription_service.get_gym_plans(db, gym_id, active_only=True)
    return success_response([PlanResponse.model_validate(p) for p in plans])


@router.get("/gyms/{gym_id}/plans/{plan_id}")
def get_plan(gym_id: int, plan_id: int, db: Session = Depends(get_db)):
    plan = _gym_plan(db, gym_id, plan_id)
    return success_response(PlanResponse.model_validate(plan))


@router.post("/gyms/{gym_id}/plans", status_code=201)
def create_plan(
    gym_id: int,
    data: PlanCreate,
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    gym_service.check_gym_access(db, gym_id, profile_id, PLAN_ADMINS)
    plan = subscription_service.create_plan(db, gym_id, data)
    return success_response(PlanResponse.model_validate(plan), "Subscription plan created")


@router.put("/gyms/{gym_id}/plans/{plan_id}")
def update_plan(
    gym_id: int,
    plan_id: int,
    data: PlanUpdate,
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    gym_service.check_gym_access(db, gym_id, profile_id, PLAN_ADMINS)
    _gym_plan(db, gym_id, plan_id)
    plan = subscription_service.update_plan(db, plan_id, data)
    return success_response(PlanResponse.model_validate(plan), "Subscription plan updated")


@router.delete("/gyms/{gym_id}/plans/{plan_id}")
def delete_plan(
    gym_id: int,
    plan_id: int,
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    gym_service.check_gym_access(db, gym_id, profile_id, PLAN_ADMINS)
    _gym_plan(db, gym_id, plan_id)
    subscription_service.delete_plan(db, plan_id)
    return success_response(None, "Subscription plan deleted")


# Memberships

@router.get("/gyms/{gym_id}/memberships")
def list_memberships(
    gym_id: int,
    status: Optional[MembershipStatus] = Query(None),
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    gym_service.check_gym_access(db, gym_id, profile_id)
    memberships = subscription_service.get_gym_memberships(db, gym_id, status)
    return success_response([_membership(m) for m in memberships])


@router.post("/gyms/{gym_id}/memberships", status_code=201)
def create_membership_for_member(
    gym_id: int,
    data: MembershipStaffCreate,
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    gym_service.check_gym_access(db, gym_id, profile_id, FRONT_DESK)
    membership = subscription_service.create_membership_by_email(
        db, gym_id, data.email, data.plan_id, data.start_date, data.auto_renew
    )
    return success_response(_membership(membership), "Membership created")


@router.post("/gyms/{gym_id}/memberships/self", status_code=201)
def subscribe(
    gym_id: int,
    data: MembershipSelfCreate,
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    gym_service.get_gym_by_id(db, gym_id)
    membership = subscription_service.create_membership(
        db, profile_id, gym_id, data.plan_id, data.start_date, data.auto_renew
    )
    return success_response(
        _membership(membership),
        "Membership created. Please complete payment to activate.",
    )


@router.put("/gyms/{gym_id}/memberships/{membership_id}")
def update_membership(
    gym_id: int,
    membership_id: int,
    data: MembershipUpdate,
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    gym_service.check_gym_access(db, gym_id, profile_id, FRONT_DESK)
    _gym_membership(db, gym_id, membership_id)
    membership = subscription_service.update_membership(db, membership_id, data)
    return success_response(_membership(membership), "Membership updated")


@router.post("/gyms/{gym_id}/memberships/{membership_id}/activate")
def activate_membership(
    gym_id: int,
    membership_id: int,
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    gym_service.check_gym_access(db, gym_id, profile_id, FRONT_DESK)
    _gym_membership(db, gym_id, membership_id)
    membership = subscription_service.activate_membership(db, membership_id)
    return success_response(_membership(membership), "Membership activated")


@router.post("/gyms/{gym_id}/memberships/{membership_id}/visits")
def record_visit(
    gym_id: int,
    membership_id: int,
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    gym_service.check_gym_access(db, gym_id, profile_id)
    _gym_membership(db, gym_id, membership_id)
    membership = subscription_service.record_visit(db, membership_id)
    return success_response(_membership(membership), "Visit recorded")


@router.delete("/gyms/{gym_id}/memberships/{membership_id}")
def cancel_membership(
    gym_id: int,
    membership_id: int,
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    membership = _gym_membership(db, gym_id, membership_id)
    # Members cancel their own; anyone else must be front desk staff
    if membership.profile_id != profile_id:
        gym_service.check_gym_access(db, gym_id, profile_id, FRONT_DESK)
    membership = subscription_service.cancel_membership(db, membership_id)
    return success_response(_membership(membership), "Membership cancelled")


@router.get("/memberships/my")
def my_memberships(profile_id: int = Depends(get_current_profile_id), db: Session = Depends(get_db)):
    memberships = subscription_service.get_profile_memberships(db, profile_id)
    return success_response([_membership(m) for m in memberships])
