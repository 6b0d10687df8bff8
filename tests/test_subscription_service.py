"""
Unit tests for plans and the membership lifecycle.
"""
from datetime import datetime, timedelta

import pytest

from fitness_gh.core.dates import add_duration, utcnow
from fitness_gh.core.errors import ConflictError, NotFoundError
from fitness_gh.db.models.membership import Membership
from fitness_gh.schemas.subscription import PlanCreate, PlanUpdate, MembershipUpdate
from fitness_gh.services import subscription_service as svc

from conftest import TestSessionLocal


# ---------------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------------

def test_create_plan_defaults(db_session, gym):
    plan = svc.create_plan(db_session, gym.id, PlanCreate(name="Day Pass", price=15, duration=1, duration_unit="DAYS"))

    assert plan.is_active is True
    assert plan.currency == "GHS"
    assert plan.features == []
    assert plan.max_visits is None


def test_gym_plans_sorted_by_sort_order_then_name(db_session, gym):
    svc.create_plan(db_session, gym.id, PlanCreate(name="Zumba", price=10, duration=1, sort_order=1))
    svc.create_plan(db_session, gym.id, PlanCreate(name="Annual", price=900, duration=1, duration_unit="YEARS", sort_order=2))
    svc.create_plan(db_session, gym.id, PlanCreate(name="Basic", price=10, duration=1, sort_order=1))

    names = [p.name for p in svc.get_gym_plans(db_session, gym.id)]
    assert names == ["Basic", "Zumba", "Annual"]


def test_update_plan_only_touches_supplied_fields(db_session, monthly_plan):
    plan = svc.update_plan(db_session, monthly_plan.id, PlanUpdate(price=65.5))

    assert plan.price == 65.5
    assert plan.name == "Monthly"
    assert plan.duration == 1


def test_delete_plan_is_soft(db_session, gym, monthly_plan):
    svc.delete_plan(db_session, monthly_plan.id)

    assert svc.get_gym_plans(db_session, gym.id, active_only=True) == []
    assert [p.id for p in svc.get_gym_plans(db_session, gym.id, active_only=False)] == [monthly_plan.id]
    assert svc.get_plan_by_id(db_session, monthly_plan.id).is_active is False


def test_update_or_delete_missing_plan_raises_not_found(db_session):
    with pytest.raises(NotFoundError):
        svc.update_plan(db_session, 999, PlanUpdate(name="Nope"))
    with pytest.raises(NotFoundError):
        svc.delete_plan(db_session, 999)


# ---------------------------------------------------------------------------
# Memberships
# ---------------------------------------------------------------------------

def test_create_membership_is_pending_with_plan_end_date(db_session, gym, member, monthly_plan):
    _, profile = member
    start = datetime(2024, 1, 31, 8, 0)

    membership = svc.create_membership(db_session, profile.id, gym.id, monthly_plan.id, start_date=start)

    assert membership.status == "PENDING"
    assert membership.start_date == start
    assert membership.end_date == datetime(2024, 3, 2, 8, 0)
    assert membership.visits_used == 0
    assert membership.auto_renew is False


def test_create_membership_unknown_plan(db_session, gym, member):
    _, profile = member
    with pytest.raises(NotFoundError):
        svc.create_membership(db_session, profile.id, gym.id, 12345)


def test_second_open_membership_for_same_plan_conflicts(db_session, gym, member, monthly_plan):
    _, profile = member
    svc.create_membership(db_session, profile.id, gym.id, monthly_plan.id)

    with pytest.raises(ConflictError):
        svc.create_membership(db_session, profile.id, gym.id, monthly_plan.id)

    count = db_session.query(Membership).filter(Membership.profile_id == profile.id).count()
    assert count == 1


def test_new_membership_allowed_after_cancellation(db_session, gym, member, monthly_plan):
    _, profile = member
    first = svc.create_membership(db_session, profile.id, gym.id, monthly_plan.id)
    svc.cancel_membership(db_session, first.id)

    second = svc.create_membership(db_session, profile.id, gym.id, monthly_plan.id)
    assert second.id != first.id
    assert second.status == "PENDING"


def test_create_membership_by_email(db_session, gym, member, monthly_plan):
    _, profile = member
    membership = svc.create_membership_by_email(db_session, gym.id, "MEMBER@example.com", monthly_plan.id)
    assert membership.profile_id == profile.id

    with pytest.raises(NotFoundError):
        svc.create_membership_by_email(db_session, gym.id, "ghost@example.com", monthly_plan.id)


def test_activate_restarts_period_from_now(db_session, gym, member, monthly_plan):
    _, profile = member
    membership = svc.create_membership(
        db_session, profile.id, gym.id, monthly_plan.id, start_date=datetime(2020, 1, 1)
    )
    before = utcnow()

    activated = svc.activate_membership(db_session, membership.id, payment_id=77)

    assert activated.status == "ACTIVE"
    assert activated.start_date >= before
    assert activated.end_date == add_duration(activated.start_date, 1, "MONTHS")
    assert activated.last_payment_id == 77


def test_activate_missing_membership(db_session):
    with pytest.raises(NotFoundError):
        svc.activate_membership(db_session, 404)


def test_reactivating_cancelled_membership_conflicts_with_open_one(db_session, gym, member, monthly_plan):
    _, profile = member
    old = svc.create_membership(db_session, profile.id, gym.id, monthly_plan.id)
    svc.cancel_membership(db_session, old.id)
    svc.create_membership(db_session, profile.id, gym.id, monthly_plan.id)

    with pytest.raises(ConflictError):
        svc.activate_membership(db_session, old.id)

    db_session.expire_all()
    assert svc.get_membership_by_id(db_session, old.id).status == "CANCELLED"


def test_cancel_is_idempotent(db_session, gym, member, monthly_plan):
    _, profile = member
    membership = svc.create_membership(db_session, profile.id, gym.id, monthly_plan.id, auto_renew=True)

    first = svc.cancel_membership(db_session, membership.id)
    assert first.status == "CANCELLED"
    assert first.auto_renew is False
    assert first.cancelled_at is not None

    second = svc.cancel_membership(db_session, membership.id)
    assert second.status == "CANCELLED"


def test_update_membership_to_cancelled_stamps_cancelled_at(db_session, gym, member, monthly_plan):
    _, profile = member
    membership = svc.create_membership(db_session, profile.id, gym.id, monthly_plan.id)

    updated = svc.update_membership(db_session, membership.id, MembershipUpdate(status="CANCELLED"))
    assert updated.cancelled_at is not None

    renewed = svc.update_membership(db_session, membership.id, MembershipUpdate(auto_renew=True))
    assert renewed.auto_renew is True
    assert renewed.status == "CANCELLED"


def test_gym_memberships_filter_and_order(db_session, gym, member, owner, monthly_plan):
    _, member_profile = member
    _, owner_profile = owner
    first = svc.create_membership(db_session, member_profile.id, gym.id, monthly_plan.id)
    second = svc.create_membership(db_session, owner_profile.id, gym.id, monthly_plan.id)
    svc.activate_membership(db_session, second.id)

    all_ids = [m.id for m in svc.get_gym_memberships(db_session, gym.id)]
    assert all_ids == [second.id, first.id]

    pending = svc.get_gym_memberships(db_session, gym.id, status="PENDING")
    assert [m.id for m in pending] == [first.id]

    mine = svc.get_profile_memberships(db_session, member_profile.id)
    assert [m.id for m in mine] == [first.id]
    assert mine[0].plan.name == "Monthly"


# ---------------------------------------------------------------------------
# Visits
# ---------------------------------------------------------------------------

def _active_membership(db_session, profile_id, gym_id, plan_id):
    membership = svc.create_membership(db_session, profile_id, gym_id, plan_id)
    return svc.activate_membership(db_session, membership.id)


def test_visit_cap_enforced(db_session, gym, member):
    _, profile = member
    plan = svc.create_plan(db_session, gym.id, PlanCreate(name="3 Visits", price=30, duration=1, max_visits=3))
    membership = _active_membership(db_session, profile.id, gym.id, plan.id)

    for expected in (1, 2, 3):
        assert svc.record_visit(db_session, membership.id).visits_used == expected

    with pytest.raises(ConflictError):
        svc.record_visit(db_session, membership.id)
    db_session.expire_all()
    assert svc.get_membership_by_id(db_session, membership.id).visits_used == 3


def test_unlimited_plan_has_no_cap(db_session, gym, member, monthly_plan):
    _, profile = member
    membership = _active_membership(db_session, profile.id, gym.id, monthly_plan.id)
    for _ in range(10):
        membership = svc.record_visit(db_session, membership.id)
    assert membership.visits_used == 10


def test_visit_requires_active_membership(db_session, gym, member, monthly_plan):
    _, profile = member
    pending = svc.create_membership(db_session, profile.id, gym.id, monthly_plan.id)

    with pytest.raises(ConflictError):
        svc.record_visit(db_session, pending.id)
    with pytest.raises(NotFoundError):
        svc.record_visit(db_session, 9999)


def test_visit_after_end_date_is_rejected(db_session, gym, member, monthly_plan):
    _, profile = member
    membership = _active_membership(db_session, profile.id, gym.id, monthly_plan.id)
    svc.update_membership(db_session, membership.id, MembershipUpdate(end_date=utcnow() - timedelta(minutes=1)))

    with pytest.raises(ConflictError, match="expired"):
        svc.record_visit(db_session, membership.id)


def test_visit_cap_holds_against_stale_session(db_session, gym, member):
    _, profile = member
    plan = svc.create_plan(db_session, gym.id, PlanCreate(name="3 Visits", price=30, duration=1, max_visits=3))
    membership = _active_membership(db_session, profile.id, gym.id, plan.id)
    svc.record_visit(db_session, membership.id)
    svc.record_visit(db_session, membership.id)

    stale = TestSessionLocal()
    try:
        assert svc.get_membership_by_id(stale, membership.id).visits_used == 2

        assert svc.record_visit(db_session, membership.id).visits_used == 3
        with pytest.raises(ConflictError, match="Visit limit"):
            svc.record_visit(stale, membership.id)
    finally:
        stale.close()

    db_session.expire_all()
    assert svc.get_membership_by_id(db_session, membership.id).visits_used == 3
