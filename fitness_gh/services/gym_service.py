"""
Gym administration and staff access control.
"""
import logging
import re
from typing import Optional, List, Iterable

from sqlalchemy.orm import Session, joinedload

from fitness_gh.core.dates import utcnow
from fitness_gh.core.enums import UserType
from fitness_gh.core.errors import ConflictError, ForbiddenError, NotFoundError
from fitness_gh.db.models.account import Account
from fitness_gh.db.models.employment import Employment
from fitness_gh.db.models.gym import Gym
from fitness_gh.schemas.gym import GymCreate, GymUpdate, EmployeeUpdate

logger = logging.getLogger(__name__)

OWNER_ROLE = "OWNER"
GYM_CREATOR_TYPES = (UserType.GYM_OWNER.value, UserType.SUPER_ADMIN.value)


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug or "gym"


def _available_slug(db: Session, base: str) -> str:
    slug, n = base, 1
    while db.query(Gym.id).filter(Gym.slug == slug).first() is not None:
        n += 1
        slug = f"{base}-{n}"
    return slug


def build_gym(db: Session, owner_profile_id: int, data: GymCreate) -> Gym:
    """
    Stage a new gym on the session without committing.

    An explicit slug must be free; a derived one gets a numeric suffix instead.
    """
    if data.slug:
        if db.query(Gym.id).filter(Gym.slug == data.slug).first() is not None:
            raise ConflictError(f"Gym slug '{data.slug}' is already taken")
        slug = data.slug
    else:
        slug = _available_slug(db, slugify(data.name))

    gym = Gym(owner_id=owner_profile_id, **data.model_dump(exclude={"slug"}), slug=slug)
    db.add(gym)
    return gym


def create_gym(db: Session, owner_profile_id: int, user_type: str, data: GymCreate) -> Gym:
    if user_type not in GYM_CREATOR_TYPES:
        raise ForbiddenError("Only gym owners can create gyms")
    gym = build_gym(db, owner_profile_id, data)
    db.commit()
    db.refresh(gym)
    logger.info(f"Gym created: gym_id={gym.id}, slug={gym.slug}, owner_id={owner_profile_id}")
    return gym


def get_all_gyms(db: Session, city: Optional[str] = None, search: Optional[str] = None) -> List[Gym]:
    query = db.query(Gym).filter(Gym.is_active.is_(True))
    if city:
        query = query.filter(Gym.city.ilike(city))
    if search:
        query = query.filter(Gym.name.ilike(f"%{search}%"))
    return query.order_by(Gym.name.asc()).all()


def get_gym_by_id(db: Session, gym_id: int) -> Gym:
    gym = db.query(Gym).filter(Gym.id == gym_id).first()
    if not gym:
        raise NotFoundError("Gym not found")
    return gym


def get_gym_by_slug(db: Session, slug: str) -> Gym:
    gym = db.query(Gym).filter(Gym.slug == slug).first()
    if not gym:
        raise NotFoundError("Gym not found")
    return gym


def get_gyms_by_owner(db: Session, owner_profile_id: int) -> List[Gym]:
    return (
        db.query(Gym)
        .filter(Gym.owner_id == owner_profile_id)
        .order_by(Gym.created_at.desc(), Gym.id.desc())
        .all()
    )


def update_gym(db: Session, gym_id: int, data: GymUpdate) -> Gym:
    gym = get_gym_by_id(db, gym_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(gym, field, value)
    db.commit()
    db.refresh(gym)
    return gym


def delete_gym(db: Session, gym_id: int) -> None:
    gym = get_gym_by_id(db, gym_id)
    gym.is_active = False
    db.commit()
    logger.info(f"Gym deactivated: gym_id={gym_id}")


def check_gym_access(
    db: Session,
    gym_id: int,
    profile_id: int,
    required_roles: Optional[Iterable] = None,
) -> str:
    """
    Verify that ``profile_id`` may act on ``gym_id``.

    The owner always passes. Anyone else needs an active employment and,
    when ``required_roles`` is given, one of those roles.

    Returns:
        "OWNER" or the caller's employee role

    Raises:
        NotFoundError: Gym does not exist
        ForbiddenError: Caller is not staff or lacks the role
    """
    gym = get_gym_by_id(db, gym_id)
    if gym.owner_id == profile_id:
        return OWNER_ROLE

    employment = (
        db.query(Employment)
        .filter(
            Employment.gym_id == gym_id,
            Employment.profile_id == profile_id,
            Employment.is_active.is_(True),
        )
        .first()
    )
    if not employment:
        raise ForbiddenError("You do not have access to this gym")

    if required_roles:
        allowed = {getattr(role, "value", role) for role in required_roles}
        if employment.role not in allowed:
            raise ForbiddenError("Insufficient permissions for this gym")
    return employment.role


def add_employee_by_email(db: Session, gym_id: int, email: str, role: str) -> Employment:
    get_gym_by_id(db, gym_id)
    account = db.query(Account).filter(Account.email == email.lower()).first()
    if not account or not account.profile:
        raise NotFoundError("No user found with that email")
    profile_id = account.profile.id

    employment = (
        db.query(Employment)
        .filter(Employment.gym_id == gym_id, Employment.profile_id == profile_id)
        .first()
    )
    role = getattr(role, "value", role)
    if employment and employment.is_active:
        raise ConflictError("User is already an employee of this gym")
    if employment:
        # Former employee coming back
        employment.is_active = True
        employment.role = role
        employment.start_date = utcnow()
        employment.end_date = None
    else:
        employment = Employment(gym_id=gym_id, profile_id=profile_id, role=role)
        db.add(employment)

    db.commit()
    db.refresh(employment)
    logger.info(f"Employee added: gym_id={gym_id}, profile_id={profile_id}, role={role}")
    return employment


def get_gym_employees(db: Session, gym_id: int, include_inactive: bool = False) -> List[Employment]:
    query = db.query(Employment).options(joinedload(Employment.profile)).filter(Employment.gym_id == gym_id)
    if not include_inactive:
        query = query.filter(Employment.is_active.is_(True))
    return query.order_by(Employment.start_date.desc(), Employment.id.desc()).all()


def _get_employment(db: Session, gym_id: int, employment_id: int) -> Employment:
    employment = (
        db.query(Employment)
        .filter(Employment.id == employment_id, Employment.gym_id == gym_id)
        .first()
    )
    if not employment:
        raise NotFoundError("Employee not found")
    return employment


def update_employee(db: Session, gym_id: int, employment_id: int, data: EmployeeUpdate) -> Employment:
    employment = _get_employment(db, gym_id, employment_id)
    changes = data.model_dump(exclude_unset=True)
    if "role" in changes and changes["role"] is not None:
        employment.role = getattr(changes["role"], "value", changes["role"])
    if "is_active" in changes and changes["is_active"] is not None:
        employment.is_active = changes["is_active"]
        employment.end_date = None if changes["is_active"] else utcnow()
    db.commit()
    db.refresh(employment)
    return employment


def remove_employee(db: Session, gym_id: int, employment_id: int) -> None:
    employment = _get_employment(db, gym_id, employment_id)
    employment.is_active = False
    employment.end_date = utcnow()
    db.commit()
    logger.info(f"Employee removed: gym_id={gym_id}, employment_id={employment_id}")
