from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fitness_gh.core.auth_dependency import get_current_account, get_current_profile_id
from fitness_gh.core.enums import EmployeeRole
from fitness_gh.core.errors import ForbiddenError
from fitness_gh.core.responses import success_response
from fitness_gh.db.models.account import Account
from fitness_gh.db.session import get_db
from fitness_gh.schemas.gym import (
    GymCreate,
    GymUpdate,
    GymResponse,
    EmployeeAdd,
    EmployeeUpdate,
    EmploymentResponse,
)
from fitness_gh.services import gym_service

router = APIRouter(prefix="/gyms", tags=["Gyms"])

MANAGERS = [EmployeeRole.MANAGER]


def _gyms(gyms):
    return [GymResponse.model_validate(g) for g in gyms]


@router.get("")
def list_gyms(
    city: Optional[str] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    db: Session = Depends(get_db),
):
    return success_response(_gyms(gym_service.get_all_gyms(db, city, search)))


@router.post("", status_code=201)
def create_gym(
    data: GymCreate,
    account: Account = Depends(get_current_account),
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    gym = gym_service.create_gym(db, profile_id, account.user_type, data)
    return success_response(GymResponse.model_validate(gym), "Gym created")


@router.get("/mine")
def my_gyms(profile_id: int = Depends(get_current_profile_id), db: Session = Depends(get_db)):
    return success_response(_gyms(gym_service.get_gyms_by_owner(db, profile_id)))


@router.get("/slug/{slug}")
def get_gym_by_slug(slug: str, db: Session = Depends(get_db)):
    return success_response(GymResponse.model_validate(gym_service.get_gym_by_slug(db, slug)))


@router.get("/{gym_id}")
def get_gym(gym_id: int, db: Session = Depends(get_db)):
    return success_response(GymResponse.model_validate(gym_service.get_gym_by_id(db, gym_id)))


@router.put("/{gym_id}")
def update_gym(
    gym_id: int,
    data: GymUpdate,
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    gym_service.check_gym_access(db, gym_id, profile_id, MANAGERS)
    gym = gym_service.update_gym(db, gym_id, data)
    return success_response(GymResponse.model_validate(gym), "Gym updated")


@router.delete("/{gym_id}")
def delete_gym(gym_id: int, profile_id: int = Depends(get_current_profile_id), db: Session = Depends(get_db)):
    if gym_service.check_gym_access(db, gym_id, profile_id) != gym_service.OWNER_ROLE:
        raise ForbiddenError("Only the gym owner can delete the gym")
    gym_service.delete_gym(db, gym_id)
    return success_response(None, "Gym deleted")


# Employees

@router.get("/{gym_id}/employees")
def list_employees(
    gym_id: int,
    include_inactive: bool = Query(False),
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    gym_service.check_gym_access(db, gym_id, profile_id)
    employees = gym_service.get_gym_employees(db, gym_id, include_inactive)
    return success_response([EmploymentResponse.model_validate(e) for e in employees])


@router.post("/{gym_id}/employees", status_code=201)
def add_employee(
    gym_id: int,
    data: EmployeeAdd,
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    gym_service.check_gym_access(db, gym_id, profile_id, MANAGERS)
    employment = gym_service.add_employee_by_email(db, gym_id, data.email, data.role)
    return success_response(EmploymentResponse.model_validate(employment), "Employee added")


@router.put("/{gym_id}/employees/{employment_id}")
def update_employee(
    gym_id: int,
    employment_id: int,
    data: EmployeeUpdate,
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    gym_service.check_gym_access(db, gym_id, profile_id, MANAGERS)
    employment = gym_service.update_employee(db, gym_id, employment_id, data)
    return success_response(EmploymentResponse.model_validate(employment), "Employee updated")


@router.delete("/{gym_id}/employees/{employment_id}")
def remove_employee(
    gym_id: int,
    employment_id: int,
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    gym_service.check_gym_access(db, gym_id, profile_id, MANAGERS)
    gym_service.remove_employee(db, gym_id, employment_id)
    return success_response(None, "Employee removed")
