from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fitness_gh.core.auth_dependency import get_current_profile_id
from fitness_gh.core.responses import success_response
from fitness_gh.db.session import get_db
from fitness_gh.schemas.user import ProfileResponse, ProfileUpdate
from fitness_gh.services import auth_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me")
def get_my_profile(profile_id: int = Depends(get_current_profile_id), db: Session = Depends(get_db)):
    profile = auth_service.get_profile(db, profile_id)
    return success_response(ProfileResponse.model_validate(profile))


@router.put("/me")
def update_my_profile(
    data: ProfileUpdate,
    profile_id: int = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
):
    profile = auth_service.update_profile(db, profile_id, data)
    return success_response(ProfileResponse.model_validate(profile), "Profile updated")
