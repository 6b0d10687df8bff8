"""
Pydantic schemas for subscription plans and memberships.
"""
from typing import Optional, List, Any
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, field_validator

from fitness_gh.core.dates import normalize_datetime
from fitness_gh.core.enums import DurationUnit, MembershipStatus
from fitness_gh.schemas.user import ProfileSummary


class PlanCreate(BaseModel):
    """Request schema for creating a subscription plan."""
    name: str = Field(..., min_length=2, max_length=100, description="Plan name")
    description: Optional[str] = Field(None, max_length=500)
    price: float = Field(..., ge=0, le=100000, description="Price per period")
    currency: str = Field(default="GHS", min_length=3, max_length=3, pattern=r"^[A-Za-z]{3}$")
    duration: int = Field(..., ge=1, le=365, description="Number of duration units one purchase covers")
    duration_unit: DurationUnit = Field(default=DurationUnit.MONTHS)
    features: List[str] = Field(default_factory=list, description="Marketing bullet points")
    max_visits: Optional[int] = Field(None, ge=1, description="Visit cap per period; omit for unlimited")
    sort_order: int = Field(default=0, ge=0)

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Monthly Unlimited",
                "description": "Full gym floor access",
                "price": 250.0,
                "currency": "GHS",
                "duration": 1,
                "duration_unit": "MONTHS",
                "features": ["Gym floor", "Locker"],
                "sort_order": 1,
            }
        }


class PlanUpdate(BaseModel):
    """Every field optional; only the supplied ones change."""
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    price: Optional[float] = Field(None, ge=0, le=100000)
    currency: Optional[str] = Field(None, min_length=3, max_length=3, pattern=r"^[A-Za-z]{3}$")
    duration: Optional[int] = Field(None, ge=1, le=365)
    duration_unit: Optional[DurationUnit] = None
    features: Optional[List[str]] = None
    max_visits: Optional[int] = Field(None, ge=1)
    sort_order: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else v


class PlanResponse(BaseModel):
    id: int
    gym_id: int
    name: str
    description: Optional[str] = None
    price: float
    currency: str
    duration: int
    duration_unit: DurationUnit
    features: Optional[Any] = None
    max_visits: Optional[int] = None
    is_active: bool
    sort_order: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PlanSummary(BaseModel):
    id: int
    name: str
    price: float
    currency: str
    duration: int
    duration_unit: DurationUnit
    max_visits: Optional[int] = None

    class Config:
        from_attributes = True


class _MembershipDates(BaseModel):
    start_date: Optional[datetime] = Field(None, description="ISO timestamp; defaults to now")

    @field_validator("start_date")
    @classmethod
    def to_naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return normalize_datetime(v)


class MembershipSelfCreate(_MembershipDates):
    """A member signing themselves up for a plan."""
    plan_id: int = Field(..., ge=1)
    auto_renew: bool = False


class MembershipStaffCreate(_MembershipDates):
    """Staff enrolling a member identified by email."""
    email: EmailStr = Field(..., description="Email of the member's account")
    plan_id: int = Field(..., ge=1)
    auto_renew: bool = False


class MembershipUpdate(BaseModel):
    status: Optional[MembershipStatus] = None
    auto_renew: Optional[bool] = None
    end_date: Optional[datetime] = None

    @field_validator("end_date")
    @classmethod
    def to_naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return normalize_datetime(v)


class MembershipResponse(BaseModel):
    id: int
    profile_id: int
    gym_id: int
    plan_id: int
    status: MembershipStatus
    start_date: datetime
    end_date: Optional[datetime] = None
    auto_renew: bool
    visits_used: int
    cancelled_at: Optional[datetime] = None
    last_payment_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    plan: Optional[PlanSummary] = None
    profile: Optional[ProfileSummary] = None

    class Config:
        from_attributes = True
