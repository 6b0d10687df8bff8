"""
Pydantic schemas for gym and employee endpoints.
"""
from typing import Optional, Dict
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field

from fitness_gh.core.enums import EmployeeRole
from fitness_gh.schemas.user import ProfileSummary


class GymBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=200, description="Gym name")
    slug: Optional[str] = Field(None, min_length=2, max_length=200, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$",
                                description="URL slug, derived from the name when omitted")
    description: Optional[str] = Field(None, max_length=2000)
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    region: Optional[str] = Field(None, max_length=100)
    country: str = Field(default="Ghana", max_length=100)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    phone: Optional[str] = Field(None, max_length=32)
    email: Optional[EmailStr] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None
    cover_image_url: Optional[str] = None
    operating_hours: Optional[Dict[str, str]] = Field(None, description='e.g. {"mon": "06:00-22:00"}')


class GymCreate(GymBase):
    class Config:
        json_schema_extra = {
            "example": {
                "name": "Osu Iron Works",
                "city": "Accra",
                "region": "Greater Accra",
                "phone": "+233302000000",
                "operating_hours": {"mon": "05:30-22:00", "sat": "07:00-18:00"},
            }
        }


class GymUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    region: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    phone: Optional[str] = Field(None, max_length=32)
    email: Optional[EmailStr] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None
    cover_image_url: Optional[str] = None
    operating_hours: Optional[Dict[str, str]] = None


class GymResponse(GymBase):
    id: int
    slug: str
    owner_id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class EmployeeAdd(BaseModel):
    email: EmailStr = Field(..., description="Email of the account to employ")
    role: EmployeeRole = Field(default=EmployeeRole.STAFF)


class EmployeeUpdate(BaseModel):
    role: Optional[EmployeeRole] = None
    is_active: Optional[bool] = None


class EmploymentResponse(BaseModel):
    id: int
    gym_id: int
    profile_id: int
    role: EmployeeRole
    is_active: bool
    start_date: datetime
    end_date: Optional[datetime] = None
    profile: Optional[ProfileSummary] = None

    class Config:
        from_attributes = True
