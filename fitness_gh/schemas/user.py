"""
Pydantic schemas for user profiles.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field


class ProfileUpdate(BaseModel):
    """Partial update of the caller's profile. Omitted fields are left untouched."""
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    avatar_url: Optional[str] = None
    height: Optional[float] = Field(None, gt=0, le=300, description="Height in cm")
    weight: Optional[float] = Field(None, gt=0, le=500, description="Weight in kg")
    age: Optional[int] = Field(None, ge=10, le=120)
    gender: Optional[str] = Field(None, max_length=20)


class ProfileResponse(BaseModel):
    id: int
    account_id: int
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ProfileSummary(BaseModel):
    """Compact profile shown inside gym, membership and payment listings."""
    id: int
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    class Config:
        from_attributes = True
