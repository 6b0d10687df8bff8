"""
Pydantic schemas for the simulated payment flow.
"""
from typing import Optional, Dict, Any
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from fitness_gh.core.enums import PaymentChannel, PaymentStatus


class InitiatePaymentRequest(BaseModel):
    gym_id: int = Field(..., ge=1)
    membership_id: Optional[int] = Field(None, ge=1, description="Membership activated once the payment completes")
    amount: float = Field(..., ge=0.01, description="Amount in major currency units")
    currency: str = Field(default="GHS", min_length=3, max_length=3, pattern=r"^[A-Za-z]{3}$")
    channel: PaymentChannel = Field(default=PaymentChannel.MOBILE_MONEY)
    metadata: Optional[Dict[str, Any]] = None

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()

    class Config:
        json_schema_extra = {
            "example": {
                "gym_id": 1,
                "membership_id": 10,
                "amount": 50.0,
                "currency": "GHS",
                "channel": "mobile_money",
            }
        }


class InitiatePaymentResponse(BaseModel):
    id: int
    reference: str
    amount: float
    currency: str
    status: PaymentStatus
    channel: PaymentChannel
    authorization_url: str


class VerifyPaymentResponse(BaseModel):
    id: int
    reference: str
    status: PaymentStatus
    amount: float
    currency: str
    paid_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WebhookData(BaseModel):
    reference: str = Field(..., min_length=1)
    status: Optional[str] = None


class WebhookEvent(BaseModel):
    """Payload posted by the payment provider."""
    event: str = Field(..., description='Only "charge.success" changes state')
    data: WebhookData


class PaymentHistoryItem(BaseModel):
    id: int
    reference: str
    amount: float
    currency: str
    status: PaymentStatus
    provider: str
    channel: PaymentChannel
    gym_id: int
    gym_name: Optional[str] = None
    membership_id: Optional[int] = None
    plan_name: Optional[str] = None
    payer_username: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: datetime
