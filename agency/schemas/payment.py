"""
Pydantic schemas for client payments.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Dict, Literal
from pydantic import BaseModel, Field


PaymentStatus = Literal["completed", "pending", "overdue"]


class PaymentCreate(BaseModel):
    client_id: int
    amount: Decimal = Field(..., ge=0)
    payment_date: date
    status: PaymentStatus = "completed"
    type: Literal["payment", "post", "reminder"] = "payment"
    description: Optional[str] = None
    post_count: Optional[int] = Field(None, ge=0)
    platform_breakdown: Optional[Dict[str, int]] = None


class PaymentOut(BaseModel):
    id: int
    client_id: int
    amount: float
    payment_date: date
    status: str
    type: str
    description: Optional[str] = None
    post_count: Optional[int] = None
    platform_breakdown: Optional[Dict[str, int]] = None
    created_at: datetime

    class Config:
        from_attributes = True


class UpcomingPaymentOut(BaseModel):
    """Pending or overdue payment due soon"""
    id: int
    client_id: int
    client: str
    amount: float
    due_date: date
    status: str
    days_until_due: int


class MarkPaidIn(BaseModel):
    """Optional overrides when marking a client's due payment as received"""
    amount: Optional[Decimal] = Field(None, ge=0)
    payment_date: Optional[date] = None
    description: Optional[str] = None
