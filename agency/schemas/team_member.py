"""
Pydantic schemas for team members and their salary payments.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Literal
from pydantic import BaseModel, EmailStr, Field, field_validator


MemberStatus = Literal["active", "inactive", "on_leave"]


class TeamMemberBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)
    role: str = Field(..., min_length=1, max_length=100)
    salary: Decimal = Field(..., gt=0)
    status: MemberStatus = "active"
    payment_date: date
    notes: Optional[str] = None


class TeamMemberCreate(TeamMemberBase):
    pass


class TeamMemberUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    role: Optional[str] = Field(None, min_length=1, max_length=100)
    salary: Optional[Decimal] = Field(None, gt=0)
    status: Optional[MemberStatus] = None
    payment_date: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("name", "email", "role", "salary", "status", "payment_date")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not set to null")
        return value


class TeamMemberOut(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    role: str
    salary: float
    status: str
    payment_date: date
    notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class SalaryPaymentCreate(BaseModel):
    """Defaults to the member's salary paid on their current payment_date"""
    amount: Optional[Decimal] = Field(None, gt=0)
    payment_date: Optional[date] = None
    description: Optional[str] = None


class SalaryPaymentOut(BaseModel):
    id: int
    team_member_id: int
    amount: float
    payment_date: date
    description: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
