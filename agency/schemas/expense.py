"""
Pydantic schemas for other (non-salary) expenses.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field


class ExpenseCreate(BaseModel):
    amount: Decimal = Field(..., gt=0)
    expense_date: date
    category: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None


class ExpenseOut(BaseModel):
    id: int
    amount: float
    expense_date: date
    category: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
