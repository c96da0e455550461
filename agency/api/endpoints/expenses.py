"""
Other Expenses API Endpoints

Non-salary business expenses counted by the dashboard.
"""

from typing import List, Optional
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from agency.api.dependencies import get_db
from agency.models.other_expense import OtherExpense
from agency.schemas.expense import ExpenseCreate, ExpenseOut

router = APIRouter()


@router.get("/", response_model=List[ExpenseOut])
async def list_expenses(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    category: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    query = select(OtherExpense)

    filters = []
    if start_date:
        filters.append(OtherExpense.expense_date >= start_date)
    if end_date:
        filters.append(OtherExpense.expense_date <= end_date)
    if category:
        filters.append(OtherExpense.category == category)

    if filters:
        query = query.filter(and_(*filters))

    query = query.order_by(OtherExpense.expense_date.desc(), OtherExpense.id.desc()).offset(skip).limit(limit)

    result = await db.execute(query)
    return result.scalars().all()


@router.post("/", response_model=ExpenseOut, status_code=status.HTTP_201_CREATED)
async def create_expense(
    expense_data: ExpenseCreate,
    db: AsyncSession = Depends(get_db)
):
    expense = OtherExpense(**expense_data.model_dump())
    db.add(expense)
    await db.commit()
    await db.refresh(expense)

    return expense


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    expense_id: int,
    db: AsyncSession = Depends(get_db)
):
    expense = await db.get(OtherExpense, expense_id)
    if not expense:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Expense not found"
        )

    await db.delete(expense)
    await db.commit()
