"""
Team Members API Endpoints

Payroll roster and salary payments. Recording a salary moves the member's
payment_date to the same day next month.
"""

from typing import List, Optional
from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from agency.api.dependencies import get_db
from agency.models.salary_payment import SalaryPayment
from agency.models.team_member import TeamMember
from agency.schemas.team_member import (
    MemberStatus,
    SalaryPaymentCreate,
    SalaryPaymentOut,
    TeamMemberCreate,
    TeamMemberOut,
    TeamMemberUpdate,
)
from agency.services.billing_dates import next_payment_date
from agency.logging import get_logger

router = APIRouter()
logger = get_logger("agency.api.team_members")


async def _get_member_or_404(db: AsyncSession, member_id: int) -> TeamMember:
    member = await db.get(TeamMember, member_id)
    if not member:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Team member not found"
        )
    return member


@router.get("/", response_model=List[TeamMemberOut])
async def list_team_members(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    status_filter: Optional[MemberStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db)
):
    query = select(TeamMember)
    if status_filter:
        query = query.filter(TeamMember.status == status_filter)

    query = query.order_by(TeamMember.created_at.desc(), TeamMember.id.desc()).offset(skip).limit(limit)

    result = await db.execute(query)
    return result.scalars().all()


@router.post("/", response_model=TeamMemberOut, status_code=status.HTTP_201_CREATED)
async def create_team_member(
    member_data: TeamMemberCreate,
    db: AsyncSession = Depends(get_db)
):
    member = TeamMember(**member_data.model_dump())
    db.add(member)
    await db.commit()
    await db.refresh(member)

    return member


@router.get("/{member_id}", response_model=TeamMemberOut)
async def get_team_member(
    member_id: int,
    db: AsyncSession = Depends(get_db)
):
    return await _get_member_or_404(db, member_id)


@router.patch("/{member_id}", response_model=TeamMemberOut)
async def update_team_member(
    member_id: int,
    member_update: TeamMemberUpdate,
    db: AsyncSession = Depends(get_db)
):
    member = await _get_member_or_404(db, member_id)

    for field, value in member_update.model_dump(exclude_unset=True).items():
        setattr(member, field, value)

    await db.commit()
    await db.refresh(member)

    return member


@router.delete("/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_team_member(
    member_id: int,
    db: AsyncSession = Depends(get_db)
):
    await _get_member_or_404(db, member_id)

    await db.execute(delete(SalaryPayment).where(SalaryPayment.team_member_id == member_id))
    await db.execute(delete(TeamMember).where(TeamMember.id == member_id))
    await db.commit()


# ==================== Salary Payments ====================

@router.get("/{member_id}/salary-payments", response_model=List[SalaryPaymentOut])
async def list_salary_payments(
    member_id: int,
    db: AsyncSession = Depends(get_db)
):
    await _get_member_or_404(db, member_id)

    result = await db.execute(
        select(SalaryPayment)
        .filter(SalaryPayment.team_member_id == member_id)
        .order_by(SalaryPayment.payment_date.desc())
    )
    return result.scalars().all()


@router.post("/{member_id}/salary-payments", response_model=SalaryPaymentOut, status_code=status.HTTP_201_CREATED)
async def record_salary_payment(
    member_id: int,
    payment_data: Optional[SalaryPaymentCreate] = Body(None),
    db: AsyncSession = Depends(get_db)
):
    """
    Record a salary payment.

    Defaults to the member's salary on their current payment_date.
    Inactive members cannot be paid.
    """
    member = await _get_member_or_404(db, member_id)

    if member.status == "inactive":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot record salary for an inactive team member"
        )

    payment_data = payment_data or SalaryPaymentCreate()
    due_date = member.payment_date
    salary_payment = SalaryPayment(
        team_member_id=member.id,
        amount=payment_data.amount if payment_data.amount is not None else member.salary,
        payment_date=payment_data.payment_date or due_date,
        description=payment_data.description or f"Monthly salary payment for {member.role}",
    )
    db.add(salary_payment)
    member.payment_date = next_payment_date(due_date)

    await db.commit()
    await db.refresh(salary_payment)

    logger.info("Salary payment recorded", team_member_id=member.id, amount=salary_payment.amount)
    return salary_payment
