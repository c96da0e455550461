"""
Payments API Endpoints

Client payment history, manual entries and upcoming receivables.
"""

from typing import List, Optional
from datetime import date, timedelta
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from agency.api.dependencies import get_db
from agency.models.client import Client
from agency.models.payment import Payment
from agency.schemas.payment import PaymentCreate, PaymentOut, PaymentStatus, UpcomingPaymentOut

router = APIRouter()


@router.get("/", response_model=List[PaymentOut])
async def list_payments(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    client_id: Optional[int] = None,
    status_filter: Optional[PaymentStatus] = Query(None, alias="status"),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: AsyncSession = Depends(get_db)
):
    """
    List payments, most recent payment_date first.

    Query parameters:
    - client_id: only this client's payments
    - status: completed, pending or overdue
    - start_date / end_date: inclusive payment_date window
    """
    query = select(Payment)

    filters = []
    if client_id:
        filters.append(Payment.client_id == client_id)
    if status_filter:
        filters.append(Payment.status == status_filter)
    if start_date:
        filters.append(Payment.payment_date >= start_date)
    if end_date:
        filters.append(Payment.payment_date <= end_date)

    if filters:
        query = query.filter(and_(*filters))

    query = query.order_by(Payment.payment_date.desc(), Payment.id.desc()).offset(skip).limit(limit)

    result = await db.execute(query)
    return result.scalars().all()


@router.post("/", response_model=PaymentOut, status_code=status.HTTP_201_CREATED)
async def create_payment(
    payment_data: PaymentCreate,
    db: AsyncSession = Depends(get_db)
):
    client = await db.get(Client, payment_data.client_id)
    if not client:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Client not found"
        )

    payment = Payment(**payment_data.model_dump())
    db.add(payment)
    await db.commit()
    await db.refresh(payment)

    return payment


@router.get("/upcoming", response_model=List[UpcomingPaymentOut])
async def list_upcoming_payments(
    days: int = Query(30, ge=1, le=365),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db)
):
    """
    Pending or overdue payments due between today and `days` from now.
    """
    today = date.today()
    horizon = today + timedelta(days=days)

    result = await db.execute(
        select(Payment, Client.name)
        .join(Client, Client.id == Payment.client_id)
        .filter(
            Payment.status.in_(["pending", "overdue"]),
            Payment.payment_date >= today,
            Payment.payment_date <= horizon,
        )
        .order_by(Payment.payment_date.asc())
        .limit(limit)
    )

    return [
        UpcomingPaymentOut(
            id=payment.id,
            client_id=payment.client_id,
            client=client_name or "Unknown",
            amount=payment.amount,
            due_date=payment.payment_date,
            status=payment.status,
            days_until_due=(payment.payment_date - today).days,
        )
        for payment, client_name in result.all()
    ]
