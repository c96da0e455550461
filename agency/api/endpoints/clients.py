"""
Clients API Endpoints

CRUD for agency clients plus tier inspection and the "mark as paid" flow.
The current_* snapshot is only ever written through the tier resolver.
"""

from typing import List, Optional
from datetime import datetime, timezone
from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from agency.api.dependencies import get_db
from agency.models.client import Client
from agency.models.payment import Payment
from agency.models.task import Task
from agency.schemas.client import (
    ClientCreate,
    ClientUpdate,
    ClientOut,
    ClientStatus,
    TierResultOut,
    rates_to_json,
)
from agency.schemas.payment import MarkPaidIn, PaymentOut
from agency.services.billing_dates import next_payment_date
from agency.services.reminders import amount_due
from agency.services.tier_resolver import TierResult, resolve_tier
from agency.logging import get_logger

router = APIRouter()
logger = get_logger("agency.api.clients")


async def _get_client_or_404(db: AsyncSession, client_id: int) -> Client:
    result = await db.execute(select(Client).filter(Client.id == client_id))
    client = result.scalar_one_or_none()

    if not client:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Client not found"
        )
    return client


def _apply_snapshot(client: Client, result: TierResult) -> None:
    client.current_services = rates_to_json(result.services)
    client.current_rate = result.total_amount
    client.current_tier_index = result.tier_index


# ==================== Client CRUD ====================

@router.get("/", response_model=List[ClientOut])
async def list_clients(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    status_filter: Optional[ClientStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db)
):
    """
    List clients, newest first.

    Query parameters:
    - skip / limit: pagination
    - status: active, inactive or pending
    """
    query = select(Client)
    if status_filter:
        query = query.filter(Client.status == status_filter)

    query = query.order_by(Client.created_at.desc(), Client.id.desc()).offset(skip).limit(limit)

    result = await db.execute(query)
    return result.scalars().all()


@router.post("/", response_model=ClientOut, status_code=status.HTTP_201_CREATED)
async def create_client(
    client_data: ClientCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Onboard a client.

    The onboarding time anchors the tier schedule; the initial snapshot is
    resolved immediately so the client starts on tier 0 (or the final rates
    when no tier applies).
    """
    onboarded_at = datetime.now(timezone.utc)
    data = client_data.model_dump(exclude={"tiered_payments", "final_services", "per_post_rates"})

    new_client = Client(
        **data,
        per_post_rates=rates_to_json(client_data.per_post_rates),
        tiered_payments=[tier.to_record() for tier in client_data.tiered_payments],
        final_services=rates_to_json(client_data.final_services),
        created_at=onboarded_at,
    )
    _apply_snapshot(
        new_client,
        resolve_tier(onboarded_at, client_data.tiered_payments, client_data.final_services, now=onboarded_at),
    )

    db.add(new_client)
    await db.commit()
    await db.refresh(new_client)

    logger.info("Client onboarded", client_id=new_client.id, tier_index=new_client.current_tier_index)
    return new_client


@router.get("/{client_id}", response_model=ClientOut)
async def get_client(
    client_id: int,
    db: AsyncSession = Depends(get_db)
):
    return await _get_client_or_404(db, client_id)


@router.patch("/{client_id}", response_model=ClientOut)
async def update_client(
    client_id: int,
    client_update: ClientUpdate,
    db: AsyncSession = Depends(get_db)
):
    """
    Update a client.

    Changing tiered_payments or final_services re-resolves the snapshot.
    Snapshot fields themselves are not accepted.
    """
    client = await _get_client_or_404(db, client_id)

    update_data = client_update.model_dump(exclude_unset=True)
    if "tiered_payments" in update_data:
        update_data["tiered_payments"] = [tier.to_record() for tier in client_update.tiered_payments or []]
    for field in ("final_services", "per_post_rates"):
        if field in update_data:
            update_data[field] = rates_to_json(getattr(client_update, field) or {})

    for field, value in update_data.items():
        setattr(client, field, value)

    if "tiered_payments" in update_data or "final_services" in update_data:
        _apply_snapshot(client, resolve_tier(client.created_at, client.tiered_payments, client.final_services))

    await db.commit()
    await db.refresh(client)

    return client


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(
    client_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Delete a client with its payment history and tasks"""
    await _get_client_or_404(db, client_id)

    await db.execute(delete(Payment).where(Payment.client_id == client_id))
    await db.execute(delete(Task).where(Task.client_id == client_id))
    await db.execute(delete(Client).where(Client.id == client_id))
    await db.commit()


# ==================== Tiers & Payments ====================

@router.get("/{client_id}/tier", response_model=TierResultOut)
async def get_client_tier(
    client_id: int,
    db: AsyncSession = Depends(get_db)
):
    """
    Resolve the client's tier as of now, without persisting it.

    Malformed stored tiers surface as 422.
    """
    client = await _get_client_or_404(db, client_id)
    result = resolve_tier(client.created_at, client.tiered_payments, client.final_services)

    return TierResultOut(
        client_id=client.id,
        months_passed=result.months_passed,
        tier_index=result.tier_index,
        is_graduated=result.is_graduated,
        services=result.services,
        total_amount=result.total_amount,
    )


@router.post("/{client_id}/mark-paid", response_model=PaymentOut, status_code=status.HTTP_201_CREATED)
async def mark_client_paid(
    client_id: int,
    paid: Optional[MarkPaidIn] = Body(None),
    db: AsyncSession = Depends(get_db)
):
    """
    Record the payment due on next_payment and move next_payment one month on.

    Amount defaults to what the client currently owes.
    """
    client = await _get_client_or_404(db, client_id)

    if client.next_payment is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Client has no upcoming payment date"
        )

    paid = paid or MarkPaidIn()
    due_date = client.next_payment
    payment = Payment(
        client_id=client.id,
        amount=paid.amount if paid.amount is not None else amount_due(client),
        payment_date=paid.payment_date or due_date,
        status="completed",
        type="payment",
        description=paid.description or f"Payment due {due_date.isoformat()}",
    )
    db.add(payment)
    client.next_payment = next_payment_date(due_date)

    await db.commit()
    await db.refresh(payment)

    logger.info("Client payment recorded", client_id=client.id, amount=payment.amount, next_payment=client.next_payment)
    return payment
