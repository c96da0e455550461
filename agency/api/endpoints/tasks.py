"""
Tasks API Endpoints

Content task board per client. Tasks are listed newest first and can be
filtered by client and board column (status).
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from agency.api.dependencies import get_db
from agency.models.client import Client
from agency.models.task import Task
from agency.schemas.task import TaskCreate, TaskOut, TaskStatus, TaskUpdate, check_task_dates
from agency.logging import get_logger

router = APIRouter()
logger = get_logger("agency.api.tasks")


def _task_out(task: Task, client_name: Optional[str]) -> TaskOut:
    return TaskOut.model_validate(task).model_copy(update={"client_name": client_name})


async def _get_client_name_or_404(db: AsyncSession, client_id: int) -> str:
    client = await db.get(Client, client_id)
    if not client:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Client not found"
        )
    return client.name


async def _get_task_or_404(db: AsyncSession, task_id: int) -> Task:
    task = await db.get(Task, task_id)
    if not task:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Task not found"
        )
    return task


@router.get("/", response_model=List[TaskOut])
async def list_tasks(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    client_id: Optional[int] = None,
    status_filter: Optional[TaskStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db)
):
    """
    List tasks with their client's name, newest first.

    Query parameters:
    - client_id: only this client's tasks
    - status: todo, in-progress, review or completed
    """
    query = select(Task, Client.name).join(Client, Client.id == Task.client_id)

    filters = []
    if client_id:
        filters.append(Task.client_id == client_id)
    if status_filter:
        filters.append(Task.status == status_filter)

    if filters:
        query = query.filter(and_(*filters))

    query = query.order_by(Task.created_at.desc(), Task.id.desc()).offset(skip).limit(limit)

    result = await db.execute(query)
    return [_task_out(task, client_name) for task, client_name in result.all()]


@router.post("/", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    db: AsyncSession = Depends(get_db)
):
    client_name = await _get_client_name_or_404(db, task_data.client_id)

    task = Task(**task_data.model_dump())
    db.add(task)
    await db.commit()
    await db.refresh(task)

    logger.info("Task created", task_id=task.id, client_id=task.client_id, status=task.status)
    return _task_out(task, client_name)


@router.get("/{task_id}", response_model=TaskOut)
async def get_task(
    task_id: int,
    db: AsyncSession = Depends(get_db)
):
    task = await _get_task_or_404(db, task_id)
    return _task_out(task, await _get_client_name_or_404(db, task.client_id))


@router.patch("/{task_id}", response_model=TaskOut)
async def update_task(
    task_id: int,
    task_update: TaskUpdate,
    db: AsyncSession = Depends(get_db)
):
    """
    Update a task. Moving it to another client checks that the client exists.
    """
    task = await _get_task_or_404(db, task_id)
    update_data = task_update.model_dump(exclude_unset=True)

    client_name = await _get_client_name_or_404(db, update_data.get("client_id", task.client_id))

    try:
        check_task_dates(
            update_data.get("start_date", task.start_date),
            update_data.get("end_date", task.end_date),
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    previous_status = task.status
    for field, value in update_data.items():
        setattr(task, field, value)

    await db.commit()
    await db.refresh(task)

    if task.status != previous_status:
        logger.info("Task moved", task_id=task.id, from_status=previous_status, to_status=task.status)
    return _task_out(task, client_name)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: int,
    db: AsyncSession = Depends(get_db)
):
    task = await _get_task_or_404(db, task_id)
    await db.delete(task)
    await db.commit()
