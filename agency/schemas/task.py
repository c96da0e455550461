"""
Pydantic schemas for client content tasks.
"""

from datetime import date, datetime
from typing import Optional, List, Literal
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


TaskPriority = Literal["low", "medium", "high"]
TaskStatus = Literal["todo", "in-progress", "review", "completed"]


def check_task_dates(start_date: Optional[date], end_date: Optional[date]) -> None:
    if start_date and end_date and end_date < start_date:
        raise ValueError("end_date must not be before start_date")


class TaskBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    priority: TaskPriority = "medium"
    platform: str = Field(..., min_length=1, max_length=50)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    assignees: List[str] = Field(default_factory=list)
    status: TaskStatus = "todo"
    comments_count: int = Field(0, ge=0)


class TaskCreate(TaskBase):
    client_id: int

    @model_validator(mode="after")
    def _end_after_start(self):
        check_task_dates(self.start_date, self.end_date)
        return self


class TaskUpdate(BaseModel):
    """Partial update; moving a card between columns is a status update"""
    model_config = ConfigDict(extra="forbid")

    client_id: Optional[int] = None
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    platform: Optional[str] = Field(None, min_length=1, max_length=50)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    assignees: Optional[List[str]] = None
    status: Optional[TaskStatus] = None
    comments_count: Optional[int] = Field(None, ge=0)

    @field_validator("client_id", "title", "priority", "platform", "assignees", "status", "comments_count")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not set to null")
        return value


class TaskOut(BaseModel):
    id: int
    client_id: int
    client_name: Optional[str] = None
    title: str
    description: Optional[str] = None
    priority: str
    platform: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    assignees: List[str] = Field(default_factory=list)
    status: str
    comments_count: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
