"""Pydantic schemas for task endpoints."""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from tenancy.core.validation import TaskTitle


class TaskCreateRequest(BaseModel):
    """Request schema for POST /tasks.

    Omitting ``organization_id`` creates a personal task.
    """

    title: TaskTitle = Field(..., description="Task title (at least 4 characters)")
    organization_id: Optional[UUID] = Field(None, description="Owning organization")


class TaskUpdateRequest(BaseModel):
    """Request schema for PATCH /tasks/{task_id}.

    Only fields present in the body are changed; sending
    ``organization_id: null`` makes the task personal again.
    """

    title: Optional[TaskTitle] = Field(None, description="Task title")
    is_complete: Optional[bool] = Field(None, description="Completion flag")
    organization_id: Optional[UUID] = Field(None, description="Owning organization")


class TaskResponse(BaseModel):
    """Response schema for a task."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    is_complete: bool
    organization_id: Optional[UUID] = None
    creator_id: UUID
    created_at: datetime
    updated_at: datetime
