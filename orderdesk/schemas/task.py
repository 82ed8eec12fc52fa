"""
orderdesk/schemas/task.py

Purpose: Task schemas

- Task record as returned by /api/tasks
- Task create/update forms
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from orderdesk.schemas.common import IdStr, NormalizedEnum
from orderdesk.utils.validation_utils import sanitize_input


class TaskStatus(NormalizedEnum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class TaskPriority(NormalizedEnum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class Task(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: IdStr
    order_id: Optional[str] = None
    task_details: str = ""
    assigned_to: Optional[IdStr] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    due_date: Optional[str] = None
    created_at: Optional[datetime] = None


class TaskCreate(BaseModel):
    task_details: str = Field(..., min_length=1, max_length=1000)
    order_id: Optional[str] = None
    assigned_to: Optional[IdStr] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    due_date: Optional[str] = None

    @field_validator("task_details")
    @classmethod
    def clean_details(cls, v: str) -> str:
        v = sanitize_input(v)
        if not v:
            raise ValueError("Task details are required")
        return v

    @field_validator("due_date")
    @classmethod
    def date_only(cls, v: Optional[str]) -> Optional[str]:
        # The form works with dates; drop any time component
        if not v:
            return None
        return v.split("T")[0]

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class TaskUpdate(BaseModel):
    task_details: Optional[str] = None
    order_id: Optional[str] = None
    assigned_to: Optional[IdStr] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[str] = None

    @field_validator("task_details")
    @classmethod
    def clean_details(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else sanitize_input(v)

    @field_validator("due_date")
    @classmethod
    def date_only(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        return v.split("T")[0]

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)
