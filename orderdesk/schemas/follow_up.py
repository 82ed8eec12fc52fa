"""
orderdesk/schemas/follow_up.py

Purpose: Follow-up schemas

- Follow-up record as returned by /api/follow-ups
- Follow-up create/update forms
"""

from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from orderdesk.schemas.common import IdStr, NormalizedEnum
from orderdesk.schemas.task import TaskPriority
from orderdesk.utils.validation_utils import sanitize_input


class FollowUpStatus(NormalizedEnum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    PENDING_MODERATOR = "Pending Moderator"
    PACKAGE_TO_CONFIRMATION = "Package to Confirmation"
    IN_REVIEW = "In Review"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
    OFFICE_RECEIVED = "Office Received"


FOLLOW_UP_PENDING = frozenset({FollowUpStatus.PENDING, FollowUpStatus.PENDING_MODERATOR})
FOLLOW_UP_IN_PROGRESS = frozenset({FollowUpStatus.IN_REVIEW, FollowUpStatus.PACKAGE_TO_CONFIRMATION})
FOLLOW_UP_DONE = frozenset({FollowUpStatus.COMPLETED, FollowUpStatus.DELIVERED})


class FollowUp(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    followup_id: IdStr = Field(validation_alias=AliasChoices("followup_id", "id"))
    order_id: Optional[IdStr] = None
    followup_date: Optional[str] = None
    notes: str = ""
    status: FollowUpStatus = FollowUpStatus.PENDING
    moderator_id: Optional[IdStr] = None
    customer_name: Optional[str] = None
    priority: Optional[TaskPriority] = None

    @property
    def id(self) -> str:
        return self.followup_id


class FollowUpCreate(BaseModel):
    order_id: IdStr = Field(..., min_length=1)
    followup_date: str = Field(..., min_length=1)
    notes: str = ""
    status: FollowUpStatus = FollowUpStatus.PENDING
    moderator_id: Optional[IdStr] = None
    customer_name: Optional[str] = None
    priority: Optional[TaskPriority] = None

    @field_validator("notes")
    @classmethod
    def clean_notes(cls, v: str) -> str:
        v = sanitize_input(v)
        if len(v) > 1000:
            raise ValueError("Notes must be less than 1000 characters")
        return v

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class FollowUpUpdate(BaseModel):
    order_id: Optional[IdStr] = None
    followup_date: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[FollowUpStatus] = None
    moderator_id: Optional[IdStr] = None
    customer_name: Optional[str] = None
    priority: Optional[TaskPriority] = None

    @field_validator("notes")
    @classmethod
    def clean_notes(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else sanitize_input(v)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)
