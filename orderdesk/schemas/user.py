"""
orderdesk/schemas/user.py

Purpose: User and authentication schemas

- Role enumeration (Admin / Moderator)
- User profile as returned by /api/auth/me and /api/users
- Login request/response
- User create/update forms with client-side validation
"""

import re
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from orderdesk.schemas.common import IdStr, NormalizedEnum
from orderdesk.utils.constants import NAME_REGEX, PASSWORD_REGEX
from orderdesk.utils.validation_utils import sanitize_input, validate_email, validate_phone_number


class Role(NormalizedEnum):
    ADMIN = "Admin"
    MODERATOR = "Moderator"


class User(BaseModel):
    """
    Server-owned user profile; the client only caches it for the session.
    """
    model_config = ConfigDict(extra="allow")

    id: Optional[IdStr] = None
    name: str = ""
    email: str = ""
    role: Role
    mobile_number: Optional[str] = None
    status: Optional[str] = None
    telegram_chat_id: Optional[str] = None
    bot_token: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def to_storage(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class LoginRequest(BaseModel):
    email: str
    password: str = Field(..., repr=False)


class LoginResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    token: Optional[str] = None


def _check_name(value: str) -> str:
    value = sanitize_input(value)
    if not 2 <= len(value) <= 100:
        raise ValueError("Name must be between 2 and 100 characters")
    if not re.match(NAME_REGEX, value):
        raise ValueError("Name contains invalid characters")
    return value


def _check_password(value: str) -> str:
    if len(value) < 8:
        raise ValueError("Password must be at least 8 characters")
    if not re.match(PASSWORD_REGEX, value):
        raise ValueError("Password must contain uppercase, lowercase, number and special character")
    return value


class UserCreate(BaseModel):
    """Admin-side form for creating a user."""
    name: str
    email: str
    password: str = Field(..., repr=False)
    mobile_number: str
    role: Role
    status: str = "Active"
    telegram_chat_id: Optional[str] = None
    bot_token: Optional[str] = Field(default=None, repr=False)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _check_name(v)

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: str) -> str:
        v = v.strip()
        if not validate_email(v):
            raise ValueError("Please enter a valid email address")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password(v)

    @field_validator("mobile_number")
    @classmethod
    def validate_mobile(cls, v: str) -> str:
        if not validate_phone_number(v):
            raise ValueError("Please enter a valid Bangladesh phone number")
        return v.strip()

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class UserUpdate(BaseModel):
    """Partial update; only the fields that were set are sent."""
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = Field(default=None, repr=False)
    mobile_number: Optional[str] = None
    role: Optional[Role] = None
    status: Optional[str] = None
    telegram_chat_id: Optional[str] = None
    bot_token: Optional[str] = Field(default=None, repr=False)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _check_name(v)

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not validate_email(v):
            raise ValueError("Please enter a valid email address")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: Optional[str]) -> Optional[str]:
        # Blank password on the edit form means "keep the current one"
        if not v:
            return None
        return _check_password(v)

    @field_validator("mobile_number")
    @classmethod
    def validate_mobile(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not validate_phone_number(v):
            raise ValueError("Please enter a valid Bangladesh phone number")
        return v.strip()

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True, exclude_none=True)
