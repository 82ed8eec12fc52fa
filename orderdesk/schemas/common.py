"""
orderdesk/schemas/common.py

Purpose: Shared schema building blocks

- Lenient string IDs (backend returns ints or UUID strings)
- Enums that accept the spelling variants seen across screens
- Backend error payload
"""

from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator


def _coerce_id(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(int(value))
    return value


IdStr = Annotated[str, BeforeValidator(_coerce_id)]


def normalize_label(value: str) -> str:
    """'Pending-Moderator', 'pending_moderator' and 'Pending Moderator' compare equal."""
    return " ".join(value.replace("-", " ").replace("_", " ").split()).lower()


class NormalizedEnum(str, Enum):
    """
    String enum that resolves hyphenated, underscored or differently cased
    spellings to the canonical member.
    """

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            wanted = normalize_label(value)
            for member in cls:
                if normalize_label(member.value) == wanted:
                    return member
        return None

    def __str__(self) -> str:
        return self.value


class ErrorResponse(BaseModel):
    """
    Error body returned by the backend.
    """
    message: Optional[str] = None
    error: Optional[str] = None
    code: Optional[str] = None
    details: Optional[Any] = None

    @property
    def text(self) -> Optional[str]:
        return self.message or self.error
