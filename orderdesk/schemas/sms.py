"""
orderdesk/schemas/sms.py

Purpose: SMS gateway payloads

- Bulk send request (numbers are comma-joined on the wire)
- Balance response
"""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SendSmsRequest(BaseModel):
    numbers: List[str] = Field(..., min_length=1)
    message: str = Field(..., min_length=1)

    @field_validator("numbers")
    @classmethod
    def clean_numbers(cls, v: List[str]) -> List[str]:
        cleaned = []
        for number in v:
            number = number.strip()
            if number and number not in cleaned:
                cleaned.append(number)
        if not cleaned:
            raise ValueError("Select at least one number")
        return cleaned

    @field_validator("message")
    @classmethod
    def clean_message(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Message is required")
        return v

    def to_payload(self) -> Dict[str, Any]:
        return {"number": ",".join(self.numbers), "message": self.message}


class BalanceResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    balance: float
