"""
orderdesk/utils/validation_utils.py

Purpose: Input validation and display formatting

- Bangladesh phone number validation
- Email validation
- Input sanitization
- Currency and phone formatting for display
"""

import re
from typing import Iterable, List, Optional, Union

from orderdesk.utils.constants import EMAIL_REGEX, PHONE_REGEX


def validate_phone_number(phone: str) -> bool:
    """
    Validates Bangladesh mobile number format.

    Format: optional +88 prefix, then 01, an operator digit 3-9, and 8 digits
    Example: +8801712345678 or 01712345678

    Args:
        phone: Phone number string

    Returns:
        True if valid
    """
    if not phone:
        return False
    return bool(re.match(PHONE_REGEX, phone.strip()))


def validate_email(email: str) -> bool:
    if not email:
        return False
    return bool(re.match(EMAIL_REGEX, email.strip()))


def sanitize_input(text: str) -> str:
    """
    Sanitizes free-text input before it is sent to the API.

    - Trims surrounding whitespace
    - Removes angle brackets
    - Collapses runs of whitespace to one space

    Args:
        text: Raw user input

    Returns:
        Sanitized string
    """
    if not text:
        return ""
    text = text.strip()
    text = re.sub(r"[<>]", "", text)
    return re.sub(r"\s+", " ", text)


def format_currency(amount: Union[int, float, str, None]) -> str:
    """
    Formats an amount in Bangladeshi taka with no decimals.

    Example: 1250 -> "৳1,250"
    """
    try:
        value = float(amount or 0)
    except (TypeError, ValueError):
        value = 0.0
    sign = "-" if value < 0 else ""
    return f"{sign}৳{abs(value):,.0f}"


def format_phone_number(phone: str) -> str:
    """
    Formats a phone number for display with the +88 country code.

    Examples:
        "8801712345678" -> "+88 01 7123 45678"
        "01712345678"   -> "+88 01 7123 45678"
    """
    cleaned = re.sub(r"\D", "", phone or "")
    if cleaned.startswith("88"):
        return f"+{cleaned[:2]} {cleaned[2:4]} {cleaned[4:8]} {cleaned[8:]}"
    return f"+88 {cleaned[:2]} {cleaned[2:6]} {cleaned[6:]}"


def parse_phone_numbers(text: str, existing: Optional[Iterable[str]] = None) -> List[str]:
    """
    Extracts phone numbers from an uploaded text/CSV file.

    Only lines made entirely of digits are kept. Numbers already present in
    `existing` (or repeated in the file) are skipped; order is preserved.
    """
    seen = set(existing or [])
    numbers = []
    for line in (text or "").splitlines():
        candidate = line.strip()
        if candidate and candidate.isdigit() and candidate not in seen:
            seen.add(candidate)
            numbers.append(candidate)
    return numbers
