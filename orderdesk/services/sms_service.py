"""
orderdesk/services/sms_service.py

Purpose: Bulk SMS and gateway balance

- Validates the message and number selection before any request
- Sends numbers comma-joined in a single request
- Refreshes the balance after a successful send
- On failure the balance is left unchanged
"""

from typing import Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from orderdesk.core.exceptions import OrderDeskError, ValidationError
from orderdesk.core.logging import get_logger
from orderdesk.core.notifications import Notifier
from orderdesk.schemas.sms import SendSmsRequest
from orderdesk.services.endpoints import OrderDeskApi
from orderdesk.utils.constants import (
    SMS_BALANCE_FAILED_MESSAGE,
    SMS_IMPORTED_MESSAGE,
    SMS_MISSING_INPUT_MESSAGE,
    SMS_SEND_FAILED_MESSAGE,
    SMS_SENT_MESSAGE,
)
from orderdesk.utils.validation_utils import parse_phone_numbers

logger = get_logger(__name__)


class SmsService:
    """
    SMS gateway access for the SMS screen.

    `balance` is None until the first successful balance fetch.
    """

    def __init__(self, api: OrderDeskApi, notifier: Notifier):
        self.api = api
        self.notifier = notifier
        self.balance: Optional[float] = None
        self.is_sending = False
        self.custom_numbers: List[str] = []

    async def refresh_balance(self) -> Optional[float]:
        try:
            response = await self.api.get_balance()
        except OrderDeskError as e:
            logger.warning(f"Fetching SMS balance failed: {e.message}")
            self.notifier.error(SMS_BALANCE_FAILED_MESSAGE)
            return self.balance

        self.balance = response.balance
        logger.info(f"SMS balance: {self.balance}")
        return self.balance

    async def send(self, numbers: Iterable[str], message: str) -> bool:
        """
        Sends one message to every selected number.

        Returns:
            True when the gateway accepted the request

        Raises:
            ValidationError: message empty or no numbers selected
        """
        try:
            request = SendSmsRequest(numbers=list(numbers), message=message)
        except PydanticValidationError as e:
            self.notifier.error(SMS_MISSING_INPUT_MESSAGE)
            raise ValidationError(SMS_MISSING_INPUT_MESSAGE, details=e.errors()) from e

        self.is_sending = True
        try:
            await self.api.send_sms(request.to_payload())
        except OrderDeskError as e:
            logger.warning(f"Sending SMS to {len(request.numbers)} numbers failed: {e.message}")
            self.notifier.error(SMS_SEND_FAILED_MESSAGE)
            return False
        finally:
            self.is_sending = False

        logger.info(f"SMS sent to {len(request.numbers)} numbers")
        self.notifier.success(SMS_SENT_MESSAGE.format(count=len(request.numbers)))
        await self.refresh_balance()
        return True

    def import_numbers(self, text: str) -> List[str]:
        """
        Adds numbers from an uploaded file to the custom list.

        Returns:
            The newly added numbers
        """
        added = parse_phone_numbers(text, existing=self.custom_numbers)
        self.custom_numbers.extend(added)
        self.notifier.success(SMS_IMPORTED_MESSAGE.format(count=len(added)))
        return added

    def add_number(self, number: str) -> bool:
        number = (number or "").strip()
        if not number or number in self.custom_numbers:
            return False
        self.custom_numbers.append(number)
        return True

    def remove_number(self, number: str) -> None:
        if number in self.custom_numbers:
            self.custom_numbers.remove(number)
