"""
orderdesk/services/endpoints.py

Purpose: Typed backend endpoints

- One method per backend route, all going through the ApiGateway
- List responses are parsed into schema models at the boundary
- Mutations return the backend's raw response body
"""

from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from orderdesk.core.exceptions import ApiError
from orderdesk.core.logging import get_logger
from orderdesk.schemas.follow_up import FollowUp
from orderdesk.schemas.order import Order
from orderdesk.schemas.product import Product
from orderdesk.schemas.sms import BalanceResponse
from orderdesk.schemas.task import Task
from orderdesk.schemas.user import LoginRequest, LoginResponse, User
from orderdesk.services.api_client import ApiGateway
from orderdesk.utils.constants import INVALID_RESPONSE_MESSAGE

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Keys some list endpoints wrap their payload in
_LIST_ENVELOPE_KEYS = ("data", "results", "items")


def parse_collection(payload: Any, model: Type[ModelT]) -> List[ModelT]:
    """
    Parses a list response into models.

    Accepts a bare list or a dict envelope. Records that fail validation are
    skipped and logged so one bad row does not blank the whole screen.
    """
    if isinstance(payload, dict):
        for key in _LIST_ENVELOPE_KEYS:
            if isinstance(payload.get(key), list):
                payload = payload[key]
                break

    if not isinstance(payload, list):
        if payload is not None:
            logger.warning(f"Expected a list of {model.__name__}, got {type(payload).__name__}")
        return []

    records = []
    for item in payload:
        try:
            records.append(model.model_validate(item))
        except ValueError as e:
            logger.warning(f"Skipping invalid {model.__name__} record: {e}")
    return records


def parse_record(payload: Any, model: Type[ModelT]) -> ModelT:
    """
    Parses a single-object response.

    Raises:
        ApiError: the body does not match the model (502)
    """
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        logger.warning(f"Invalid {model.__name__} response: {e.error_count()} errors")
        raise ApiError(INVALID_RESPONSE_MESSAGE, status_code=502, details=e.errors()) from e


class OrderDeskApi:
    """Backend routes for the admin panel."""

    def __init__(self, gateway: ApiGateway):
        self.gateway = gateway

    # Auth

    async def login(self, credentials: LoginRequest) -> LoginResponse:
        body = await self.gateway.post(
            "/api/auth/login",
            json=credentials.model_dump(),
            authenticated=False,
        )
        return parse_record(body or {}, LoginResponse)

    async def get_current_user(self, during_login: bool = False) -> User:
        """
        Fetches the signed-in profile. During login a rejected token is a
        login failure, not an expired session.
        """
        body = await self.gateway.get("/api/auth/me", authenticated=not during_login)
        if isinstance(body, dict) and isinstance(body.get("user"), dict):
            body = body["user"]
        return parse_record(body, User)

    # Orders

    async def get_orders(self) -> List[Order]:
        return parse_collection(await self.gateway.get("/api/orders"), Order)

    async def create_order(self, payload: Dict[str, Any]) -> Any:
        return await self.gateway.post("/api/orders", json=payload)

    async def update_order(self, order_id: str, payload: Dict[str, Any]) -> Any:
        return await self.gateway.put(f"/api/orders/{order_id}", json=payload)

    async def delete_order(self, order_id: str) -> Any:
        return await self.gateway.delete(f"/api/orders/{order_id}")

    async def dispatch_order(self, order_id: str) -> Any:
        """Hands the order to the courier."""
        return await self.gateway.post(f"/api/orders/{order_id}/dispatch")

    # Products

    async def get_products(self) -> List[Product]:
        return parse_collection(await self.gateway.get("/api/products"), Product)

    async def create_product(self, data: Dict[str, str], files: Optional[Dict[str, Any]] = None) -> Any:
        return await self.gateway.post("/api/products", data=data, files=files or None)

    async def update_product(
        self, product_id: str, data: Dict[str, str], files: Optional[Dict[str, Any]] = None
    ) -> Any:
        return await self.gateway.put(f"/api/products/{product_id}", data=data, files=files or None)

    async def delete_product(self, product_id: str) -> Any:
        return await self.gateway.delete(f"/api/products/{product_id}")

    # Users

    async def get_users(self) -> List[User]:
        return parse_collection(await self.gateway.get("/api/users"), User)

    async def create_user(self, payload: Dict[str, Any]) -> Any:
        return await self.gateway.post("/api/users", json=payload)

    async def update_user(self, user_id: str, payload: Dict[str, Any]) -> Any:
        return await self.gateway.put(f"/api/users/{user_id}", json=payload)

    async def delete_user(self, user_id: str) -> Any:
        return await self.gateway.delete(f"/api/users/{user_id}")

    # Tasks

    async def get_tasks(self) -> List[Task]:
        return parse_collection(await self.gateway.get("/api/tasks"), Task)

    async def create_task(self, payload: Dict[str, Any]) -> Any:
        return await self.gateway.post("/api/tasks", json=payload)

    async def update_task(self, task_id: str, payload: Dict[str, Any]) -> Any:
        return await self.gateway.put(f"/api/tasks/{task_id}", json=payload)

    async def delete_task(self, task_id: str) -> Any:
        return await self.gateway.delete(f"/api/tasks/{task_id}")

    # Follow-ups

    async def get_follow_ups(self) -> List[FollowUp]:
        return parse_collection(await self.gateway.get("/api/follow-ups"), FollowUp)

    async def create_follow_up(self, payload: Dict[str, Any]) -> Any:
        return await self.gateway.post("/api/follow-ups", json=payload)

    async def update_follow_up(self, follow_up_id: str, payload: Dict[str, Any]) -> Any:
        return await self.gateway.put(f"/api/follow-ups/{follow_up_id}", json=payload)

    async def delete_follow_up(self, follow_up_id: str) -> Any:
        return await self.gateway.delete(f"/api/follow-ups/{follow_up_id}")

    # SMS

    async def send_sms(self, payload: Dict[str, Any]) -> Any:
        return await self.gateway.post("/sendSMS", json=payload)

    async def get_balance(self) -> BalanceResponse:
        body = await self.gateway.get("/getBalance")
        return parse_record(body, BalanceResponse)
