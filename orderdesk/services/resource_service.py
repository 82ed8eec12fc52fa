"""
orderdesk/services/resource_service.py

Purpose: Shared query/mutation behaviour for resource services

- Cached collection per resource key, loaded through the QueryClient
- Mutation contract: success notice, then invalidate and refetch own key
- On failure the cache is untouched and a failure notice is shown
- Only inline-awaited mutations re-raise to the caller
"""

from typing import Any, Awaitable, Callable, Generic, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from orderdesk.core.exceptions import OrderDeskError, ValidationError
from orderdesk.core.logging import get_logger
from orderdesk.core.notifications import Notifier
from orderdesk.services.endpoints import OrderDeskApi
from orderdesk.services.query_client import QueryClient
from orderdesk.utils.constants import (
    MUTATION_FAILED_MESSAGE,
    MUTATION_PAST_TENSE,
    MUTATION_SUCCESS_MESSAGE,
    VALIDATION_FAILED_MESSAGE,
)

logger = get_logger(__name__)

FormT = TypeVar("FormT", bound=BaseModel)
RecordT = TypeVar("RecordT", bound=BaseModel)


def coerce_form(model: Type[FormT], data: Union[FormT, Mapping[str, Any]]) -> FormT:
    """
    Validates raw form input into a schema model before any request is made.

    Raises:
        ValidationError: with the first problem as the message and the full
            pydantic error list as details
    """
    if isinstance(data, model):
        return data

    try:
        return model.model_validate(dict(data))
    except PydanticValidationError as e:
        errors = e.errors()
        message = VALIDATION_FAILED_MESSAGE
        if errors:
            message = str(errors[0].get("msg", message)).removeprefix("Value error, ")
        raise ValidationError(message, details=errors) from e


class ResourceService(Generic[RecordT]):
    """
    Base for the order, product, task, follow-up and user services.

    Subclasses set `key` (the cache key), `label` (used in notices) and
    implement `_fetch`.
    """

    key: str = ""
    label: str = ""
    # Follow-up notices prefer the backend's message over the generic one
    prefer_error_message: bool = False

    def __init__(self, api: OrderDeskApi, queries: QueryClient, notifier: Notifier):
        self.api = api
        self.queries = queries
        self.notifier = notifier
        self.queries.register(self.key, self._fetch)

    async def _fetch(self) -> List[RecordT]:
        raise NotImplementedError

    @property
    def collection(self) -> List[RecordT]:
        data = self.queries.get_query_data(self.key)
        return data if data is not None else []

    @property
    def is_loading(self) -> bool:
        query = self.queries.get_query(self.key)
        return bool(query and query.is_loading)

    @property
    def error(self) -> Optional[Exception]:
        query = self.queries.get_query(self.key)
        return query.error if query else None

    async def load(self) -> List[RecordT]:
        """
        Returns the cached collection, fetching it on first use.
        A failed fetch leaves whatever was cached (empty list at first).
        """
        try:
            await self.queries.ensure_query_data(self.key)
        except OrderDeskError as e:
            logger.warning(f"Loading {self.key} failed: {e.message}", extra={"resource": self.key})
        return self.collection

    async def refresh(self) -> List[RecordT]:
        try:
            await self.queries.fetch_query(self.key)
        except OrderDeskError as e:
            logger.warning(f"Refreshing {self.key} failed: {e.message}", extra={"resource": self.key})
        return self.collection

    def find(self, record_id: str) -> Optional[RecordT]:
        for record in self.collection:
            if getattr(record, "id", None) == record_id:
                return record
        return None

    async def _mutate(
        self,
        action: str,
        call: Callable[[], Awaitable[Any]],
        *,
        reraise: bool = False,
        success_message: Optional[str] = None,
    ) -> Any:
        """
        Runs one mutation under the shared contract.

        Args:
            action: create / update / delete / dispatch
            call: Zero-argument coroutine factory that performs the request
            reraise: Re-raise failures to the caller after notifying
            success_message: Overrides the generic success notice

        Returns:
            The backend response, or None when a swallowed failure occurred
        """
        try:
            result = await call()
        except OrderDeskError as e:
            logger.warning(f"{self.label} {action} failed: {e.message}", extra={"resource": self.key})
            self.notifier.error(self._failure_message(action, e))
            if reraise:
                raise
            return None

        logger.info(f"{self.label} {action} succeeded", extra={"resource": self.key})
        self.notifier.success(success_message or MUTATION_SUCCESS_MESSAGE.format(
            resource=self.label,
            action=MUTATION_PAST_TENSE.get(action, action),
        ))
        await self.queries.invalidate_queries(self.key)
        return result

    def _failure_message(self, action: str, error: OrderDeskError) -> str:
        default = MUTATION_FAILED_MESSAGE.format(verb=action, resource=self.label.lower())
        if self.prefer_error_message and error.message:
            return error.message
        return default
