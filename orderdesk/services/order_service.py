"""
orderdesk/services/order_service.py

Purpose: Orders query and mutations

- Cached order list under the "orders" key
- Create / update swallow failures (fire-and-forget from forms)
- Delete / dispatch are awaited inline and re-raise
"""

from typing import Any, List, Mapping, Optional, Union

from orderdesk.schemas.order import Order, OrderCreate, OrderStatus, OrderUpdate
from orderdesk.services.resource_service import ResourceService, coerce_form
from orderdesk.utils.constants import ORDERS_KEY


class OrderService(ResourceService[Order]):
    key = ORDERS_KEY
    label = "Order"

    async def _fetch(self) -> List[Order]:
        return await self.api.get_orders()

    @property
    def orders(self) -> List[Order]:
        return self.collection

    async def create(self, form: Union[OrderCreate, Mapping[str, Any]]) -> Optional[Any]:
        order = coerce_form(OrderCreate, form)
        return await self._mutate("create", lambda: self.api.create_order(order.to_payload()))

    async def update(self, order_id: str, form: Union[OrderUpdate, Mapping[str, Any]]) -> Optional[Any]:
        changes = coerce_form(OrderUpdate, form)
        return await self._mutate("update", lambda: self.api.update_order(order_id, changes.to_payload()))

    async def update_status(self, order_id: str, status: Union[OrderStatus, str]) -> Optional[Any]:
        return await self.update(order_id, OrderUpdate(status=status))

    async def delete(self, order_id: str) -> Any:
        return await self._mutate("delete", lambda: self.api.delete_order(order_id), reraise=True)

    async def dispatch(self, order_id: str) -> Any:
        """Sends the order to the courier."""
        return await self._mutate("dispatch", lambda: self.api.dispatch_order(order_id), reraise=True)
