"""
orderdesk/services/follow_up_service.py

Purpose: Follow-ups query and mutations

Failure notices carry the backend's message when it sent one.
"""

from typing import Any, List, Mapping, Optional, Union

from orderdesk.schemas.follow_up import FollowUp, FollowUpCreate, FollowUpStatus, FollowUpUpdate
from orderdesk.services.resource_service import ResourceService, coerce_form
from orderdesk.utils.constants import FOLLOW_UPS_KEY


class FollowUpService(ResourceService[FollowUp]):
    key = FOLLOW_UPS_KEY
    label = "Follow-up"
    prefer_error_message = True

    async def _fetch(self) -> List[FollowUp]:
        return await self.api.get_follow_ups()

    @property
    def follow_ups(self) -> List[FollowUp]:
        return self.collection

    async def create(self, form: Union[FollowUpCreate, Mapping[str, Any]]) -> Optional[Any]:
        follow_up = coerce_form(FollowUpCreate, form)
        return await self._mutate("create", lambda: self.api.create_follow_up(follow_up.to_payload()))

    async def update(
        self, follow_up_id: str, form: Union[FollowUpUpdate, Mapping[str, Any]]
    ) -> Optional[Any]:
        changes = coerce_form(FollowUpUpdate, form)
        return await self._mutate(
            "update", lambda: self.api.update_follow_up(follow_up_id, changes.to_payload())
        )

    async def mark_complete(self, follow_up_id: str) -> Optional[Any]:
        return await self.update(follow_up_id, FollowUpUpdate(status=FollowUpStatus.COMPLETED))

    async def delete(self, follow_up_id: str) -> Any:
        return await self._mutate(
            "delete", lambda: self.api.delete_follow_up(follow_up_id), reraise=True
        )
