"""
orderdesk/services/user_service.py

Purpose: Users query and mutations (Admin only)

Every mutation is awaited inline by the users screen, so all of them
re-raise after notifying.
"""

from typing import Any, List, Mapping, Union

from orderdesk.schemas.user import Role, User, UserCreate, UserUpdate
from orderdesk.services.resource_service import ResourceService, coerce_form
from orderdesk.utils.constants import USERS_KEY


class UserService(ResourceService[User]):
    key = USERS_KEY
    label = "User"

    async def _fetch(self) -> List[User]:
        return await self.api.get_users()

    @property
    def users(self) -> List[User]:
        return self.collection

    @property
    def moderators(self) -> List[User]:
        return [user for user in self.collection if user.role == Role.MODERATOR]

    async def create(self, form: Union[UserCreate, Mapping[str, Any]]) -> Any:
        user = coerce_form(UserCreate, form)
        return await self._mutate("create", lambda: self.api.create_user(user.to_payload()), reraise=True)

    async def update(self, user_id: str, form: Union[UserUpdate, Mapping[str, Any]]) -> Any:
        changes = coerce_form(UserUpdate, form)
        return await self._mutate(
            "update", lambda: self.api.update_user(user_id, changes.to_payload()), reraise=True
        )

    async def delete(self, user_id: str) -> Any:
        return await self._mutate("delete", lambda: self.api.delete_user(user_id), reraise=True)
