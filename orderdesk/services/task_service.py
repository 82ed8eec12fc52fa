"""
orderdesk/services/task_service.py

Purpose: Tasks query and mutations
"""

from typing import Any, List, Mapping, Optional, Union

from orderdesk.schemas.task import Task, TaskCreate, TaskStatus, TaskUpdate
from orderdesk.services.resource_service import ResourceService, coerce_form
from orderdesk.utils.constants import TASKS_KEY


class TaskService(ResourceService[Task]):
    key = TASKS_KEY
    label = "Task"

    async def _fetch(self) -> List[Task]:
        return await self.api.get_tasks()

    @property
    def tasks(self) -> List[Task]:
        return self.collection

    async def create(self, form: Union[TaskCreate, Mapping[str, Any]]) -> Optional[Any]:
        task = coerce_form(TaskCreate, form)
        return await self._mutate("create", lambda: self.api.create_task(task.to_payload()))

    async def update(self, task_id: str, form: Union[TaskUpdate, Mapping[str, Any]]) -> Optional[Any]:
        changes = coerce_form(TaskUpdate, form)
        return await self._mutate("update", lambda: self.api.update_task(task_id, changes.to_payload()))

    async def complete(self, task_id: str) -> Optional[Any]:
        """Marks a task completed (an update with status only)."""
        return await self.update(task_id, TaskUpdate(status=TaskStatus.COMPLETED))

    async def delete(self, task_id: str) -> Any:
        return await self._mutate("delete", lambda: self.api.delete_task(task_id), reraise=True)
