"""Task runtime client."""

from pydantic import ValidationError

from alerting_api.exceptions import NotFoundError, TaskNotFoundError, UpstreamUnavailableError
from alerting_api.models.domain.task import TaskCreate, TaskRunSnapshot, TaskUpdate
from alerting_api.services.interfaces import TaskService
from alerting_api.services.platform.base import PlatformClient


class PlatformTaskService(PlatformClient, TaskService):
    """Tasks backing notification rules, owned by the platform API."""

    service_name = "task service"

    def _snapshot(self, data: object) -> TaskRunSnapshot:
        try:
            return TaskRunSnapshot.model_validate(data)
        except ValidationError as e:
            raise UpstreamUnavailableError(self.service_name) from e

    async def find_task_by_id(self, task_id: str) -> TaskRunSnapshot:
        """Get the run status snapshot of a task.

        Raises:
            TaskNotFoundError: If the task does not exist
        """
        try:
            response = await self._request("GET", f"/tasks/{task_id}")
        except NotFoundError as e:
            raise TaskNotFoundError(task_id) from e
        return self._snapshot(self._json(response))

    async def create_task(self, task: TaskCreate) -> TaskRunSnapshot:
        """Create a task."""
        response = await self._request(
            "POST", "/tasks", json=task.model_dump(mode="json", by_alias=True, exclude_none=True)
        )
        return self._snapshot(self._json(response))

    async def update_task(self, task_id: str, update: TaskUpdate) -> TaskRunSnapshot:
        """Update a task.

        Raises:
            TaskNotFoundError: If the task does not exist
        """
        try:
            response = await self._request(
                "PATCH",
                f"/tasks/{task_id}",
                json=update.model_dump(mode="json", by_alias=True, exclude_none=True),
            )
        except NotFoundError as e:
            raise TaskNotFoundError(task_id) from e
        return self._snapshot(self._json(response))

    async def delete_task(self, task_id: str) -> None:
        """Delete a task.

        Raises:
            TaskNotFoundError: If the task does not exist
        """
        try:
            await self._request("DELETE", f"/tasks/{task_id}")
        except NotFoundError as e:
            raise TaskNotFoundError(task_id) from e
