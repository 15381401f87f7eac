"""Google Tasks endpoints, proxied by the Pomodoro server."""

from __future__ import annotations

from urllib.parse import quote

from pomodoro_cli.models.core import Task

from .client import APIClient


class TasksAPI:
    """Tasks API client."""

    def __init__(self, client: APIClient):
        self.client = client

    async def list_tasks(self) -> list[Task]:
        """List incomplete tasks from the selected task list."""
        data = await self.client.request_json("GET", "/tasks", retry=0)
        return [Task.model_validate(t) for t in data.get("tasks", [])]

    async def complete_task(self, task_id: str) -> None:
        """Mark a task as completed."""
        await self.client.request_json(
            "POST", f"/tasks/{quote(task_id, safe='')}/complete", retry=0
        )
