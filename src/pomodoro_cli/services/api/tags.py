"""Tags API endpoints."""

from __future__ import annotations

from pomodoro_cli.models.core import Tag, TagCreateResult

from .client import APIClient


class TagsAPI:
    """Tags API client."""

    def __init__(self, client: APIClient):
        self.client = client

    async def list_tags(self) -> list[Tag]:
        """List all tags with their session counts."""
        data = await self.client.request_json("GET", "/tags")
        return [Tag.model_validate(t) for t in data.get("tags", [])]

    async def create_tag(self, name: str) -> TagCreateResult:
        """Create a tag, or return the existing one with a matching name."""
        data = await self.client.request_json("POST", "/tags", json={"name": name})
        return TagCreateResult.model_validate(data)

    async def delete_tag(self, tag_id: int | str) -> None:
        """Delete a tag."""
        await self.client.request_json("DELETE", f"/tags/{tag_id}")
