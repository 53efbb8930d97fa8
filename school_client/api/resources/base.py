"""
בסיס לעטיפות משאבי CRUD.

כל מתודה מבצעת בקשת HTTP אחת דרך ApiClient ומחזירה את data מתוך המעטפת.
"""
from typing import Any, Optional

from school_client.api.client import ApiClient


class Resource:
    """משאב REST תחת נתיב קבוע"""

    path: str = ""

    def __init__(self, client: ApiClient):
        self.client = client

    def _url(self, *parts: Any) -> str:
        segments = [self.path] + [str(part).strip("/") for part in parts]
        return "/".join(segments)


class CrudResource(Resource):
    """getAll / getOne / create / update / delete"""

    async def get_all(self, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.client.get(self.path, params=params)

    async def get_one(self, resource_id: str) -> Any:
        return await self.client.get(self._url(resource_id))

    async def create(self, data: dict[str, Any]) -> Any:
        return await self.client.post(self.path, json=data)

    async def update(self, resource_id: str, data: dict[str, Any]) -> Any:
        return await self.client.put(self._url(resource_id), json=data)

    async def delete(self, resource_id: str) -> Any:
        return await self.client.delete(self._url(resource_id))
