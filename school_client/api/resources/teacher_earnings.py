"""
Teacher Earnings API (legacy) - המשאב הישן לפני staff-earnings.

נשמר עבור מסכים שעדיין קוראים לו. מחזיר את data כמו שהוא.
"""
from typing import Any, Optional

from school_client.api.resources.base import Resource


class TeacherEarningsApi(Resource):
    path = "/teacher-earnings"

    async def create_for_class(self, data: dict[str, Any]) -> Any:
        return await self.client.post(self.path, json=data)

    async def list(self, teacher_id: str, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.client.get(self._url(teacher_id), params=params)

    async def summary(self, teacher_id: str, period: str = "monthly") -> Any:
        return await self.client.get(self._url("summary", teacher_id), params={"period": period})

    async def mark_paid(self, data: dict[str, Any]) -> Any:
        return await self.client.put(self._url("pay"), json=data)

    async def apply_penalty(self, data: dict[str, Any]) -> Any:
        return await self.client.post(self._url("penalty"), json=data)

    async def payout_history(self, teacher_id: str, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.client.get(self._url("payouts", teacher_id), params=params)
