"""
Staff Earnings API - הכנסות צוות, אישור וזיכויים/חיובים ידניים.

סכומים ב-tyiyn כמו בארנק. סכום שלילי ברשומה = ניכוי.
"""
from typing import Any, Optional

from school_client.api.resources.base import Resource
from school_client.domain.models import Direction, StaffAccount, StaffEarning


def _earnings(data: Any) -> list[StaffEarning]:
    if isinstance(data, dict):
        data = data.get("earnings", [])
    return [StaffEarning.model_validate(item) for item in (data or [])]


class StaffEarningsApi(Resource):
    path = "/staff-earnings"

    async def get_account(
        self,
        branch_filter: Optional[dict[str, Any]] = None,
        staff_id: Optional[str] = None,
    ) -> Optional[StaffAccount]:
        params = dict(branch_filter or {})
        params["staffId"] = staff_id
        data = await self.client.get(self._url("account"), params=params)
        return StaffAccount.model_validate(data) if data else None

    async def list_earnings(self, params: Optional[dict[str, Any]] = None) -> list[StaffEarning]:
        """params: staffId, status, earningType, startDate, endDate, branchId"""
        return _earnings(await self.client.get(self.path, params=params))

    async def list_pending(self, params: Optional[dict[str, Any]] = None) -> list[StaffEarning]:
        return _earnings(await self.client.get(self._url("pending"), params=params))

    async def approve(self, earning_id: str) -> Any:
        return await self.client.patch(self._url(earning_id, "approve"))

    async def apply_bonus(self, staff_id: str, amount_tyiyn: int, reason: str) -> Any:
        return await self.client.post(
            self._url("bonus"),
            json={"staffId": staff_id, "amount": int(amount_tyiyn), "reason": reason},
        )

    async def apply_penalty(self, staff_id: str, amount_tyiyn: int, reason: str) -> Any:
        return await self.client.post(
            self._url("penalty"),
            json={"staffId": staff_id, "amount": int(amount_tyiyn), "reason": reason},
        )

    async def apply_adjustment(
        self,
        staff_id: str,
        amount_tyiyn: int,
        direction: str,
        reason: str,
    ) -> Any:
        direction = getattr(direction, "value", direction)
        if direction not in (Direction.CREDIT.value, Direction.DEBIT.value):
            raise ValueError(f"Invalid adjustment direction: {direction}")
        return await self.client.post(
            self._url("adjustment"),
            json={
                "staffId": staff_id,
                "amount": int(amount_tyiyn),
                "direction": direction,
                "reason": reason,
            },
        )

    async def recalculate(self, staff_id: str) -> Any:
        return await self.client.post(self._url(staff_id, "recalculate"))
