"""
Salary Payouts API - רישום תשלומי שכר בפועל לצוות.

מחזור חיים: pending -> completed או pending -> cancelled (עם סיבה).
"""
from datetime import date
from typing import Any, Optional, Union

from school_client.api.resources.base import Resource
from school_client.domain.models import BankDetails, PayoutMethod, SalaryPayout


class SalaryPayoutsApi(Resource):
    path = "/salary-payouts"

    async def list_payouts(self, params: Optional[dict[str, Any]] = None) -> list[SalaryPayout]:
        """params: staffId, status, method, startDate, endDate, branchId"""
        data = await self.client.get(self.path, params=params)
        if isinstance(data, dict):
            data = data.get("payouts", [])
        return [SalaryPayout.model_validate(item) for item in (data or [])]

    async def get_payout(self, payout_id: str) -> SalaryPayout:
        return SalaryPayout.model_validate(await self.client.get(self._url(payout_id)))

    async def create_payout(
        self,
        staff_id: str,
        amount_tyiyn: int,
        method: str = PayoutMethod.CASH.value,
        payment_date: Optional[Union[date, str]] = None,
        bank_details: Optional[BankDetails] = None,
        notes: Optional[str] = None,
    ) -> Any:
        method = getattr(method, "value", method)
        if isinstance(payment_date, date):
            payment_date = payment_date.isoformat()

        payload: dict[str, Any] = {
            "staffId": staff_id,
            "amount": int(amount_tyiyn),
            "method": method,
            "paymentDate": payment_date,
            "notes": notes or "",
        }
        # פרטי בנק נשלחים רק בהעברה בנקאית
        if method == PayoutMethod.BANK_TRANSFER.value and bank_details is not None:
            payload["bankDetails"] = bank_details.model_dump(by_alias=True)
        return await self.client.post(self.path, json=payload)

    async def complete_payout(self, payout_id: str) -> Any:
        return await self.client.patch(self._url(payout_id, "complete"))

    async def cancel_payout(self, payout_id: str, reason: str) -> Any:
        return await self.client.patch(self._url(payout_id, "cancel"), json={"reason": reason})
