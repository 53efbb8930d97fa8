"""
Wallet API - יתרות, היסטוריית תנועות, בקשות טעינה ופעולות אדמין.

כל הסכומים שנשלחים ומתקבלים הם int ב-tyiyn.
"""
from typing import Any, Optional

from school_client.api.resources.base import Resource
from school_client.core.exceptions import WalletNotFoundError
from school_client.domain.models import (
    Direction,
    OwnerType,
    TopUpMethod,
    TransactionPage,
    WalletBalance,
    WalletSummary,
)


def _value(item: Any) -> Any:
    """Enum -> הערך שלו, כל דבר אחר כמו שהוא"""
    return getattr(item, "value", item)


class WalletApi(Resource):
    path = "/wallet"

    # ── קריאה ──

    async def get_balance(self, owner_id: str, owner_type: str = OwnerType.STUDENT.value) -> WalletBalance:
        data = await self.client.get(self._url("balance", owner_id, _value(owner_type))) or {}
        raw = data.get("balance", data) if isinstance(data, dict) else data
        if isinstance(raw, dict):
            return WalletBalance.model_validate(raw)
        return WalletBalance(balance=raw or 0)

    async def get_summary(self, owner_id: str, owner_type: str = OwnerType.STUDENT.value) -> WalletSummary:
        owner_type = _value(owner_type)
        data = await self.client.get(self._url("summary", owner_id, owner_type))
        if not data:
            raise WalletNotFoundError(owner_id, owner_type)
        return WalletSummary.model_validate(data)

    async def get_transactions(
        self,
        owner_id: str,
        owner_type: str = OwnerType.STUDENT.value,
        limit: int = 50,
        page: int = 1,
        **params: Any,
    ) -> TransactionPage:
        data = await self.client.get(
            self._url("transactions", owner_id, _value(owner_type)),
            params={"limit": limit, "page": page, **params},
        )
        return TransactionPage.model_validate(data or {})

    async def get_all_transactions(self, params: Optional[dict[str, Any]] = None) -> TransactionPage:
        """כל התנועות (אדמין). אין סינון בצד השרת."""
        data = await self.client.get(self._url("transactions", "all"), params=params)
        if isinstance(data, list):
            return TransactionPage(transactions=data, total=len(data))
        return TransactionPage.model_validate(data or {})

    # ── טעינה ──

    async def top_up(
        self,
        owner_id: str,
        owner_type: str,
        amount_tyiyn: int,
        payment_method: str = TopUpMethod.CASH.value,
        reason: Optional[str] = None,
    ) -> Any:
        """בקשת טעינה. התנועה נוצרת בסטטוס pending עד אישור אדמין."""
        return await self.client.post(
            self._url("top-up"),
            json={
                "ownerId": owner_id,
                "ownerType": _value(owner_type),
                "amount": int(amount_tyiyn),
                "paymentMethod": _value(payment_method),
                "reason": reason,
            },
        )

    async def confirm_top_up(self, transaction_id: str) -> Any:
        return await self.client.patch(self._url("top-up", transaction_id, "confirm"))

    async def fail_top_up(self, transaction_id: str, reason: str) -> Any:
        return await self.client.patch(
            self._url("top-up", transaction_id, "fail"), json={"reason": reason}
        )

    # ── פעולות אדמין ──

    async def process_class_deduction(self, class_id: str, student_id: str) -> Any:
        return await self.client.post(
            self._url("class-deduction"), json={"classId": class_id, "studentId": student_id}
        )

    async def apply_penalty(self, student_id: str, amount_tyiyn: int, reason: str) -> Any:
        return await self.client.post(
            self._url("penalty"),
            json={"studentId": student_id, "amount": int(amount_tyiyn), "reason": reason},
        )

    async def process_refund(
        self,
        student_id: str,
        amount_tyiyn: int,
        reason: str,
        original_transaction_id: Optional[str] = None,
    ) -> Any:
        payload: dict[str, Any] = {
            "studentId": student_id,
            "amount": int(amount_tyiyn),
            "reason": reason,
        }
        if original_transaction_id:
            payload["originalTransactionId"] = original_transaction_id
        return await self.client.post(self._url("refund"), json=payload)

    async def adjust(
        self,
        wallet_id: str,
        amount_tyiyn: int,
        direction: str,
        reason: str,
        original_transaction_id: Optional[str] = None,
    ) -> Any:
        direction = _value(direction)
        if direction not in (Direction.CREDIT.value, Direction.DEBIT.value):
            raise ValueError(f"Invalid adjustment direction: {direction}")
        payload: dict[str, Any] = {
            "walletId": wallet_id,
            "amount": int(amount_tyiyn),
            "direction": direction,
            "reason": reason,
        }
        if original_transaction_id:
            payload["originalTransactionId"] = original_transaction_id
        return await self.client.post(self._url("adjustment"), json=payload)

    async def lock(self, wallet_id: str, reason: str) -> Any:
        return await self.client.patch(self._url("lock", wallet_id), json={"reason": reason})

    async def unlock(self, wallet_id: str) -> Any:
        return await self.client.patch(self._url("unlock", wallet_id))
