"""
מודלים טיפוסיים לתשובות השרת במשאבי הכסף (ארנק, הכנסות צוות, תשלומי שכר).

כל הסכומים הם מספרים שלמים ביחידות tyiyn (1/100 so'm). שדות סטטוס/סוג
נשמרים כמחרוזות כדי שערכים חדשים מהשרת לא ישברו את הפענוח; ה-Enums
משמשים להשוואה ולתצוגה.
"""
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class OwnerType(str, Enum):
    STUDENT = "student"
    PARENT = "parent"


class TransactionType(str, Enum):
    TOP_UP = "top-up"
    CLASS_DEDUCTION = "class-deduction"
    PENALTY = "penalty"
    REFUND = "refund"
    ADJUSTMENT = "adjustment"


class Direction(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REVERSED = "reversed"


class TopUpMethod(str, Enum):
    """אמצעי תשלום מקומיים לטעינת ארנק"""
    CASH = "cash"
    UZCARD = "uzcard"
    HUMO = "humo"
    CLICK = "click"
    PAYME = "payme"
    CARD = "card"
    BANK_TRANSFER = "bank-transfer"


class EarningType(str, Enum):
    PER_CLASS = "per-class"
    HOURLY = "hourly"
    COMMISSION = "commission"
    BONUS = "bonus"
    ADJUSTMENT = "adjustment"
    PENALTY = "penalty"


class EarningStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    PAID = "paid"
    CANCELLED = "cancelled"


class PayoutMethod(str, Enum):
    CASH = "cash"
    BANK_TRANSFER = "bank-transfer"
    UZCARD = "uzcard"
    HUMO = "humo"
    CARD = "card"


class PayoutStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def _to_minor_int(value: Any) -> Any:
    """סכום מהשרת -> int שלם ב-tyiyn (עיגול חצי-למעלה אם הגיע שבר)"""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, (int, float, str, Decimal)):
        try:
            return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        except ArithmeticError:
            return value
    return value


def _none_to_empty(value: Any) -> Any:
    """null מהשרת בשדה טקסט -> "" (ערך לא מוכר, צבע ניטרלי בתצוגה)"""
    return "" if value is None else value


class ServerModel(BaseModel):
    """בסיס: שדות camelCase מהשרת, _id -> id, שדות לא מוכרים נשמרים"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class PersonRef(ServerModel):
    """הפניה לאדם (createdBy / approvedBy) כשהשרת מבצע populate"""
    id: Optional[str] = Field(default=None, alias="_id")
    name: Optional[str] = None


PersonField = Optional[Union[PersonRef, str]]


def person_name(value: PersonField) -> Optional[str]:
    if isinstance(value, PersonRef):
        return value.name
    return None


class TransactionStat(ServerModel):
    """סכום מצטבר לפי סוג תנועה (רק תנועות completed)"""
    transaction_type: str = Field(alias="_id")
    total: int = 0
    count: int = 0

    @field_validator("total", mode="before")
    @classmethod
    def round_total(cls, v: Any) -> Any:
        return _to_minor_int(v)


class WalletBalance(ServerModel):
    balance: int = 0
    available_balance: int = 0
    pending_balance: int = 0
    currency: str = "UZS"

    @field_validator("balance", "available_balance", "pending_balance", mode="before")
    @classmethod
    def round_amounts(cls, v: Any) -> Any:
        return _to_minor_int(v)


class WalletSummary(ServerModel):
    """סיכום ארנק. השרת מבטיח balance = available_balance + pending_balance."""
    wallet_id: Optional[str] = None
    balance: int = 0
    available_balance: int = 0
    pending_balance: int = 0
    grace_balance: int = 0
    currency: str = "UZS"
    is_locked: bool = False
    lock_reason: Optional[str] = None
    transaction_stats: List[TransactionStat] = Field(default_factory=list)
    last_transaction_at: Optional[datetime] = None

    @field_validator(
        "balance", "available_balance", "pending_balance", "grace_balance", mode="before"
    )
    @classmethod
    def round_amounts(cls, v: Any) -> Any:
        return _to_minor_int(v)

    def stat_total(self, *transaction_types: str) -> int:
        wanted = set(transaction_types)
        return sum(s.total for s in self.transaction_stats if s.transaction_type in wanted)


class WalletTransaction(ServerModel):
    id: Optional[str] = Field(default=None, alias="_id")
    wallet_id: Optional[str] = None
    transaction_type: str = ""
    direction: str = Direction.CREDIT.value
    amount: int = 0
    status: str = TransactionStatus.PENDING.value
    reason: Optional[str] = None
    payment_method: Optional[str] = None
    balance_before: Optional[int] = None
    balance_after: Optional[int] = None
    created_by: PersonField = None
    recorded_by: PersonField = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("amount", "balance_before", "balance_after", mode="before")
    @classmethod
    def round_amounts(cls, v: Any) -> Any:
        return _to_minor_int(v)

    @field_validator("transaction_type", "direction", "status", mode="before")
    @classmethod
    def null_text(cls, v: Any) -> Any:
        return _none_to_empty(v)

    @property
    def is_credit(self) -> bool:
        return self.direction == Direction.CREDIT.value

    @property
    def is_pending_top_up(self) -> bool:
        return (
            self.transaction_type == TransactionType.TOP_UP.value
            and self.status == TransactionStatus.PENDING.value
        )


class TransactionPage(ServerModel):
    transactions: List[WalletTransaction] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 50
    total_pages: int = 0


class StaffAccount(ServerModel):
    staff_id: Optional[str] = None
    total_earned: int = 0
    total_paid_out: int = 0
    available_for_payout: int = 0
    pending_earnings: int = 0
    approved_not_paid: int = 0
    statistics: dict[str, Any] = Field(default_factory=dict)
    currency: str = "UZS"
    last_earning_date: Optional[datetime] = None
    last_payout_date: Optional[datetime] = None

    @field_validator(
        "total_earned",
        "total_paid_out",
        "available_for_payout",
        "pending_earnings",
        "approved_not_paid",
        mode="before",
    )
    @classmethod
    def round_amounts(cls, v: Any) -> Any:
        return _to_minor_int(v)


class StaffEarning(ServerModel):
    """רשומת הכנסה. סכום שלילי = ניכוי (קנס/התאמה בחובה)."""
    id: Optional[str] = Field(default=None, alias="_id")
    staff_id: Any = None
    earning_type: str = ""
    amount: int = 0
    status: str = EarningStatus.PENDING.value
    description: Optional[str] = None
    reason: Optional[str] = None
    reference_date: Optional[datetime] = None
    approved_by: PersonField = None
    approved_at: Optional[datetime] = None

    @field_validator("amount", mode="before")
    @classmethod
    def round_amount(cls, v: Any) -> Any:
        return _to_minor_int(v)

    @field_validator("earning_type", "status", mode="before")
    @classmethod
    def null_text(cls, v: Any) -> Any:
        return _none_to_empty(v)


class BankDetails(ServerModel):
    account_number: str = ""
    account_name: str = ""
    bank_name: str = ""


class SalaryPayout(ServerModel):
    id: Optional[str] = Field(default=None, alias="_id")
    payout_id: Optional[str] = None
    staff_id: Any = None
    amount: int = 0
    method: str = PayoutMethod.CASH.value
    status: str = PayoutStatus.PENDING.value
    bank_details: Optional[BankDetails] = None
    reference_number: Optional[str] = None
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @field_validator("amount", mode="before")
    @classmethod
    def round_amount(cls, v: Any) -> Any:
        return _to_minor_int(v)

    @property
    def staff_name(self) -> Optional[str]:
        if isinstance(self.staff_id, dict):
            return self.staff_id.get("name")
        return None
