"""
Form Validation

ולידציה בצד הלקוח לפני שליחה לשרת. השרת הוא הסמכות; כאן רק משוב מוקדם.
כל פונקציה מחזירה "" כשהקלט תקין, אחרת הודעה מתורגמת וספציפית לפעולה.
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from school_client.core.config import settings
from school_client.domain.locales import translate
from school_client.domain.models import PayoutMethod
from school_client.domain.money import format_uzs, som_to_tyiyn

# אורך סיבה מינימלי לכל פעולת אדמין (נמדד אחרי strip)
REASON_MIN_LENGTHS: dict[str, int] = {
    "topup_reject": 5,
    "wallet_penalty": 5,
    "wallet_refund": 5,
    "wallet_adjustment": 10,
    "wallet_lock": 5,
    "earning_bonus": 10,
    "earning_penalty": 10,
    "earning_adjustment": 10,
    "payout_cancel": 10,
}


def _parse_major(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip().replace(" ", "")
    if not text:
        return None
    try:
        number = Decimal(text)
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


def validate_topup_amount(value: Any, language: str = "en") -> str:
    """
    בדיקת סכום טעינה ב-so'm.

    גבולות כוללים: TOPUP_MIN_SOM ו-TOPUP_MAX_SOM עצמם תקינים.
    """
    amount = _parse_major(value)
    if amount is None or amount <= 0:
        return translate(language, "paymentTopUp.validAmountRequired")

    if amount < settings.TOPUP_MIN_SOM:
        return translate(
            language,
            "paymentTopUp.minTopUpAmount",
            amount=format_uzs(som_to_tyiyn(settings.TOPUP_MIN_SOM), language),
        )
    if amount > settings.TOPUP_MAX_SOM:
        return translate(
            language,
            "paymentTopUp.maxTopUpAmount",
            amount=format_uzs(som_to_tyiyn(settings.TOPUP_MAX_SOM), language),
        )
    return ""


def quick_amounts() -> list[int]:
    """סכומים מהירים ב-so'm. ההגדרות מבטיחות שכולם בתוך הגבולות."""
    return list(settings.topup_quick_amounts)


def validate_reason_length(reason: Optional[str], language: str = "en") -> str:
    """סיבת טעינה אופציונלית, מוגבלת באורך"""
    if reason and len(reason) > settings.TOPUP_REASON_MAX_LENGTH:
        return translate(
            language, "paymentTopUp.reasonTooLong", max=settings.TOPUP_REASON_MAX_LENGTH
        )
    return ""


def validate_reason(action: str, reason: Optional[str], language: str = "en") -> str:
    """סיבה חובה לפעולת אדמין. מתקבלת בדיוק באורך המינימלי."""
    if action not in REASON_MIN_LENGTHS:
        raise ValueError(f"Unknown reason action: {action}")
    minimum = REASON_MIN_LENGTHS[action]
    if len((reason or "").strip()) < minimum:
        return translate(language, "validation.reasonMin", min=minimum)
    return ""


def validate_positive_amount(value: Any, language: str = "en") -> str:
    amount = _parse_major(value)
    if amount is None or amount <= 0:
        return translate(language, "earnings.enterAmount")
    return ""


def validate_payout_form(
    staff_id: Optional[str],
    amount: Any,
    method: str,
    account_number: Optional[str] = None,
    language: str = "en",
) -> str:
    if not staff_id:
        return translate(language, "earnings.chooseTeacher")
    amount_error = validate_positive_amount(amount, language)
    if amount_error:
        return amount_error
    if method == PayoutMethod.BANK_TRANSFER.value and not (account_number or "").strip():
        return translate(language, "payouts.bankDetailsRequired")
    return ""
