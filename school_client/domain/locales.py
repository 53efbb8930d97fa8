"""
תרגומי ממשק (en / ru / uz) ופונקציית translate.

מפתחות מקוננים בסגנון "wallet.totalBalance"; פרמטרים בתבנית %{name}.
מפתח חסר מחזיר את המפתח עצמו.
"""
from typing import Any

SUPPORTED_LANGUAGES = ("en", "ru", "uz")

TRANSLATIONS: dict[str, dict[str, Any]] = {
    "en": {
        "common": {
            "error": "Something went wrong. Please try again.",
            "success": "Success",
            "loading": "Loading",
            "noData": "N/A",
            "optional": "optional",
            "cancel": "Cancel",
            "refresh": "Refresh",
            "locale": "en-US",
            "pending": "Pending",
            "completed": "Completed",
            "failed": "Failed",
            "reversed": "Reversed",
            "approved": "Approved",
            "paid": "Paid",
            "cancelled": "Cancelled",
        },
        "login": {
            "failed": "Login failed",
            "sessionExpired": "Your session has expired. Please log in again.",
        },
        "notifications": {
            "enablePrompt": "Get notifications about attendance and payments on this device?",
            "enabled": "Notifications enabled",
        },
        "paymentTopUp": {
            "title": "Wallet Top-Up",
            "validAmountRequired": "Please enter a valid amount",
            "minTopUpAmount": "Minimum top-up amount is %{amount}",
            "maxTopUpAmount": "Maximum top-up amount is %{amount}",
            "minMaxAmount": "Min: %{min}, max: %{max}",
            "youAreToppingUp": "You are topping up %{amount}",
            "reasonTooLong": "Reason must be at most %{max} characters",
            "pendingConfirmation": "Your top-up will be pending until an administrator confirms it.",
            "dailyLimit": "Daily top-up limit: %{limit}",
            "cash": "Cash",
            "uzcard": "Uzcard",
            "humo": "Humo",
            "click": "Click",
            "payme": "Payme",
            "card": "Bank card",
            "bank-transfer": "Bank transfer",
        },
        "wallet": {
            "walletDashboard": "Wallet",
            "totalBalance": "Total balance",
            "availableBalance": "Available balance",
            "pendingBalance": "Pending balance",
            "walletLocked": "Wallet locked",
            "totalTopUps": "Total top-ups",
            "totalDeductions": "Total deductions",
            "transactionHistory": "Transaction history",
            "topUpRequested": "Top-up request sent. It will appear once confirmed.",
            "top-up": "Top-up",
            "class-deduction": "Class deduction",
            "penalty": "Penalty",
            "refund": "Refund",
            "adjustment": "Adjustment",
        },
        "transactionHistory": {
            "loading": "Loading transactions",
            "noTransactions": "No transactions yet",
            "system": "System",
        },
        "walletAdmin": {
            "confirmTopUp": "Confirm this top-up? Funds become available to the student.",
            "confirmSuccess": "Top-up confirmed",
            "rejectReason": "Reason for rejecting this top-up:",
            "rejectSuccess": "Top-up rejected",
            "chooseStudent": "Please choose a student",
            "noPending": "No pending top-up requests",
            "submitSuccess": "%{type} applied successfully",
            "walletTopUp": "Wallet top-up",
            "penalty": "Penalty",
            "refund": "Refund",
            "adjustment": "Adjustment",
        },
        "earnings": {
            "enterAmount": "Please enter a valid amount",
            "chooseTeacher": "Please choose a teacher",
            "approveConfirm": "Approve this earning?",
            "approveSuccess": "Earning approved",
            "applySuccess": "%{type} applied successfully",
            "bonus": "Bonus",
            "penalty": "Penalty",
            "adjustment": "Adjustment",
            "per-class": "Per class",
            "hourly": "Hourly",
            "commission": "Commission",
        },
        "staffEarnings": {
            "deduction": "deduction",
            "noEarnings": "No earnings yet",
        },
        "payouts": {
            "bankDetailsRequired": "Bank account number is required for bank transfers",
            "recordConfirm": "Record a payment of %{amount} to %{name}?",
            "recordSuccess": "Payment recorded",
            "completeConfirm": "Mark this payout as completed?",
            "completeSuccess": "Payout completed",
            "cancelReason": "Reason for cancelling this payout:",
            "cancelSuccess": "Payout cancelled",
            "cash": "Cash",
            "bank-transfer": "Bank transfer",
            "uzcard": "Uzcard",
            "humo": "Humo",
            "card": "Card",
        },
        "validation": {
            "reasonMin": "Reason must be at least %{min} characters",
        },
        "access": {
            "denied": "You do not have access to this page",
        },
    },
    "ru": {
        "common": {
            "error": "Что-то пошло не так. Попробуйте ещё раз.",
            "success": "Успешно",
            "loading": "Загрузка",
            "noData": "Нет данных",
            "optional": "необязательно",
            "cancel": "Отмена",
            "refresh": "Обновить",
            "locale": "ru-RU",
            "pending": "В ожидании",
            "completed": "Завершено",
            "failed": "Ошибка",
            "reversed": "Отменено",
            "approved": "Одобрено",
            "paid": "Оплачено",
            "cancelled": "Отменено",
        },
        "login": {
            "failed": "Не удалось войти",
            "sessionExpired": "Сессия истекла. Пожалуйста, войдите снова.",
        },
        "notifications": {
            "enablePrompt": "Получать уведомления о посещаемости и платежах на этом устройстве?",
            "enabled": "Уведомления включены",
        },
        "paymentTopUp": {
            "title": "Пополнение кошелька",
            "validAmountRequired": "Введите корректную сумму",
            "minTopUpAmount": "Минимальная сумма пополнения %{amount}",
            "maxTopUpAmount": "Максимальная сумма пополнения %{amount}",
            "minMaxAmount": "Мин: %{min}, макс: %{max}",
            "youAreToppingUp": "Вы пополняете на %{amount}",
            "reasonTooLong": "Причина не должна превышать %{max} символов",
            "pendingConfirmation": "Пополнение будет в ожидании до подтверждения администратором.",
            "dailyLimit": "Дневной лимит пополнения: %{limit}",
            "cash": "Наличные",
            "uzcard": "Uzcard",
            "humo": "Humo",
            "click": "Click",
            "payme": "Payme",
            "card": "Банковская карта",
            "bank-transfer": "Банковский перевод",
        },
        "wallet": {
            "walletDashboard": "Кошелёк",
            "totalBalance": "Общий баланс",
            "availableBalance": "Доступный баланс",
            "pendingBalance": "В ожидании",
            "walletLocked": "Кошелёк заблокирован",
            "totalTopUps": "Всего пополнений",
            "totalDeductions": "Всего списаний",
            "transactionHistory": "История операций",
            "topUpRequested": "Запрос на пополнение отправлен. Он появится после подтверждения.",
            "top-up": "Пополнение",
            "class-deduction": "Списание за урок",
            "penalty": "Штраф",
            "refund": "Возврат",
            "adjustment": "Корректировка",
        },
        "transactionHistory": {
            "loading": "Загрузка операций",
            "noTransactions": "Операций пока нет",
            "system": "Система",
        },
        "walletAdmin": {
            "confirmTopUp": "Подтвердить пополнение? Средства станут доступны ученику.",
            "confirmSuccess": "Пополнение подтверждено",
            "rejectReason": "Причина отклонения пополнения:",
            "rejectSuccess": "Пополнение отклонено",
            "chooseStudent": "Выберите ученика",
            "noPending": "Нет ожидающих пополнений",
            "submitSuccess": "%{type}: успешно применено",
            "walletTopUp": "Пополнение кошелька",
            "penalty": "Штраф",
            "refund": "Возврат",
            "adjustment": "Корректировка",
        },
        "earnings": {
            "enterAmount": "Введите корректную сумму",
            "chooseTeacher": "Выберите преподавателя",
            "approveConfirm": "Одобрить это начисление?",
            "approveSuccess": "Начисление одобрено",
            "applySuccess": "%{type}: успешно применено",
            "bonus": "Бонус",
            "penalty": "Штраф",
            "adjustment": "Корректировка",
            "per-class": "За урок",
            "hourly": "Почасово",
            "commission": "Комиссия",
        },
        "staffEarnings": {
            "deduction": "вычет",
            "noEarnings": "Начислений пока нет",
        },
        "payouts": {
            "bankDetailsRequired": "Для банковского перевода нужен номер счёта",
            "recordConfirm": "Записать выплату %{amount} для %{name}?",
            "recordSuccess": "Выплата записана",
            "completeConfirm": "Отметить выплату как завершённую?",
            "completeSuccess": "Выплата завершена",
            "cancelReason": "Причина отмены выплаты:",
            "cancelSuccess": "Выплата отменена",
            "cash": "Наличные",
            "bank-transfer": "Банковский перевод",
            "uzcard": "Uzcard",
            "humo": "Humo",
            "card": "Карта",
        },
        "validation": {
            "reasonMin": "Причина должна содержать не менее %{min} символов",
        },
        "access": {
            "denied": "У вас нет доступа к этой странице",
        },
    },
    "uz": {
        "common": {
            "error": "Xatolik yuz berdi. Qaytadan urinib ko'ring.",
            "success": "Muvaffaqiyatli",
            "loading": "Yuklanmoqda",
            "noData": "Ma'lumot yo'q",
            "optional": "ixtiyoriy",
            "cancel": "Bekor qilish",
            "refresh": "Yangilash",
            "locale": "uz-UZ",
            "pending": "Kutilmoqda",
            "completed": "Bajarildi",
            "failed": "Muvaffaqiyatsiz",
            "reversed": "Qaytarildi",
            "approved": "Tasdiqlangan",
            "paid": "To'langan",
            "cancelled": "Bekor qilingan",
        },
        "login": {
            "failed": "Kirish amalga oshmadi",
            "sessionExpired": "Sessiya tugadi. Iltimos, qaytadan kiring.",
        },
        "notifications": {
            "enablePrompt": "Davomat va to'lovlar haqida bildirishnomalarni shu qurilmada olasizmi?",
            "enabled": "Bildirishnomalar yoqildi",
        },
        "paymentTopUp": {
            "title": "Hamyonni to'ldirish",
            "validAmountRequired": "To'g'ri summani kiriting",
            "minTopUpAmount": "Minimal to'ldirish summasi %{amount}",
            "maxTopUpAmount": "Maksimal to'ldirish summasi %{amount}",
            "minMaxAmount": "Min: %{min}, maks: %{max}",
            "youAreToppingUp": "Siz %{amount} ga to'ldiryapsiz",
            "reasonTooLong": "Sabab %{max} belgidan oshmasligi kerak",
            "pendingConfirmation": "To'ldirish administrator tasdiqlaguncha kutilmoqda holatida bo'ladi.",
            "dailyLimit": "Kunlik to'ldirish limiti: %{limit}",
            "cash": "Naqd",
            "uzcard": "Uzcard",
            "humo": "Humo",
            "click": "Click",
            "payme": "Payme",
            "card": "Bank kartasi",
            "bank-transfer": "Bank o'tkazmasi",
        },
        "wallet": {
            "walletDashboard": "Hamyon",
            "totalBalance": "Umumiy balans",
            "availableBalance": "Mavjud balans",
            "pendingBalance": "Kutilayotgan balans",
            "walletLocked": "Hamyon bloklangan",
            "totalTopUps": "Jami to'ldirishlar",
            "totalDeductions": "Jami yechimlar",
            "transactionHistory": "Operatsiyalar tarixi",
            "topUpRequested": "To'ldirish so'rovi yuborildi. Tasdiqlangandan keyin ko'rinadi.",
            "top-up": "To'ldirish",
            "class-deduction": "Dars uchun yechim",
            "penalty": "Jarima",
            "refund": "Qaytarish",
            "adjustment": "Tuzatish",
        },
        "transactionHistory": {
            "loading": "Operatsiyalar yuklanmoqda",
            "noTransactions": "Hozircha operatsiyalar yo'q",
            "system": "Tizim",
        },
        "walletAdmin": {
            "confirmTopUp": "To'ldirishni tasdiqlaysizmi? Mablag' o'quvchiga ochiladi.",
            "confirmSuccess": "To'ldirish tasdiqlandi",
            "rejectReason": "To'ldirishni rad etish sababi:",
            "rejectSuccess": "To'ldirish rad etildi",
            "chooseStudent": "O'quvchini tanlang",
            "noPending": "Kutilayotgan to'ldirishlar yo'q",
            "submitSuccess": "%{type} muvaffaqiyatli qo'llandi",
            "walletTopUp": "Hamyonni to'ldirish",
            "penalty": "Jarima",
            "refund": "Qaytarish",
            "adjustment": "Tuzatish",
        },
        "earnings": {
            "enterAmount": "To'g'ri summani kiriting",
            "chooseTeacher": "O'qituvchini tanlang",
            "approveConfirm": "Ushbu daromadni tasdiqlaysizmi?",
            "approveSuccess": "Daromad tasdiqlandi",
            "applySuccess": "%{type} muvaffaqiyatli qo'llandi",
            "bonus": "Bonus",
            "penalty": "Jarima",
            "adjustment": "Tuzatish",
            "per-class": "Dars uchun",
            "hourly": "Soatbay",
            "commission": "Komissiya",
        },
        "staffEarnings": {
            "deduction": "ushlab qolish",
            "noEarnings": "Hozircha daromadlar yo'q",
        },
        "payouts": {
            "bankDetailsRequired": "Bank o'tkazmasi uchun hisob raqami kerak",
            "recordConfirm": "%{name} uchun %{amount} to'lovni qayd etasizmi?",
            "recordSuccess": "To'lov qayd etildi",
            "completeConfirm": "To'lovni bajarilgan deb belgilaysizmi?",
            "completeSuccess": "To'lov bajarildi",
            "cancelReason": "To'lovni bekor qilish sababi:",
            "cancelSuccess": "To'lov bekor qilindi",
            "cash": "Naqd",
            "bank-transfer": "Bank o'tkazmasi",
            "uzcard": "Uzcard",
            "humo": "Humo",
            "card": "Karta",
        },
        "validation": {
            "reasonMin": "Sabab kamida %{min} belgidan iborat bo'lishi kerak",
        },
        "access": {
            "denied": "Sizda bu sahifaga kirish huquqi yo'q",
        },
    },
}


def translate(language: str, key: str, **params: Any) -> str:
    """תרגום מפתח מקונן. שפה לא מוכרת נופלת לאנגלית, מפתח חסר מוחזר כמו שהוא."""
    value: Any = TRANSLATIONS.get(language) or TRANSLATIONS["en"]
    for part in key.split("."):
        if not isinstance(value, dict):
            return key
        value = value.get(part)
    if not isinstance(value, str) or not value:
        return key

    for name, param in params.items():
        value = value.replace(f"%{{{name}}}", str(param))
    return value
