"""
Client Configuration
"""
from pydantic_settings import BaseSettings
from pydantic import field_validator, model_validator
from typing import Optional

# שפות ממשק נתמכות
VALID_LANGUAGES = {"en", "ru", "uz"}

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Client settings loaded from environment variables"""

    APP_NAME: str = "School Client"
    DEBUG: bool = False

    # Backend API
    # ברירת מחדל: שרת הפרודקשן. בפיתוח: export API_BASE_URL=http://localhost:5000/api
    API_BASE_URL: str = "https://sms-production-5f19.up.railway.app/api"
    # None = ברירת המחדל של httpx (אין timeout מותאם)
    API_TIMEOUT_SECONDS: Optional[float] = None

    @field_validator("API_BASE_URL", mode="before")
    @classmethod
    def normalize_api_base_url(cls, v: str) -> str:
        """host בלבד (בלי scheme) מקבל https://, ו-/ בסוף מוסר"""
        if v and not v.startswith("http"):
            v = f"https://{v}"
        return v.rstrip("/")

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.strip().upper()
        if v not in VALID_LOG_LEVELS:
            raise ValueError(
                f"LOG_LEVEL='{v}' לא נתמך. "
                f"ערכים מותרים: {', '.join(sorted(VALID_LOG_LEVELS))}"
            )
        return v

    # שפת ממשק ברירת מחדל (נשמרת בהמשך באחסון המכשיר)
    DEFAULT_LANGUAGE: str = "en"

    @field_validator("DEFAULT_LANGUAGE", mode="before")
    @classmethod
    def validate_language(cls, v: str) -> str:
        """נרמול ובדיקת ערכים מותרים - נכשל מהר בהפעלה ולא בזמן ריצה"""
        v = v.strip().lower()
        if v not in VALID_LANGUAGES:
            raise ValueError(
                f"DEFAULT_LANGUAGE='{v}' לא נתמך. "
                f"ערכים מותרים: {', '.join(sorted(VALID_LANGUAGES))}"
            )
        return v

    # Top-up limits (in so'm, the major unit). The server is authoritative,
    # these only mirror its bounds for early feedback.
    TOPUP_MIN_SOM: int = 10_000
    TOPUP_MAX_SOM: int = 2_000_000
    TOPUP_DAILY_LIMIT_SOM: int = 5_000_000
    TOPUP_REASON_MAX_LENGTH: int = 200
    # כפתורי סכום מהיר (מופרדים בפסיקים, ב-so'm)
    TOPUP_QUICK_AMOUNTS: str = "50000,100000,250000,500000,1000000"

    @property
    def topup_quick_amounts(self) -> list[int]:
        return [
            int(part.strip())
            for part in self.TOPUP_QUICK_AMOUNTS.split(",")
            if part.strip()
        ]

    @model_validator(mode="after")
    def validate_topup_bounds(self) -> "Settings":
        """ולידציות חוצות-שדות לגבולות הטעינה.

        1. TOPUP_MIN_SOM חייב להיות חיובי ולא גדול מ-TOPUP_MAX_SOM.
           המגבלה היומית לא קטנה מבקשה בודדת מקסימלית.
        2. כל סכום מהיר חייב ליפול בתוך [MIN, MAX] - כפתור מהיר לעולם לא
           ממלא ערך שהולידציה דוחה.
        """
        if self.TOPUP_MIN_SOM <= 0:
            raise ValueError("TOPUP_MIN_SOM must be positive")
        if self.TOPUP_MIN_SOM > self.TOPUP_MAX_SOM:
            raise ValueError(
                f"TOPUP_MIN_SOM ({self.TOPUP_MIN_SOM}) גדול מ-TOPUP_MAX_SOM ({self.TOPUP_MAX_SOM})"
            )
        if self.TOPUP_DAILY_LIMIT_SOM < self.TOPUP_MAX_SOM:
            raise ValueError(
                f"TOPUP_DAILY_LIMIT_SOM ({self.TOPUP_DAILY_LIMIT_SOM}) קטן מ-TOPUP_MAX_SOM ({self.TOPUP_MAX_SOM})"
            )

        try:
            quick_amounts = self.topup_quick_amounts
        except ValueError:
            raise ValueError(
                f"TOPUP_QUICK_AMOUNTS='{self.TOPUP_QUICK_AMOUNTS}' חייב להכיל מספרים שלמים בלבד"
            )

        _out_of_bounds = [
            amount for amount in quick_amounts
            if amount < self.TOPUP_MIN_SOM or amount > self.TOPUP_MAX_SOM
        ]
        if _out_of_bounds:
            raise ValueError(
                f"סכומים מהירים מחוץ לטווח [{self.TOPUP_MIN_SOM}, {self.TOPUP_MAX_SOM}]: "
                f"{', '.join(str(a) for a in _out_of_bounds)}"
            )
        return self

    # אחסון מכשיר קבוע (device id, דגלי "כבר נשאל" להתראות, שפה)
    DEVICE_STORAGE_PATH: str = "~/.school_client/device.json"

    # מסך ההתחברות שאליו מנווטים כשהסשן פג
    LOGIN_ROUTE: str = "/login"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
