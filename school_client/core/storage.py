"""
אחסון מצב לקוח - נקודת הגישה היחידה לטוקן, למשתמש ולדגלי המכשיר.

- SessionStorage: מצב לתקופת הסשן בלבד (זיכרון) - token, user, staff_user
- DeviceStorage: מצב קבוע לכל מכשיר (קובץ JSON) - device_id, שפה,
  דגלי "כבר נשאל" לבקשת התראות push לכל תלמיד

שאר הקוד לא קורא את האחסון ישירות אלא דרך AuthContext / LanguageContext.
"""
from __future__ import annotations

import copy
import json
import uuid
from pathlib import Path
from typing import Any, Optional

from school_client.core.logging import get_logger

logger = get_logger(__name__)

PUSH_ASKED_PREFIX = "push_notif_asked_"


class SessionStorage:
    """מצב סשן בזיכרון. הפעולות סינכרוניות - אין צורך בנעילה בלולאת asyncio אחת."""

    def __init__(self) -> None:
        self._token: Optional[str] = None
        self._user: Optional[dict[str, Any]] = None
        self._staff_user: Optional[dict[str, Any]] = None

    @property
    def token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: Optional[str]) -> None:
        self._token = token or None

    @property
    def user(self) -> Optional[dict[str, Any]]:
        # עותק - שינוי במילון שהוחזר לא משנה את הסשן
        return copy.deepcopy(self._user)

    def set_user(self, user: Optional[dict[str, Any]]) -> None:
        self._user = copy.deepcopy(user) if user else None

    @property
    def staff_user(self) -> Optional[dict[str, Any]]:
        return copy.deepcopy(self._staff_user)

    def set_staff_user(self, staff_user: Optional[dict[str, Any]]) -> None:
        self._staff_user = copy.deepcopy(staff_user) if staff_user else None

    @property
    def has_token(self) -> bool:
        return bool(self._token)

    def clear(self) -> None:
        """מחיקת token ו-user (התנתקות או 401). staff_user נשאר כמו שהוא."""
        self._token = None
        self._user = None


class DeviceStorage:
    """אחסון קבוע לכל מכשיר בקובץ JSON.

    קריאה וכתיבה מלאות בכל פעולה - הקובץ קטן, והגישה סינכרונית.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning(
                "קובץ אחסון המכשיר לא קריא, מתחילים מחדש",
                extra_data={"path": str(self._path), "error": str(exc)},
            )
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8"
        )

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def device_id(self) -> str:
        """מזהה מכשיר אקראי - נוצר בפעם הראשונה ונשמר"""
        device_id = self.get("device_id")
        if not device_id:
            device_id = uuid.uuid4().hex
            self.set("device_id", device_id)
        return device_id

    def was_push_prompt_shown(self, student_id: str) -> bool:
        return bool(self.get(f"{PUSH_ASKED_PREFIX}{student_id}", False))

    def mark_push_prompt_shown(self, student_id: str) -> None:
        self.set(f"{PUSH_ASKED_PREFIX}{student_id}", True)
