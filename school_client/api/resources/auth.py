"""
Auth API - התחברות לפי סוג משתמש, פרטי המשתמש המחובר וניהול סיסמה
"""
from typing import Any

from school_client.api.resources.base import Resource

LOGIN_PATHS = {
    "teacher": "/auth/teacher/login",
    "student": "/auth/student/login",
    "parent": "/auth/parent/login",
}


class AuthApi(Resource):
    path = "/auth"

    async def login(self, email: str, password: str, user_type: str = "teacher") -> dict[str, Any]:
        """סוג משתמש לא מוכר נופל להתחברות מורה"""
        endpoint = LOGIN_PATHS.get(user_type, LOGIN_PATHS["teacher"])
        result = await self.client.post(endpoint, json={"email": email, "password": password})
        return result or {}

    async def me(self) -> dict[str, Any]:
        return await self.client.get("/auth/me")

    async def forgot_password(self, email: str) -> Any:
        return await self.client.post("/auth/forgot-password", json={"email": email})

    async def reset_password(self, token: str, password: str) -> Any:
        return await self.client.put(f"/auth/reset-password/{token}", json={"password": password})

    async def change_password(self, current_password: str, new_password: str) -> Any:
        return await self.client.put(
            "/auth/change-password",
            json={"currentPassword": current_password, "newPassword": new_password},
        )
