"""
School resources - משאבי CRUD של בית הספר ופעולות נוספות לכל משאב.

כל מתודה = בקשה אחת. הערכים חוזרים כ-data מהמעטפת, בלי מודלים טיפוסיים
(מלבד משאבי הכסף, שנמצאים במודולים נפרדים).
"""
from typing import Any, Optional

from school_client.api.resources.base import CrudResource, Resource


class TeachersApi(CrudResource):
    path = "/teachers"

    async def get_profile(self) -> Any:
        return await self.client.get(self._url("profile"))

    async def update_profile(self, data: dict[str, Any]) -> Any:
        return await self.client.put(self._url("profile"), json=data)

    async def change_password(self, data: dict[str, Any]) -> Any:
        return await self.client.put(self._url("change-password"), json=data)

    async def upload_photo(self, teacher_id: str, filename: str, content: bytes) -> Any:
        return await self.client.put(
            self._url(teacher_id, "photo"), files={"photo": (filename, content)}
        )


class StudentsApi(CrudResource):
    path = "/students"

    async def create_with_photo(self, data: dict[str, Any], filename: str, content: bytes) -> Any:
        """יצירה עם תמונה - multipart במקום JSON"""
        return await self.client.post(
            self.path, json=None, data=data, files={"profileImage": (filename, content)}
        )

    async def get_parent_children(self) -> Any:
        return await self.client.get(self._url("parent", "children"))

    async def get_by_parent(self, parent_id: str) -> Any:
        return await self.client.get(self._url("parent", parent_id))

    async def update_notification_settings(self, student_id: str, data: dict[str, Any]) -> Any:
        return await self.client.patch(self._url(student_id, "notification-settings"), json=data)

    async def register_push_token(self, student_id: str, token: str) -> Any:
        return await self.client.post(self._url(student_id, "push-token"), json={"token": token})


class SubjectsApi(CrudResource):
    path = "/subjects"


class ClassesApi(CrudResource):
    path = "/classes"


class ClassSchedulesApi(CrudResource):
    path = "/class-schedules"


class AttendanceApi(CrudResource):
    path = "/attendance"

    async def get_teacher_attendance(self, teacher_id: str) -> Any:
        return await self.client.get(self._url("teacher", teacher_id))

    async def process_cctv(self, data: dict[str, Any]) -> Any:
        return await self.client.post(self._url("cctv"), json=data)

    async def get_cctv_stats(self, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.client.get(self._url("cctv", "stats"), params=params)

    async def get_recent_cctv(self, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.client.get(self._url("cctv", "recent"), params=params)


class StudentAttendanceApi(CrudResource):
    path = "/student-attendance"

    async def get_by_student(self, student_id: str) -> Any:
        return await self.client.get(self._url("student", student_id))

    async def get_by_class(self, class_name: str, section: str) -> Any:
        return await self.client.get(self._url("class", class_name, section))

    async def check_consecutive_absences(self, data: dict[str, Any]) -> Any:
        return await self.client.post(self._url("check-consecutive-absences"), json=data)

    async def get_eligibility(self, student_id: str) -> Any:
        return await self.client.get(self._url("eligibility", student_id))


class TeacherAttendanceApi(Resource):
    path = "/teacher-attendance"

    async def mark(self, data: dict[str, Any]) -> Any:
        return await self.client.post(self._url("mark"), json=data)

    async def get_history(self, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.client.get(self._url("history"), params=params)

    async def get_audit(self, record_id: str) -> Any:
        return await self.client.get(self._url(record_id, "audit"))

    async def get_my_stats(self, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.client.get(self._url("stats", "my-stats"), params=params)


class ExamsApi(CrudResource):
    path = "/exams"

    async def get_student_exams(self, student_id: str) -> Any:
        return await self.client.get(self._url("student", student_id))

    async def update_result(self, exam_id: str, student_id: str, data: dict[str, Any]) -> Any:
        return await self.client.put(self._url(exam_id, "results", student_id), json=data)

    async def enroll_students(self, exam_id: str) -> Any:
        return await self.client.post(self._url(exam_id, "enroll-students"))

    async def add_student(self, exam_id: str, student_id: str) -> Any:
        return await self.client.post(self._url(exam_id, "add-student"), json={"studentId": student_id})

    async def remove_student(self, exam_id: str, student_id: str) -> Any:
        return await self.client.delete(self._url(exam_id, "remove-student", student_id))

    async def mark_absent_failed(self, exam_id: str) -> Any:
        return await self.client.put(self._url(exam_id, "mark-absent-failed"))


class ExamGroupsApi(CrudResource):
    path = "/exam-groups"

    async def add_student(self, group_id: str, student_id: str) -> Any:
        return await self.client.post(self._url(group_id, "students"), json={"studentId": student_id})

    async def remove_student(self, group_id: str, student_id: str) -> Any:
        return await self.client.delete(self._url(group_id, "students", student_id))


class PaymentsApi(CrudResource):
    path = "/payments"

    async def get_by_student(self, student_id: str) -> Any:
        return await self.client.get(self._url("student", student_id))


class RevenueApi(Resource):
    path = "/revenue"

    async def get_revenue(self, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.client.get(self.path, params=params)

    async def get_pending(self, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.client.get(self._url("pending"), params=params)

    async def get_stats(self, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.client.get(self._url("stats"), params=params)


class TimetableApi(CrudResource):
    path = "/timetable"

    async def get_by_teacher(self, teacher_id: str, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.client.get(self._url("teacher", teacher_id), params=params)


class FeedbackApi(CrudResource):
    path = "/feedback"

    async def get_by_student(self, student_id: str) -> Any:
        return await self.client.get(self._url("student", student_id))

    async def get_today_classes(self, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.client.get(self._url("today-classes"), params=params)

    async def add_parent_comment(self, feedback_id: str, data: dict[str, Any]) -> Any:
        return await self.client.put(self._url(feedback_id, "parent-comment"), json=data)


class SchedulerApi(CrudResource):
    path = "/scheduler"


class BranchesApi(CrudResource):
    path = "/branches"

    async def get_stats(self, branch_id: str) -> Any:
        return await self.client.get(self._url(branch_id, "stats"))


class SettingsApi(Resource):
    path = "/settings"

    async def get(self) -> Any:
        return await self.client.get(self.path)

    async def update(self, data: dict[str, Any]) -> Any:
        return await self.client.put(self.path, json=data)
