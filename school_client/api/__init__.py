"""
API layer - לקוח ה-Gateway ועטיפות המשאבים
"""
from school_client.api.client import ApiClient, SessionExpiredEvent
from school_client.api.resources import (
    AttendanceApi,
    AuthApi,
    BranchesApi,
    ClassesApi,
    ClassSchedulesApi,
    ExamGroupsApi,
    ExamsApi,
    FeedbackApi,
    PaymentsApi,
    RevenueApi,
    SalaryPayoutsApi,
    SchedulerApi,
    SettingsApi,
    StaffEarningsApi,
    StudentAttendanceApi,
    StudentsApi,
    SubjectsApi,
    TeacherAttendanceApi,
    TeacherEarningsApi,
    TeachersApi,
    TimetableApi,
    WalletApi,
)


class SchoolApi:
    """כל עטיפות המשאבים מעל ApiClient אחד משותף"""

    def __init__(self, client: ApiClient):
        self.client = client
        self.auth = AuthApi(client)
        self.wallet = WalletApi(client)
        self.staff_earnings = StaffEarningsApi(client)
        self.salary_payouts = SalaryPayoutsApi(client)
        self.teacher_earnings = TeacherEarningsApi(client)
        self.teachers = TeachersApi(client)
        self.students = StudentsApi(client)
        self.subjects = SubjectsApi(client)
        self.classes = ClassesApi(client)
        self.class_schedules = ClassSchedulesApi(client)
        self.attendance = AttendanceApi(client)
        self.student_attendance = StudentAttendanceApi(client)
        self.teacher_attendance = TeacherAttendanceApi(client)
        self.exams = ExamsApi(client)
        self.exam_groups = ExamGroupsApi(client)
        self.payments = PaymentsApi(client)
        self.revenue = RevenueApi(client)
        self.timetable = TimetableApi(client)
        self.feedback = FeedbackApi(client)
        self.scheduler = SchedulerApi(client)
        self.branches = BranchesApi(client)
        self.settings = SettingsApi(client)


__all__ = ["ApiClient", "SessionExpiredEvent", "SchoolApi"]
