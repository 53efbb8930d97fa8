"""
Domain API Wrappers
"""
from school_client.api.resources.auth import AuthApi
from school_client.api.resources.salary_payouts import SalaryPayoutsApi
from school_client.api.resources.school import (
    AttendanceApi,
    BranchesApi,
    ClassesApi,
    ClassSchedulesApi,
    ExamGroupsApi,
    ExamsApi,
    FeedbackApi,
    PaymentsApi,
    RevenueApi,
    SchedulerApi,
    SettingsApi,
    StudentAttendanceApi,
    StudentsApi,
    SubjectsApi,
    TeacherAttendanceApi,
    TeachersApi,
    TimetableApi,
)
from school_client.api.resources.staff_earnings import StaffEarningsApi
from school_client.api.resources.teacher_earnings import TeacherEarningsApi
from school_client.api.resources.wallet import WalletApi

__all__ = [
    "AuthApi",
    "WalletApi",
    "StaffEarningsApi",
    "SalaryPayoutsApi",
    "TeacherEarningsApi",
    "TeachersApi",
    "StudentsApi",
    "SubjectsApi",
    "ClassesApi",
    "ClassSchedulesApi",
    "AttendanceApi",
    "StudentAttendanceApi",
    "TeacherAttendanceApi",
    "ExamsApi",
    "ExamGroupsApi",
    "PaymentsApi",
    "RevenueApi",
    "TimetableApi",
    "FeedbackApi",
    "SchedulerApi",
    "BranchesApi",
    "SettingsApi",
]
