"""
Services module containing the catalogs, enrollment and reporting services.
"""

from .student_service import StudentService, InstructorService
from .course_service import CourseService
from .enrollment_service import EnrollmentService
from .report_service import ReportService

__all__ = [
    "StudentService",
    "InstructorService",
    "CourseService",
    "EnrollmentService",
    "ReportService",
]
