"""
Enrollment service enforcing uniqueness and the per-semester credit cap.
"""

import threading
from typing import Any, Dict, List, Optional, Tuple

from ..app_logger import get_logger
from ..core.entities import Enrollment, Student, normalize_code
from ..core.enums import Semester
from ..core.exceptions import CreditLimitExceededError, ResourceNotFoundError
from .course_service import CourseService
from .student_service import StudentService

logger = get_logger("enrollment")

SemesterKey = Tuple[str, Semester, int]

DEFAULT_MAX_CREDITS_PER_SEMESTER = 24


class EnrollmentService:
    """Creates enrollments and keeps every enrollment index in step.

    All enrollment records live in one arena keyed by enrollment ID. The
    students' own course maps and the per-semester index only refer to
    records in the arena, and both are updated together on enroll and
    unenroll.
    """

    def __init__(self, student_service: StudentService, course_service: CourseService,
                 max_credits_per_semester: int = DEFAULT_MAX_CREDITS_PER_SEMESTER):
        self._student_service = student_service
        self._course_service = course_service
        self._max_credits = max_credits_per_semester
        self._enrollments: Dict[str, Enrollment] = {}  # enrollment id -> record, in creation order
        self._semester_index: Dict[SemesterKey, List[str]] = {}  # (student, semester, year) -> ids
        self._lock = threading.RLock()

    @property
    def max_credits_per_semester(self) -> int:
        return self._max_credits

    def enroll_student(self, student_id: str, course_code: str,
                       semester: Semester, year: int) -> Enrollment:
        """Enroll a student in a course for a semester.

        Raises:
            ResourceNotFoundError: The student or course does not exist.
            CreditLimitExceededError: The semester's credit cap would be exceeded.
            DuplicateEnrollmentError: The student already holds this course.

        Nothing is changed when any of these is raised.
        """
        with self._lock:
            self._evict_stale()
            student = self._student_service.get_student(student_id)
            course = self._course_service.get_course(course_code)

            if student is None or course is None:
                raise ResourceNotFoundError(
                    "Student or course not found",
                    details={'student_id': student_id, 'course_code': course_code},
                )

            current_credits = self.get_semester_credits(student_id, semester, year)
            if current_credits + course.credits > self._max_credits:
                logger.info("Rejected %s in %s for %s %d: %d + %d credits exceeds %d",
                            student_id, course.code, semester.value, year,
                            current_credits, course.credits, self._max_credits)
                raise CreditLimitExceededError(
                    "Credit limit exceeded for semester",
                    details={
                        'student_id': student_id,
                        'course_code': course.code.code,
                        'current_credits': current_credits,
                        'course_credits': course.credits,
                        'max_credits': self._max_credits,
                    },
                )

            enrollment = student.enroll(course, semester, year)
            self._enrollments[enrollment.id] = enrollment
            self._semester_index.setdefault((student_id, semester, year), []).append(enrollment.id)

            logger.info("Enrolled %s in %s for %s %d", student_id, course.code, semester.value, year)
            return enrollment

    def unenroll_student(self, student_id: str, course_code: str) -> bool:
        """Drop a student's enrollment in a course. Returns False if there was none."""
        with self._lock:
            student = self._student_service.get_student(student_id)
            if student is None:
                return False

            enrollment = student.unenroll(course_code)
            if enrollment is None:
                return False

            self._forget(enrollment)
            logger.info("Unenrolled %s from %s", student_id, normalize_code(course_code))
            return True

    def record_grade(self, student_id: str, course_code: str, marks: float) -> None:
        """Record marks for an enrollment; unknown students or courses are ignored."""
        with self._lock:
            student = self._student_service.get_student(student_id)
            if student is None:
                logger.debug("Ignoring grade for unknown student %s", student_id)
                return
            if student.get_enrollment(course_code) is None:
                logger.debug("Ignoring grade for %s: not enrolled in %s",
                             student_id, normalize_code(course_code))
                return
            student.record_grade(course_code, marks)
            logger.info("Recorded marks %s for %s in %s", marks, student_id, normalize_code(course_code))

    def get_student_enrollments(self, student_id: str) -> List[Enrollment]:
        """Get a student's enrollments in the order they were created."""
        with self._lock:
            return [e for e in self._enrollments.values()
                    if e.student.id == student_id and self._is_live(e)]

    def get_semester_credits(self, student_id: str, semester: Semester, year: int) -> int:
        """Sum the credits a student holds for one semester and year."""
        with self._lock:
            total = 0
            for enrollment_id in self._semester_index.get((student_id, semester, year), []):
                enrollment = self._enrollments[enrollment_id]
                if self._is_live(enrollment):
                    total += enrollment.course.credits
            return total

    def get_enrollment(self, enrollment_id: str) -> Optional[Enrollment]:
        with self._lock:
            enrollment = self._enrollments.get(enrollment_id)
            if enrollment is None or not self._is_live(enrollment):
                return None
            return enrollment

    def list_enrollments(self) -> List[Enrollment]:
        with self._lock:
            return [e for e in self._enrollments.values() if self._is_live(e)]

    def get_statistics(self) -> Dict[str, Any]:
        """Get enrollment statistics."""
        with self._lock:
            live = [e for e in self._enrollments.values() if self._is_live(e)]
            graded = sum(1 for e in live if e.is_graded)
            return {
                'total_enrollments': len(live),
                'graded_enrollments': graded,
                'ungraded_enrollments': len(live) - graded,
                'max_credits_per_semester': self._max_credits,
            }

    def _is_live(self, enrollment: Enrollment) -> bool:
        # A record dropped through Student.unenroll directly is no longer held by its
        # student, and a student replaced in the catalog no longer owns its records.
        student: Student = enrollment.student
        if self._student_service.get_student(student.id) is not student:
            return False
        return student.get_enrollment(enrollment.course.code.code) is enrollment

    def _forget(self, enrollment: Enrollment) -> None:
        self._enrollments.pop(enrollment.id, None)
        key = (enrollment.student.id, enrollment.semester, enrollment.year)
        ids = self._semester_index.get(key, [])
        if enrollment.id in ids:
            ids.remove(enrollment.id)
        if not ids:
            self._semester_index.pop(key, None)

    def _evict_stale(self) -> None:
        stale = [e for e in self._enrollments.values() if not self._is_live(e)]
        for enrollment in stale:
            self._forget(enrollment)
        if stale:
            logger.debug("Evicted %d stale enrollment records", len(stale))
