"""
Core entities for the CCRM platform.
"""

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .enums import EntityStatus, PersonType, Semester, Grade
from .interfaces import Persistable
from .exceptions import ValidationError, DuplicateEnrollmentError


def normalize_code(code: Optional[str]) -> str:
    """Normalize a raw course code for lookups, without validating it."""
    return code.strip().upper() if code else ""


class AbstractEntity(ABC):
    """Base abstract entity with universal ID, lifecycle, and versioning."""

    def __init__(self, entity_id: Optional[str] = None):
        self._id = entity_id or str(uuid.uuid4())
        self._created_at = datetime.now(timezone.utc)
        self._updated_at = self._created_at
        self._version = 1
        self._status = EntityStatus.ACTIVE

    @property
    def id(self) -> str:
        """Get the entity ID."""
        return self._id

    @property
    def created_at(self) -> datetime:
        """Get creation timestamp."""
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        """Get last update timestamp."""
        return self._updated_at

    @property
    def version(self) -> int:
        """Get current version."""
        return self._version

    @property
    def status(self) -> EntityStatus:
        """Get entity status."""
        return self._status

    @property
    def active(self) -> bool:
        return self._status == EntityStatus.ACTIVE

    def update(self, **kwargs) -> None:
        """Update entity with new data."""
        for key, value in kwargs.items():
            if hasattr(self, f"_{key}"):
                setattr(self, f"_{key}", value)
        self._updated_at = datetime.now(timezone.utc)
        self._version += 1

    def activate(self) -> None:
        """Activate the entity."""
        self._status = EntityStatus.ACTIVE
        self.update()

    def deactivate(self) -> None:
        """Deactivate the entity."""
        self._status = EntityStatus.INACTIVE
        self.update()

    def set_created_at(self, created_at: datetime) -> None:
        """Restore the creation time of an entity loaded from storage."""
        self._created_at = created_at

    def set_active(self, active: bool) -> None:
        if active:
            self.activate()
        else:
            self.deactivate()

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(id={self._id})"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self._id}, status={self._status.value})"


class CourseCode:
    """Normalized, non-empty course identifier."""

    def __init__(self, code: Optional[str]):
        if code is None or not code.strip():
            raise ValidationError("Course code cannot be empty")
        self._code = normalize_code(code)

    @property
    def code(self) -> str:
        return self._code

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CourseCode):
            return NotImplemented
        return self._code == other._code

    def __hash__(self) -> int:
        return hash(self._code)

    def __str__(self) -> str:
        return self._code

    def __repr__(self) -> str:
        return f"CourseCode({self._code!r})"


class Person(AbstractEntity):
    """Abstract base class for all persons in the system."""

    def __init__(self, person_id: str, full_name: str, email: str, person_type: PersonType):
        super().__init__(entity_id=person_id)
        self._full_name = full_name
        self._email = email
        self._person_type = person_type

    @property
    def full_name(self) -> str:
        return self._full_name

    @property
    def email(self) -> str:
        return self._email

    @property
    def person_type(self) -> PersonType:
        return self._person_type

    @abstractmethod
    def get_profile(self) -> str:
        """Get a one-line descriptive summary of this person."""
        pass


class Student(Person, Persistable):
    """Student entity holding the student's enrollments."""

    def __init__(self, student_id: str, reg_no: str, full_name: str, email: str):
        super().__init__(student_id, full_name, email, PersonType.STUDENT)
        self._reg_no = reg_no
        self._enrollments: Dict[str, "Enrollment"] = {}  # normalized course code -> enrollment

    @property
    def reg_no(self) -> str:
        return self._reg_no

    @property
    def enrollments(self) -> Dict[str, "Enrollment"]:
        return dict(self._enrollments)

    def get_enrollment(self, course_code: str) -> Optional["Enrollment"]:
        return self._enrollments.get(normalize_code(course_code))

    def enroll(self, course: "Course", semester: Semester, year: int) -> "Enrollment":
        """Enroll in a course.

        A student can hold at most one enrollment per course, whatever the
        semester or year.
        """
        key = course.code.code
        if key in self._enrollments:
            raise DuplicateEnrollmentError(
                f"Student already enrolled in course: {course.code}",
                details={'student_id': self._id, 'course_code': key},
            )
        enrollment = Enrollment(self, course, semester, year)
        self._enrollments[key] = enrollment
        self.update()
        return enrollment

    def unenroll(self, course_code: str) -> Optional["Enrollment"]:
        """Drop the enrollment for a course, if any, and return it."""
        enrollment = self._enrollments.pop(normalize_code(course_code), None)
        if enrollment is not None:
            self.update()
        return enrollment

    def record_grade(self, course_code: str, marks: float) -> None:
        enrollment = self.get_enrollment(course_code)
        if enrollment is not None:
            enrollment.record_marks(marks)

    def calculate_gpa(self) -> float:
        """Credit-weighted grade point average over graded enrollments."""
        if not self._enrollments:
            return 0.0
        total_points = 0.0
        total_credits = 0
        for enrollment in self._enrollments.values():
            if enrollment.grade is not None:
                total_points += enrollment.grade.points * enrollment.course.credits
                total_credits += enrollment.course.credits
        return total_points / total_credits if total_credits > 0 else 0.0

    def transcript(self) -> str:
        lines = [
            f"Transcript for {self._full_name} ({self._reg_no})",
            f"GPA: {self.calculate_gpa():.2f}",
            "",
            "Courses:",
        ]
        lines.extend(enrollment.render() for enrollment in self._enrollments.values())
        return "\n".join(lines) + "\n"

    def get_profile(self) -> str:
        return (f"Student ID: {self._id}, Reg No: {self._reg_no}, Name: {self._full_name}, "
                f"Email: {self._email}, Active: {str(self.active).lower()}")

    def to_csv_row(self) -> List[str]:
        return [self._id, self._reg_no, self._full_name, self._email,
                str(self.active).lower(), self._created_at.isoformat()]


class Instructor(Person, Persistable):
    """Instructor entity."""

    def __init__(self, instructor_id: str, full_name: str, email: str, department: str):
        super().__init__(instructor_id, full_name, email, PersonType.INSTRUCTOR)
        self._department = department

    @property
    def department(self) -> str:
        return self._department

    def get_profile(self) -> str:
        return (f"Instructor ID: {self._id}, Name: {self._full_name}, Email: {self._email}, "
                f"Department: {self._department}, Active: {str(self.active).lower()}")

    def to_csv_row(self) -> List[str]:
        return [self._id, self._full_name, self._email, self._department, str(self.active).lower()]


class Course(AbstractEntity, Persistable):
    """Course entity representing an academic course."""

    def __init__(self, code: CourseCode, title: str, credits: int,
                 semester: Semester = Semester.FALL, department: str = "",
                 instructor: Optional[Instructor] = None):
        super().__init__(entity_id=code.code)
        self._code = code
        self._title = title
        self._credits = credits
        self._semester = semester
        self._department = department
        self._instructor = instructor

    @classmethod
    def build(cls, code: Optional[str], title: Optional[str], credits: int,
              semester: Semester = Semester.FALL, department: str = "",
              instructor: Optional[Instructor] = None) -> "Course":
        """Create a course, checking the required fields first."""
        if not code or not title or credits <= 0:
            raise ValidationError("Course code, title and credits are required")
        return cls(CourseCode(code), title, credits, semester, department, instructor)

    @property
    def code(self) -> CourseCode:
        return self._code

    @property
    def title(self) -> str:
        return self._title

    @property
    def credits(self) -> int:
        return self._credits

    @property
    def semester(self) -> Semester:
        return self._semester

    @property
    def department(self) -> str:
        return self._department

    @property
    def instructor(self) -> Optional[Instructor]:
        return self._instructor

    def set_instructor(self, instructor: Optional[Instructor]) -> None:
        self._instructor = instructor
        self.update()

    def to_csv_row(self) -> List[str]:
        return [self._code.code, self._title, str(self._credits),
                self._instructor.id if self._instructor else "",
                self._semester.value, self._department, str(self.active).lower()]

    def __str__(self) -> str:
        return f"{self._code} - {self._title} ({self._credits} credits) - {self._department}"


class Enrollment(AbstractEntity, Persistable):
    """One student's registration in one course for a semester and year."""

    def __init__(self, student: Student, course: Course, semester: Semester, year: int):
        super().__init__()
        self._student = student
        self._course = course
        self._semester = semester
        self._year = year
        self._marks: Optional[float] = None
        self._grade: Optional[Grade] = None

    @property
    def student(self) -> Student:
        return self._student

    @property
    def course(self) -> Course:
        return self._course

    @property
    def semester(self) -> Semester:
        return self._semester

    @property
    def year(self) -> int:
        return self._year

    @property
    def marks(self) -> Optional[float]:
        return self._marks

    @property
    def grade(self) -> Optional[Grade]:
        return self._grade

    @property
    def is_graded(self) -> bool:
        return self._grade is not None

    def record_marks(self, marks: float) -> None:
        """Set marks and derive the grade. Recording again overwrites."""
        self._marks = marks
        self._grade = Grade.from_marks(marks)
        self.update()

    def render(self) -> str:
        marks = f"{self._marks:.2f}" if self._marks is not None else "N/A"
        points = self._grade.points if self._grade is not None else 0.0
        grade = self._grade.name if self._grade is not None else "Not Graded"
        return f"{self._course.code} - {self._course.title}: {marks} ({points:.2f}) - Grade: {grade}"

    def to_csv_row(self) -> List[str]:
        return [self._student.id, self._course.code.code, self._semester.value, str(self._year),
                "" if self._marks is None else str(self._marks)]

    def __str__(self) -> str:
        return self.render()
