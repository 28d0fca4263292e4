"""
In-memory catalogs of students and instructors.
"""

import threading
from typing import Dict, List, Optional

from ..app_logger import get_logger
from ..core.entities import Student, Instructor
from ..core.interfaces import Searchable

logger = get_logger("students")


class StudentService(Searchable[Student]):
    """Catalog of students keyed by student ID."""

    def __init__(self):
        self._students: Dict[str, Student] = {}
        self._lock = threading.RLock()

    def add_student(self, student: Student) -> None:
        """Add a student, replacing any student with the same ID."""
        with self._lock:
            self._students[student.id] = student
            logger.debug("Added student %s", student.id)

    def get_student(self, student_id: str) -> Optional[Student]:
        return self._students.get(student_id)

    def update_student(self, student_id: str, full_name: str, email: str) -> None:
        with self._lock:
            student = self._students.get(student_id)
            if student is not None:
                student.update(full_name=full_name, email=email)

    def deactivate_student(self, student_id: str) -> None:
        with self._lock:
            student = self._students.get(student_id)
            if student is not None:
                student.deactivate()

    def list_students(self) -> List[Student]:
        with self._lock:
            return list(self._students.values())

    def search(self, query: str) -> List[Student]:
        """Find students whose name, registration number or email contains the query."""
        needle = query.lower()
        with self._lock:
            return [
                s for s in self._students.values()
                if needle in s.full_name.lower()
                or needle in s.reg_no.lower()
                or needle in s.email.lower()
            ]


class InstructorService:
    """Catalog of instructors keyed by instructor ID."""

    def __init__(self):
        self._instructors: Dict[str, Instructor] = {}
        self._lock = threading.RLock()

    def add_instructor(self, instructor: Instructor) -> None:
        with self._lock:
            self._instructors[instructor.id] = instructor

    def get_instructor(self, instructor_id: str) -> Optional[Instructor]:
        return self._instructors.get(instructor_id)

    def list_instructors(self) -> List[Instructor]:
        with self._lock:
            return list(self._instructors.values())

    def as_mapping(self) -> Dict[str, Instructor]:
        with self._lock:
            return dict(self._instructors)
