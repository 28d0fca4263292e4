"""
In-memory course catalog.
"""

import threading
from typing import Dict, List, Optional

from ..app_logger import get_logger
from ..core.entities import Course, normalize_code
from ..core.enums import Semester
from ..core.interfaces import Searchable

logger = get_logger("courses")


class CourseService(Searchable[Course]):
    """Catalog of courses keyed by normalized course code."""

    def __init__(self):
        self._courses: Dict[str, Course] = {}
        self._lock = threading.RLock()

    def add_course(self, course: Course) -> None:
        """Add a course, replacing any course with the same code."""
        with self._lock:
            self._courses[course.code.code] = course
            logger.debug("Added course %s", course.code)

    def get_course(self, code: str) -> Optional[Course]:
        return self._courses.get(normalize_code(code))

    def update_course(self, code: str, title: str, credits: int, department: str) -> None:
        with self._lock:
            course = self.get_course(code)
            if course is not None:
                course.update(title=title, credits=credits, department=department)

    def deactivate_course(self, code: str) -> None:
        with self._lock:
            course = self.get_course(code)
            if course is not None:
                course.deactivate()

    def list_courses(self) -> List[Course]:
        with self._lock:
            return list(self._courses.values())

    def search_by_instructor(self, instructor_id: str) -> List[Course]:
        with self._lock:
            return [c for c in self._courses.values()
                    if c.instructor is not None and c.instructor.id == instructor_id]

    def search_by_department(self, department: str) -> List[Course]:
        with self._lock:
            return [c for c in self._courses.values()
                    if c.department.lower() == department.lower()]

    def search_by_semester(self, semester: Semester) -> List[Course]:
        with self._lock:
            return [c for c in self._courses.values() if c.semester == semester]

    def search(self, query: str) -> List[Course]:
        """Find courses whose title, code or department contains the query."""
        needle = query.lower()
        with self._lock:
            return [
                c for c in self._courses.values()
                if needle in c.title.lower()
                or needle in c.code.code.lower()
                or needle in c.department.lower()
            ]
