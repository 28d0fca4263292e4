"""
Reports computed over the student catalog.
"""

from collections import Counter
from typing import Dict, List, Optional

from ..core.entities import Student
from .student_service import StudentService

GPA_BANDS = [
    (9.0, "A (9.0+)"),
    (8.0, "B (8.0-8.9)"),
    (7.0, "C (7.0-7.9)"),
    (6.0, "D (6.0-6.9)"),
]
LOWEST_BAND = "F (<6.0)"


def gpa_band(gpa: float) -> str:
    for floor, label in GPA_BANDS:
        if gpa >= floor:
            return label
    return LOWEST_BAND


class ReportService:
    """GPA distribution and top-student reporting."""

    def __init__(self, student_service: StudentService):
        self._student_service = student_service

    def gpa_distribution(self) -> Dict[str, int]:
        """Count students per GPA band. Bands with no students are left out."""
        students = self._student_service.list_students()
        counts = Counter(gpa_band(s.calculate_gpa()) for s in students)
        ordered = [label for _, label in GPA_BANDS] + [LOWEST_BAND]
        return {label: counts[label] for label in ordered if counts[label]}

    def top_student(self) -> Optional[Student]:
        students: List[Student] = self._student_service.list_students()
        if not students:
            return None
        return max(students, key=lambda s: s.calculate_gpa())

    def render(self) -> str:
        distribution = self.gpa_distribution()
        if not distribution:
            return "No students available for reports."

        lines = ["--- GPA Distribution Report ---"]
        lines.extend(f"{band}: {count} students" for band, count in distribution.items())

        top = self.top_student()
        if top is not None:
            lines.append("")
            lines.append(f"Top Student: {top.full_name} (GPA: {top.calculate_gpa():.2f})")
        return "\n".join(lines)
