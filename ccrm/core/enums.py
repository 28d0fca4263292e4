"""
Enumerations and constants for the CCRM platform.
"""

from enum import Enum


class EntityStatus(Enum):
    """Status of an entity in the system."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class PersonType(Enum):
    """Types of persons in the system."""
    STUDENT = "student"
    INSTRUCTOR = "instructor"


class Semester(Enum):
    """Academic semesters."""
    SPRING = "SPRING"
    SUMMER = "SUMMER"
    FALL = "FALL"


class Grade(Enum):
    """Letter grades and the grade points they carry."""
    S = 10.0
    A = 9.0
    B = 8.0
    C = 7.0
    D = 6.0
    E = 5.0
    F = 0.0

    @property
    def points(self) -> float:
        return self.value

    @classmethod
    def from_marks(cls, marks: float) -> "Grade":
        """Map marks to a grade.

        Marks are not range checked: anything at or above 90 is an S and
        anything below 40 is an F.
        """
        if marks >= 90:
            return cls.S
        if marks >= 80:
            return cls.A
        if marks >= 70:
            return cls.B
        if marks >= 60:
            return cls.C
        if marks >= 50:
            return cls.D
        if marks >= 40:
            return cls.E
        return cls.F
