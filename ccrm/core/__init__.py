"""
Core module containing the fundamental object model and base classes.
"""

from .entities import *
from .interfaces import *
from .exceptions import *
from .enums import *

__all__ = [
    # Entities
    "AbstractEntity",
    "CourseCode",
    "Person",
    "Student",
    "Instructor",
    "Course",
    "Enrollment",
    "normalize_code",

    # Interfaces
    "Persistable",
    "Searchable",

    # Enums
    "EntityStatus",
    "PersonType",
    "Semester",
    "Grade",

    # Exceptions
    "CCRMException",
    "ValidationError",
    "ResourceNotFoundError",
    "EnrollmentError",
    "DuplicateEnrollmentError",
    "CreditLimitExceededError",
    "PersistenceError",
    "ConfigurationError",
]
