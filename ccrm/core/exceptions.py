"""
Custom exceptions for the CCRM platform.
"""

from typing import Optional, Any, Dict


class CCRMException(Exception):
    """Base exception for all CCRM-related errors."""

    default_error_code: Optional[str] = None

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}


class ValidationError(CCRMException):
    """Raised when data validation fails."""
    default_error_code = "INVALID_ARGUMENT"


class ResourceNotFoundError(CCRMException):
    """Raised when a requested resource is not found."""
    default_error_code = "NOT_FOUND"


class EnrollmentError(CCRMException):
    """Raised when enrollment operations fail."""
    default_error_code = "ENROLLMENT_FAILED"


class DuplicateEnrollmentError(EnrollmentError):
    """Raised when a student already holds an enrollment in the course."""
    default_error_code = "DUPLICATE_ENROLLMENT"


class CreditLimitExceededError(EnrollmentError):
    """Raised when an enrollment would exceed the semester credit cap."""
    default_error_code = "CREDIT_LIMIT_EXCEEDED"


class PersistenceError(CCRMException):
    """Raised when persistence operations fail."""
    default_error_code = "PERSISTENCE_FAILED"


class ConfigurationError(CCRMException):
    """Raised when configuration is invalid."""
    default_error_code = "INVALID_CONFIGURATION"
