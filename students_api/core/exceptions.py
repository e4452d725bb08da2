from enum import Enum
from typing import List, Optional


class ErrorKind(str, Enum):
    """Categories of request-scoped failures; each maps to one HTTP status."""
    INPUT = "input"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    STORAGE = "storage"


class StudentsAPIError(Exception):
    """
    Parent class for every error raised while handling a request.

    ``message`` is the short category shown to the client
    ("Failed to create student", "Validation failed", ...) and ``error``
    the underlying detail, which may be absent.
    """
    kind: ErrorKind = ErrorKind.STORAGE

    def __init__(self, message: str, error: Optional[str] = None):
        self.message = message
        self.error = error
        super().__init__(f"{message}: {error}" if error else message)


# =========================================================
# 1. CLIENT ERRORS
# =========================================================

class InputError(StudentsAPIError):
    """400: empty or malformed body, bad path parameter"""
    kind = ErrorKind.INPUT


class ValidationError(StudentsAPIError):
    """400: one or more fields failed validation; every violation is reported"""
    kind = ErrorKind.VALIDATION

    def __init__(self, violations: List[str]):
        self.violations = list(violations)
        super().__init__("Validation failed", ", ".join(self.violations))


class NotFoundError(StudentsAPIError):
    """404: no student with the requested id"""
    kind = ErrorKind.NOT_FOUND


# =========================================================
# 2. STORAGE ERRORS
# =========================================================

class StorageError(StudentsAPIError):
    """
    500: the store could not complete the operation
    (connection lost, constraint violated, missing table...).
    """
    kind = ErrorKind.STORAGE
