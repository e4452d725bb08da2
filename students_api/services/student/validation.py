"""
Turning raw request input into validated values.

Covers the JSON body of create/update requests and the ``{student_id}``
path segment. Every failure is raised as an ``InputError`` or
``ValidationError`` so the exception handlers can render it.
"""

import json
import re
from typing import Any, Dict, List, Type, TypeVar

from pydantic import ValidationError as PydanticValidationError

from students_api.core.exceptions import InputError, ValidationError
from students_api.schemas.student import StudentBase, StudentCreate

StudentSchema = TypeVar("StudentSchema", bound=StudentBase)

FIELD_LABELS = {"name": "Name", "email": "Email", "age": "Age"}

# "missing" comes from pydantic, "required" from StudentBase.reject_empty
REQUIRED_ERROR_TYPES = {"missing", "required"}

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_ID_PATTERN = re.compile(r"[+-]?[0-9]+")


def decode_student_payload(raw: bytes) -> Dict[str, Any]:
    """Decode a request body into a JSON object."""
    if not raw.strip():
        raise InputError("Request body is empty", "unexpected end of JSON input")

    try:
        payload = json.loads(raw)
    except (ValueError, RecursionError) as e:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors;
        # RecursionError comes from deeply nested arrays/objects
        raise InputError("Failed to decode request body", str(e)) from e

    if not isinstance(payload, dict):
        raise InputError(
            "Failed to decode request body",
            f"expected a JSON object, got {type(payload).__name__}",
        )
    return payload


def parse_student_id(raw: str) -> int:
    """Parse a path identifier as a signed 64-bit integer."""
    if not raw:
        raise InputError("Student ID is required", "missing path parameter: student_id")

    if not _ID_PATTERN.fullmatch(raw):
        raise InputError("Invalid student ID", f"invalid syntax: {raw!r}")

    value = int(raw)
    if not INT64_MIN <= value <= INT64_MAX:
        raise InputError("Invalid student ID", f"value out of range: {raw!r}")
    return value


def describe_violations(exc: PydanticValidationError) -> List[str]:
    """
    One message per offending field, in field order.

    Absent fields read "<Field> is required", anything else "<Field> is not valid".
    """
    messages: List[str] = []
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else "body"
        label = FIELD_LABELS.get(field, field.capitalize())
        if error["type"] in REQUIRED_ERROR_TYPES:
            message = f"{label} is required"
        else:
            message = f"{label} is not valid"
        if message not in messages:
            messages.append(message)
    return messages


def validate_student(
    payload: Dict[str, Any],
    schema: Type[StudentSchema] = StudentCreate,
) -> StudentSchema:
    """Validate every field of ``payload`` and report all violations at once."""
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(describe_violations(e)) from e
