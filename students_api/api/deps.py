from typing import Any, Dict

from fastapi import Request

from students_api.services.student.student import StudentStorage
from students_api.services.student.validation import decode_student_payload, parse_student_id


def get_repository(request: Request) -> StudentStorage:
    """
    Dependency returning the repository created at startup.
    """
    return request.app.state.student_repository


async def get_json_body(request: Request) -> Dict[str, Any]:
    """Raw request body decoded as a JSON object."""
    return decode_student_payload(await request.body())


def get_student_id(student_id: str) -> int:
    return parse_student_id(student_id)
