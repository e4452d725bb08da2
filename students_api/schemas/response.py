from typing import Any, Dict

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    message: str
    error: str = ""


class MessageResponse(BaseModel):
    message: str


class StudentCreated(MessageResponse):
    id: int


def general_error(message: str, error: Any = None) -> Dict[str, str]:
    """Error payload for the client; a missing cause renders as an empty string."""
    return ErrorResponse(
        message=message,
        error="" if error is None else str(error),
    ).model_dump()
