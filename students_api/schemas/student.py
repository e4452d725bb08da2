from typing import Any

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

# age is stored as a signed 64-bit INTEGER
AGE_MAX = 2 ** 63 - 1


class StudentBase(BaseModel):
    name: str
    email: str
    age: int = Field(strict=True, gt=0, le=AGE_MAX)

    @field_validator("name", "email", "age", mode="before")
    @classmethod
    def reject_empty(cls, v: Any) -> Any:
        """A null, blank string or zero age counts as a missing field."""
        if v is None:
            raise PydanticCustomError("required", "Field required")
        if isinstance(v, str) and not v.strip():
            raise PydanticCustomError("required", "Field required")
        if type(v) is int and v == 0:
            raise PydanticCustomError("required", "Field required")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        """Bare address only; the value is stored exactly as sent."""
        try:
            validate_email(v, check_deliverability=False, allow_display_name=False)
        except EmailNotValidError as e:
            raise ValueError(str(e)) from e
        return v


class StudentCreate(StudentBase):
    pass


class StudentUpdate(StudentBase):
    pass


class Student(BaseModel):
    id: int
    name: str
    email: str
    age: int

    model_config = ConfigDict(from_attributes=True)
