import pytest

from students_api.core.exceptions import ErrorKind, InputError, ValidationError
from students_api.core.handlers import error_status
from students_api.schemas.response import general_error
from students_api.schemas.student import StudentUpdate
from students_api.services.student.validation import (
    decode_student_payload,
    parse_student_id,
    validate_student,
)


def test_valid_payload():
    student = validate_student({"name": "Ada", "email": "ada@x.io", "age": 30})
    assert (student.name, student.email, student.age) == ("Ada", "ada@x.io", 30)


def test_unknown_fields_are_ignored():
    student = validate_student({"name": "Ada", "email": "ada@x.io", "age": 30, "grade": "A"}, StudentUpdate)
    assert isinstance(student, StudentUpdate)


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({}, ["Name is required", "Email is required", "Age is required"]),
        ({"email": "ada@x.io", "age": 30}, ["Name is required"]),
        ({"name": None, "email": "", "age": 0}, ["Name is required", "Email is required", "Age is required"]),
        ({"name": "   ", "email": "ada@x.io", "age": 30}, ["Name is required"]),
        ({"name": "Ada", "email": "ada", "age": 30}, ["Email is not valid"]),
        ({"name": "Ada", "email": "ada@x.io", "age": -1}, ["Age is not valid"]),
        ({"name": "Ada", "email": "ada@x.io", "age": "30"}, ["Age is not valid"]),
        ({"name": "Ada", "email": "ada@x.io", "age": True}, ["Age is not valid"]),
        ({"name": "Ada", "email": "ada@x.io", "age": 2 ** 63}, ["Age is not valid"]),
        ({"name": "Ada", "email": "Ada <ada@x.io>", "age": 30}, ["Email is not valid"]),
        ({"name": 7, "email": "ada@x.io"}, ["Name is not valid", "Age is required"]),
    ],
)
def test_violations(payload, expected):
    with pytest.raises(ValidationError) as exc_info:
        validate_student(payload)
    assert exc_info.value.violations == expected
    assert exc_info.value.message == "Validation failed"
    assert exc_info.value.error == ", ".join(expected)


def test_decode_empty_body():
    for raw in (b"", b"  \n"):
        with pytest.raises(InputError) as exc_info:
            decode_student_payload(raw)
        assert exc_info.value.message == "Request body is empty"


def test_decode_malformed_body():
    with pytest.raises(InputError) as exc_info:
        decode_student_payload(b"{not json")
    assert exc_info.value.message == "Failed to decode request body"


def test_decode_invalid_utf8():
    with pytest.raises(InputError) as exc_info:
        decode_student_payload(b'{"name": "\xff"}')
    assert exc_info.value.message == "Failed to decode request body"


def test_decode_object():
    assert decode_student_payload(b'{"name": "Ada"}') == {"name": "Ada"}


@pytest.mark.parametrize("raw, expected", [("1", 1), ("+12", 12), ("-3", -3), ("9223372036854775807", 2 ** 63 - 1)])
def test_parse_student_id(raw, expected):
    assert parse_student_id(raw) == expected


@pytest.mark.parametrize("raw", ["abc", "1.5", " 1", "1_000", "9223372036854775808", "٣"])
def test_parse_student_id_rejects(raw):
    with pytest.raises(InputError) as exc_info:
        parse_student_id(raw)
    assert exc_info.value.message == "Invalid student ID"


def test_parse_missing_student_id():
    with pytest.raises(InputError) as exc_info:
        parse_student_id("")
    assert exc_info.value.message == "Student ID is required"


def test_general_error_without_cause():
    assert general_error("Invalid request method") == {"message": "Invalid request method", "error": ""}
    assert general_error("Failed", ValueError("boom")) == {"message": "Failed", "error": "boom"}


def test_error_kinds_map_to_statuses():
    assert error_status(ErrorKind.INPUT) == 400
    assert error_status(ErrorKind.VALIDATION) == 400
    assert error_status(ErrorKind.NOT_FOUND) == 404
    assert error_status(ErrorKind.STORAGE) == 500


def test_email_keeps_original_spelling():
    student = validate_student({"name": "Ada", "email": "Ada@X.IO", "age": 30})
    assert student.email == "Ada@X.IO"


def test_largest_age_is_accepted():
    assert validate_student({"name": "Ada", "email": "ada@x.io", "age": 2 ** 63 - 1}).age == 2 ** 63 - 1


def test_decode_deeply_nested_body():
    with pytest.raises(InputError) as exc_info:
        decode_student_payload(b"[" * 100000)
    assert exc_info.value.message == "Failed to decode request body"
