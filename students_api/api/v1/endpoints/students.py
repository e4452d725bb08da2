from fastapi import APIRouter, Depends, status
from typing import Any, Dict, List
import logging

from students_api.api.deps import get_json_body, get_repository, get_student_id
from students_api.schemas.response import MessageResponse, StudentCreated
from students_api.schemas.student import Student, StudentCreate, StudentUpdate
from students_api.services.student.student import StudentStorage
from students_api.services.student.validation import validate_student

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=StudentCreated, status_code=status.HTTP_201_CREATED)
def create_student(
    payload: Dict[str, Any] = Depends(get_json_body),
    repository: StudentStorage = Depends(get_repository)
):
    """
    Create a new student

    Required:
    - **name**: non-empty
    - **email**: valid email address
    - **age**: positive integer
    """
    logger.info("Creating a new student")
    student = validate_student(payload, StudentCreate)

    student_id = repository.create_student(student.name, student.email, student.age)

    logger.info(f"Student created successfully (id={student_id})")
    return {"message": "Student created successfully", "id": student_id}


@router.get("", response_model=List[Student])
def get_students(repository: StudentStorage = Depends(get_repository)):
    """
    List every student, oldest first
    """
    logger.info("Fetching all students")
    students = repository.get_students()
    logger.info(f"Students fetched successfully (count={len(students)})")
    return students


@router.get("/{student_id}", response_model=Student)
def get_student(
    student_id: int = Depends(get_student_id),
    repository: StudentStorage = Depends(get_repository)
):
    """
    Fetch one student by ID
    """
    logger.info(f"Fetching student by id {student_id}")
    student = repository.get_student_by_id(student_id)
    logger.info(f"Student fetched successfully (id={student_id})")
    return student


@router.put("/{student_id}", response_model=MessageResponse)
def update_student(
    student_id: int = Depends(get_student_id),
    payload: Dict[str, Any] = Depends(get_json_body),
    repository: StudentStorage = Depends(get_repository)
):
    """
    Overwrite every field of a student
    """
    logger.info(f"Updating student {student_id}")
    student = validate_student(payload, StudentUpdate)

    repository.update_student_by_id(student_id, student.name, student.email, student.age)

    logger.info(f"Student updated successfully (id={student_id})")
    return {"message": "Student updated successfully"}


@router.delete("/{student_id}", response_model=MessageResponse)
def delete_student(
    student_id: int = Depends(get_student_id),
    repository: StudentStorage = Depends(get_repository)
):
    """
    Delete a student
    """
    logger.info(f"Deleting student {student_id}")
    repository.delete_student_by_id(student_id)
    logger.info(f"Student deleted successfully (id={student_id})")
    return {"message": "Student deleted successfully"}
