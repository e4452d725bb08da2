from contextlib import contextmanager
from typing import Iterator, List, Protocol
import logging

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from students_api.core.database import check_database_connection, create_session_factory
from students_api.core.exceptions import NotFoundError, StorageError
from students_api.models.student import Student as StudentRow
from students_api.schemas.student import Student

logger = logging.getLogger(__name__)


class StudentStorage(Protocol):
    """Operations the request handlers need from the store."""

    def create_student(self, name: str, email: str, age: int) -> int: ...

    def get_student_by_id(self, student_id: int) -> Student: ...

    def get_students(self) -> List[Student]: ...

    def update_student_by_id(self, student_id: int, name: str, email: str, age: int) -> None: ...

    def delete_student_by_id(self, student_id: int) -> None: ...

    def ping(self) -> bool: ...


def _describe(exc: SQLAlchemyError) -> str:
    """Driver message without the SQL statement and SQLAlchemy's help link."""
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


class StudentRepository:
    """
    StudentStorage backed by a SQLAlchemy engine.

    Each call opens its own session and issues a single statement, so one
    repository can be shared by concurrent requests.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = create_session_factory(engine)

    @contextmanager
    def _session(self, message: str, operation: str) -> Iterator[Session]:
        """Session that rolls back and raises StorageError on any database failure."""
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            detail = f"{operation} failed: {_describe(e)}"
            logger.error(f"{message}: {detail}")
            raise StorageError(message, detail) from e
        finally:
            db.close()

    def create_student(self, name: str, email: str, age: int) -> int:
        """Insert a student and return the id assigned by the store"""
        with self._session("Failed to create student", "insert") as db:
            db_student = StudentRow(name=name, email=email, age=age)
            db.add(db_student)
            db.commit()
            return db_student.id

    def get_student_by_id(self, student_id: int) -> Student:
        with self._session("Failed to fetch student", "query") as db:
            db_student = db.get(StudentRow, student_id)
            if db_student is None:
                raise NotFoundError("Student not found", f"student not found with id {student_id}")
            return Student.model_validate(db_student)

    def get_students(self) -> List[Student]:
        """All students in insertion order"""
        with self._session("Failed to fetch students", "query") as db:
            rows = db.query(StudentRow).order_by(StudentRow.id).all()
            return [Student.model_validate(row) for row in rows]

    def update_student_by_id(self, student_id: int, name: str, email: str, age: int) -> None:
        """Overwrite every field; an unknown id updates nothing and is not an error."""
        with self._session("Failed to update student", "update") as db:
            db.query(StudentRow).filter(StudentRow.id == student_id).update(
                {StudentRow.name: name, StudentRow.email: email, StudentRow.age: age},
                synchronize_session=False,
            )
            db.commit()

    def delete_student_by_id(self, student_id: int) -> None:
        """Delete a student; an unknown id is not an error."""
        with self._session("Failed to delete student", "delete") as db:
            db.query(StudentRow).filter(StudentRow.id == student_id).delete(
                synchronize_session=False,
            )
            db.commit()

    def ping(self) -> bool:
        return check_database_connection(self.engine)
