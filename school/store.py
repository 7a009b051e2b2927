"""
school/store.py -- SQLAlchemy-backed persistence for student and teacher records.

Uses SQLAlchemy Core (not ORM) so the dataclasses in school/models.py remain
the authoritative domain representation.

Pattern: Repository + Data Mapper. SchoolStore is the repository; the
_row_to_* functions are the mappers. Route handlers never touch SQL directly.

Every method is a single statement on its own connection. There are no
multi-statement transactions, so the database is the only serialization point
for concurrent writes.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = SchoolStore("sqlite:///:memory:")
    student_id = store.create_student(Student(name="Bob", grade="5", user_id=1))
    students = store.list_students()
    store.delete_student(student_id)
    store.close()
"""

from sqlalchemy import Column, ForeignKey, Integer, String, Table
from sqlalchemy.engine import Engine

from auth.store import _DEFAULT_DB_URL, create_store_engine, metadata
from school.models import Student, Teacher

# ---------------------------------------------------------------------------
# Schema
#
# Registered on the auth MetaData so the user_id foreign keys resolve against
# users.user_id. SQLite does not enforce them (foreign_keys pragma is off),
# which matches the association-only semantics of user_id.
# ---------------------------------------------------------------------------

_students = Table(
    "students",
    metadata,
    Column("student_id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255)),
    Column("grade", String(50)),
    Column("user_id", Integer, ForeignKey("users.user_id")),
)

_teachers = Table(
    "teachers",
    metadata,
    Column("teacher_id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255)),
    Column("subject", String(255)),
    Column("user_id", Integer, ForeignKey("users.user_id")),
)


class SchoolStore:
    """Repository for Student and Teacher records."""

    def __init__(self, db_url: str = _DEFAULT_DB_URL, timeout: float = 5.0) -> None:
        self.engine: Engine = create_store_engine(db_url, timeout)

    # ------------------------------------------------------------------
    # Students
    # ------------------------------------------------------------------

    def create_student(self, student: Student) -> int:
        """Insert a student and return its student_id."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _students.insert().values(name=student.name, grade=student.grade, user_id=student.user_id)
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def list_students(self) -> list[Student]:
        """Return every student ordered by student_id."""
        with self.engine.connect() as conn:
            rows = conn.execute(_students.select().order_by(_students.c.student_id)).fetchall()
        return [_row_to_student(r) for r in rows]

    def delete_student(self, student_id: int) -> bool:
        """Delete a student. Returns True if a row was removed, False if the id was unknown."""
        with self.engine.connect() as conn:
            result = conn.execute(_students.delete().where(_students.c.student_id == student_id))
            conn.commit()
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Teachers
    # ------------------------------------------------------------------

    def create_teacher(self, teacher: Teacher) -> int:
        """Insert a teacher and return its teacher_id."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _teachers.insert().values(name=teacher.name, subject=teacher.subject, user_id=teacher.user_id)
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def list_teachers(self) -> list[Teacher]:
        """Return every teacher ordered by teacher_id."""
        with self.engine.connect() as conn:
            rows = conn.execute(_teachers.select().order_by(_teachers.c.teacher_id)).fetchall()
        return [_row_to_teacher(r) for r in rows]

    def delete_teacher(self, teacher_id: int) -> bool:
        """Delete a teacher. Returns True if a row was removed, False if the id was unknown."""
        with self.engine.connect() as conn:
            result = conn.execute(_teachers.delete().where(_teachers.c.teacher_id == teacher_id))
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_student(row) -> Student:
    return Student(id=row.student_id, name=row.name, grade=row.grade, user_id=row.user_id)


def _row_to_teacher(row) -> Teacher:
    return Teacher(id=row.teacher_id, name=row.name, subject=row.subject, user_id=row.user_id)
