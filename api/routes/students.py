"""
api/routes/students.py -- Student record routes.

Routes:
  POST   /students               -- create a student (teacher only)
  GET    /students               -- list all students (any authenticated role)
  DELETE /students/{student_id}  -- delete a student (teacher only)

Every route requires a bearer token: the router-level dependency runs the
authentication stage before any handler code. Teacher-only routes add the
authorization stage with require_roles("teacher").

Deletes answer in plain text. An unknown id is a 404 rather than a silent
success, so callers can tell a no-op apart from a real delete.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError

from api.models import StudentCreate, StudentCreated, StudentResponse
from auth.dependencies import get_current_claims, require_roles
from school.models import Student
from school.store import SchoolStore

logger = logging.getLogger("schoolrecords.school")

router = APIRouter(dependencies=[Depends(get_current_claims)])

_teacher_only = [Depends(require_roles("teacher"))]


@router.post("/students", response_model=StudentCreated, dependencies=_teacher_only)
def create_student(request: Request, body: StudentCreate) -> StudentCreated:
    """Insert a student record. user_id is stored as given, without a users lookup."""
    store: SchoolStore = request.app.state.school_store
    try:
        student_id = store.create_student(Student(name=body.name, grade=body.grade, user_id=body.user_id))
    except SQLAlchemyError as exc:
        logger.exception("Failed to insert student")
        raise HTTPException(
            status_code=500,
            detail={"code": "store_error", "message": "Error adding student."},
        ) from exc
    return StudentCreated(student_id=student_id)


@router.get("/students", response_model=list[StudentResponse])
def list_students(request: Request) -> list[StudentResponse]:
    """Return every student record."""
    store: SchoolStore = request.app.state.school_store
    return [StudentResponse.from_student(s) for s in store.list_students()]


@router.delete("/students/{student_id}", response_class=PlainTextResponse, dependencies=_teacher_only)
def delete_student(request: Request, student_id: int) -> PlainTextResponse:
    store: SchoolStore = request.app.state.school_store
    try:
        deleted = store.delete_student(student_id)
    except SQLAlchemyError:
        logger.exception("Failed to delete student_id=%d", student_id)
        return PlainTextResponse("Error deleting student", status_code=500)
    if not deleted:
        return PlainTextResponse("Student not found", status_code=404)
    logger.info("Deleted student_id=%d", student_id)
    return PlainTextResponse("Student deleted successfully", status_code=200)
