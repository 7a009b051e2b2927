"""
api/routes/teachers.py -- Teacher record routes.

Routes:
  POST   /teachers               -- create a teacher
  GET    /teachers               -- list all teachers
  DELETE /teachers/{teacher_id}  -- delete a teacher

Every route on this router is teacher-only, so the whole gate (token then
role) is a router-level dependency.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError

from api.models import TeacherCreate, TeacherCreated, TeacherResponse
from auth.dependencies import require_roles
from school.models import Teacher
from school.store import SchoolStore

logger = logging.getLogger("schoolrecords.school")

router = APIRouter(dependencies=[Depends(require_roles("teacher"))])


@router.post("/teachers", response_model=TeacherCreated)
def create_teacher(request: Request, body: TeacherCreate) -> TeacherCreated:
    store: SchoolStore = request.app.state.school_store
    try:
        teacher_id = store.create_teacher(Teacher(name=body.name, subject=body.subject, user_id=body.user_id))
    except SQLAlchemyError as exc:
        logger.exception("Failed to insert teacher")
        raise HTTPException(
            status_code=500,
            detail={"code": "store_error", "message": "Error adding teacher."},
        ) from exc
    return TeacherCreated(teacher_id=teacher_id)


@router.get("/teachers", response_model=list[TeacherResponse])
def list_teachers(request: Request) -> list[TeacherResponse]:
    store: SchoolStore = request.app.state.school_store
    return [TeacherResponse.from_teacher(t) for t in store.list_teachers()]


@router.delete("/teachers/{teacher_id}", response_class=PlainTextResponse)
def delete_teacher(request: Request, teacher_id: int) -> PlainTextResponse:
    """Delete a teacher record. 404 in plain text when the id is unknown."""
    store: SchoolStore = request.app.state.school_store
    try:
        deleted = store.delete_teacher(teacher_id)
    except SQLAlchemyError:
        logger.exception("Failed to delete teacher_id=%d", teacher_id)
        return PlainTextResponse("Error deleting teacher", status_code=500)
    if not deleted:
        return PlainTextResponse("Teacher not found", status_code=404)
    logger.info("Deleted teacher_id=%d", teacher_id)
    return PlainTextResponse("Teacher deleted successfully", status_code=200)
