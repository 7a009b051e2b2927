"""
API request and response models for the school records REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
school/models.py, which own the internal domain representation. Route
handlers map between the two.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.config import get_settings
from school.models import Student, Teacher

# bcrypt reads at most 72 bytes of input; anything longer would be truncated.
_BCRYPT_MAX_BYTES = 72


def _password_fits_bcrypt(value: str) -> str:
    if len(value.encode("utf-8")) > _BCRYPT_MAX_BYTES:
        raise ValueError(f"password must be at most {_BCRYPT_MAX_BYTES} bytes")
    return value


# ---------------------------------------------------------------------------
# Auth
#
# Credentials are compared byte for byte at login, so username and password
# are never whitespace-stripped on either request.
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /register."""

    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1)
    role: str

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _password_fits_bcrypt(value)

    @field_validator("role")
    @classmethod
    def role_is_recognized(cls, value: str) -> str:
        """Only roles listed in Settings.roles may be registered."""
        roles = get_settings().roles
        if value not in roles:
            raise ValueError(f"role must be one of {roles!r}")
        return value


class RegisterResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: int


class LoginRequest(BaseModel):
    """Request body for POST /login.

    The password cap matches registration: no stored password can be longer.
    """

    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _password_fits_bcrypt(value)


class LoginResponse(BaseModel):
    """Response body for POST /login.

    expires_in is None when tokens are issued without expiry.
    """

    model_config = ConfigDict(frozen=True)

    token: str
    token_type: str = "bearer"
    expires_in: Optional[int] = None


# ---------------------------------------------------------------------------
# Students
# ---------------------------------------------------------------------------


class StudentCreate(BaseModel):
    """Request body for POST /students."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    grade: str = Field(max_length=50)
    user_id: int


class StudentCreated(BaseModel):
    model_config = ConfigDict(frozen=True)

    student_id: int


class StudentResponse(BaseModel):
    """One row in the GET /students list."""

    model_config = ConfigDict(frozen=True)

    student_id: int
    name: Optional[str]
    grade: Optional[str]
    user_id: Optional[int]

    @classmethod
    def from_student(cls, student: Student) -> "StudentResponse":
        return cls(student_id=student.id, name=student.name, grade=student.grade, user_id=student.user_id)


# ---------------------------------------------------------------------------
# Teachers
# ---------------------------------------------------------------------------


class TeacherCreate(BaseModel):
    """Request body for POST /teachers."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    subject: str = Field(max_length=255)
    user_id: int


class TeacherCreated(BaseModel):
    model_config = ConfigDict(frozen=True)

    teacher_id: int


class TeacherResponse(BaseModel):
    """One row in the GET /teachers list."""

    model_config = ConfigDict(frozen=True)

    teacher_id: int
    name: Optional[str]
    subject: Optional[str]
    user_id: Optional[int]

    @classmethod
    def from_teacher(cls, teacher: Teacher) -> "TeacherResponse":
        return cls(teacher_id=teacher.id, name=teacher.name, subject=teacher.subject, user_id=teacher.user_id)


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Structured error body nested under "error" in every JSON failure."""

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /health."""

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
