"""
school/models.py -- Domain dataclasses for school records.

These are pure data containers with zero logic. Persistence lives in
school/store.py.

user_id links a record to a users row. It is an association, not
ownership: nothing checks that the user exists or has a matching role, and
removing a record never touches the user.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Student:
    """A student record. id is None before the record is written."""

    name: str
    grade: str
    user_id: int
    id: Optional[int] = None


@dataclass
class Teacher:
    """A teacher record. id is None before the record is written."""

    name: str
    subject: str
    user_id: int
    id: Optional[int] = None
