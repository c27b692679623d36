"""Pydantic request schemas used by the API.

Create payloads are deliberately loose: every column is optional and
unknown keys are dropped, so a missing value reaches the database as NULL
and the store decides whether the row is acceptable. The schemas only
coerce JSON values into the Python types the columns bind with.
"""

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class CenterIn(_Payload):
    """Writable columns of a center."""
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    location: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None


class StudentIn(_Payload):
    """Writable columns of a student; `date_of_birth` is an ISO date."""
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    center_id: Optional[int] = None
    photo: Optional[str] = None
    registration_id: Optional[str] = None


class ApplicationIn(_Payload):
    """Writable columns of an application.

    `data` is any JSON value; it is serialized before storage.
    """
    application_number: Optional[str] = None
    student_id: Optional[int] = None
    center_id: Optional[int] = None
    data: Any = None
    status: Optional[str] = None


class MarkIn(_Payload):
    student_id: Optional[int] = None
    subject: Optional[str] = None
    marks: Optional[int] = None
    grade: Optional[str] = None
    center_id: Optional[int] = None


class EmailLogin(_Payload):
    """Payload for admin and center login."""
    email: Optional[str] = None
    password: Optional[str] = None


class StudentLogin(_Payload):
    """Payload for student login.

    `date_of_birth` stays a string here; a value that is not an ISO date
    simply fails to match.
    """
    registration_id: Optional[str] = None
    date_of_birth: Optional[str] = None
