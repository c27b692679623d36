"""SQLModel data models.

This module defines the five tables of the institute database. Each class
maps to a table; foreign keys are declared on the child side only since
no handler navigates relationships.
"""

from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, Text, text
from datetime import datetime, date, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# server-side defaults keep rows inserted outside the ORM valid
def _created_column() -> dict:
    return {"server_default": text("CURRENT_TIMESTAMP")}


def _updated_column() -> dict:
    return {"server_default": text("CURRENT_TIMESTAMP"), "onupdate": _utcnow}


class Center(SQLModel, table=True):
    """A training center.

    Centers log in with `email`/`password`; inactive centers cannot.
    """
    __tablename__ = "centers"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255, nullable=False)
    email: str = Field(max_length=255, nullable=False, unique=True)
    password: str = Field(max_length=255, nullable=False)
    location: Optional[str] = Field(default=None, max_length=255)
    contact_person: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=20)
    is_active: bool = Field(default=True, sa_column_kwargs={"server_default": text("1")})
    created_at: datetime = Field(default_factory=_utcnow, index=True, sa_column_kwargs=_created_column())
    updated_at: datetime = Field(default_factory=_utcnow, sa_column_kwargs=_updated_column())


class Student(SQLModel, table=True):
    """A student registered by a center.

    `photo` is an opaque text blob (usually a base64 data URL) and
    `registration_id` doubles as the student's login name.
    """
    __tablename__ = "students"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255, nullable=False)
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=20)
    date_of_birth: Optional[date] = None
    center_id: Optional[int] = Field(default=None, foreign_key="centers.id")
    photo: Optional[str] = Field(default=None, sa_column=Column(Text))
    registration_id: Optional[str] = Field(default=None, max_length=50, unique=True)
    created_at: datetime = Field(default_factory=_utcnow, index=True, sa_column_kwargs=_created_column())
    updated_at: datetime = Field(default_factory=_utcnow, sa_column_kwargs=_updated_column())


class Application(SQLModel, table=True):
    """An enrollment application; `data` holds the form payload as JSON text."""
    __tablename__ = "applications"

    id: Optional[int] = Field(default=None, primary_key=True)
    application_number: str = Field(max_length=50, nullable=False, unique=True)
    student_id: Optional[int] = Field(default=None, foreign_key="students.id")
    center_id: Optional[int] = Field(default=None, foreign_key="centers.id")
    data: Optional[str] = Field(default=None, sa_column=Column(Text))
    status: str = Field(default="pending", max_length=50, sa_column_kwargs={"server_default": "pending"})
    created_at: datetime = Field(default_factory=_utcnow, index=True, sa_column_kwargs=_created_column())
    updated_at: datetime = Field(default_factory=_utcnow, sa_column_kwargs=_updated_column())


class Mark(SQLModel, table=True):
    """A subject score for a student."""
    __tablename__ = "marks"

    id: Optional[int] = Field(default=None, primary_key=True)
    student_id: Optional[int] = Field(default=None, foreign_key="students.id")
    subject: str = Field(max_length=255, nullable=False)
    marks: Optional[int] = None
    grade: Optional[str] = Field(default=None, max_length=10)
    center_id: Optional[int] = Field(default=None, foreign_key="centers.id")
    created_at: datetime = Field(default_factory=_utcnow, index=True, sa_column_kwargs=_created_column())
    updated_at: datetime = Field(default_factory=_utcnow, sa_column_kwargs=_updated_column())


class Admin(SQLModel, table=True):
    __tablename__ = "admins"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255, nullable=False)
    email: str = Field(max_length=255, nullable=False, unique=True)
    password: str = Field(max_length=255, nullable=False)
    created_at: datetime = Field(default_factory=_utcnow, sa_column_kwargs=_created_column())
