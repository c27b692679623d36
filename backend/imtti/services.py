"""Business logic services used by HTTP controllers.

Services turn request payloads into rows and rows into JSON-ready dicts.
They do no validation beyond type coercion: missing columns are inserted
as NULL and the database enforces NOT NULL, UNIQUE and foreign keys.
"""

import json
from datetime import date
from typing import Any, Dict, List, Optional

from sqlmodel import Session, SQLModel

from . import models, repositories, schemas


def row_to_dict(row: SQLModel) -> Dict[str, Any]:
    """Return the column values of `row` as a plain dict."""
    return row.model_dump()


def application_to_dict(row: models.Application) -> Dict[str, Any]:
    """Like `row_to_dict`, with the stored JSON text decoded back."""
    out = row.model_dump()
    if out.get("data") is not None:
        try:
            out["data"] = json.loads(out["data"])
        except ValueError:
            pass
    return out


class CenterService:
    def __init__(self, session: Session):
        self.repo = repositories.CenterRepository(session)

    def list(self) -> List[Dict[str, Any]]:
        return [row_to_dict(c) for c in self.repo.list_newest_first()]

    def create(self, payload: schemas.CenterIn) -> models.Center:
        return self.repo.create(models.Center(**payload.model_dump()))


class StudentService:
    def __init__(self, session: Session):
        self.repo = repositories.StudentRepository(session)

    def list(self) -> List[Dict[str, Any]]:
        return [row_to_dict(s) for s in self.repo.list_newest_first()]

    def create(self, payload: schemas.StudentIn) -> models.Student:
        return self.repo.create(models.Student(**payload.model_dump()))


class ApplicationService:
    """Applications store their form `data` as JSON text."""
    def __init__(self, session: Session):
        self.repo = repositories.ApplicationRepository(session)

    def list(self) -> List[Dict[str, Any]]:
        return [application_to_dict(a) for a in self.repo.list_newest_first()]

    def create(self, payload: schemas.ApplicationIn) -> models.Application:
        values = payload.model_dump()
        values["data"] = json.dumps(values["data"]) if values["data"] is not None else None
        values["status"] = values["status"] or "pending"
        return self.repo.create(models.Application(**values))


class MarkService:
    def __init__(self, session: Session):
        self.repo = repositories.MarkRepository(session)

    def list(self) -> List[Dict[str, Any]]:
        return [row_to_dict(m) for m in self.repo.list_newest_first()]

    def create(self, payload: schemas.MarkIn) -> models.Mark:
        return self.repo.create(models.Mark(**payload.model_dump()))


class AdminService:
    def __init__(self, session: Session):
        self.repo = repositories.AdminRepository(session)

    def list(self) -> List[Dict[str, Any]]:
        return [row_to_dict(a) for a in self.repo.list_all()]


def _parse_iso_date(value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


class AuthService:
    """Plaintext credential checks for the three roles.

    Each method returns the matching row as a dict, or `None` when nothing
    matches. A missing credential never matches, just as a SQL `= NULL`
    comparison never does.
    """
    def __init__(self, session: Session):
        self.session = session

    def authenticate_admin(self, payload: schemas.EmailLogin) -> Optional[Dict[str, Any]]:
        if payload.email is None or payload.password is None:
            return None
        admin = repositories.AdminRepository(self.session).find_by_credentials(payload.email, payload.password)
        return row_to_dict(admin) if admin else None

    def authenticate_center(self, payload: schemas.EmailLogin) -> Optional[Dict[str, Any]]:
        """Match email and password; inactive centers never authenticate."""
        if payload.email is None or payload.password is None:
            return None
        center = repositories.CenterRepository(self.session).find_active_by_credentials(payload.email, payload.password)
        return row_to_dict(center) if center else None

    def authenticate_student(self, payload: schemas.StudentLogin) -> Optional[Dict[str, Any]]:
        """Match registration id and date of birth (students have no password)."""
        dob = _parse_iso_date(payload.date_of_birth)
        if payload.registration_id is None or dob is None:
            return None
        student = repositories.StudentRepository(self.session).find_by_login(payload.registration_id, dob)
        return row_to_dict(student) if student else None
