"""Repository classes encapsulating database operations.

Each repository is small and focused on a single table. Every method runs
exactly one statement; creates commit immediately and return the managed
instance with its generated id.
"""

from typing import List, Optional, Type, TypeVar
from datetime import date
from sqlmodel import Session, SQLModel, select
from . import models

RowT = TypeVar("RowT", bound=SQLModel)


class _TableRepository:
    """Shared list/create for tables ordered by `created_at`."""
    model: Type[SQLModel]

    def __init__(self, session: Session):
        self.session = session

    def list_newest_first(self) -> List[SQLModel]:
        """Return every row, most recently created first."""
        stmt = select(self.model).order_by(self.model.created_at.desc(), self.model.id.desc())
        return self.session.exec(stmt).all()

    def create(self, row: RowT) -> RowT:
        """Persist a new row and return the managed instance."""
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return row


class CenterRepository(_TableRepository):
    model = models.Center

    def find_active_by_credentials(self, email: Optional[str], password: Optional[str]) -> Optional[models.Center]:
        """Return the first active center whose email and password match."""
        stmt = select(models.Center).where(
            models.Center.email == email,
            models.Center.password == password,
            models.Center.is_active == True,  # noqa: E712
        ).order_by(models.Center.id)
        return self.session.exec(stmt).first()


class StudentRepository(_TableRepository):
    model = models.Student

    def find_by_login(self, registration_id: Optional[str], date_of_birth: Optional[date]) -> Optional[models.Student]:
        """Return the first student with this registration id and birth date."""
        stmt = select(models.Student).where(
            models.Student.registration_id == registration_id,
            models.Student.date_of_birth == date_of_birth,
        ).order_by(models.Student.id)
        return self.session.exec(stmt).first()


class ApplicationRepository(_TableRepository):
    model = models.Application


class MarkRepository(_TableRepository):
    model = models.Mark


class AdminRepository:
    """Admins are seeded, never created through the API."""
    def __init__(self, session: Session):
        self.session = session

    def list_all(self) -> List[models.Admin]:
        """Return all admins in storage order."""
        return self.session.exec(select(models.Admin)).all()

    def find_by_credentials(self, email: Optional[str], password: Optional[str]) -> Optional[models.Admin]:
        """Return the first admin whose email and password match."""
        stmt = select(models.Admin).where(
            models.Admin.email == email,
            models.Admin.password == password,
        ).order_by(models.Admin.id)
        return self.session.exec(stmt).first()
