"""Database store handle.

`Database` owns the SQLAlchemy engine (and therefore the connection pool)
for the whole process. It is constructed once, connected during app
startup and handed to the request handlers through FastAPI dependencies.
A store that never connected leaves the API in "database unavailable"
mode instead of stopping the process.
"""

import enum
import logging
from typing import Iterator, Optional

from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine, select

from . import models
from .config import SEED_ADMIN_EMAIL, SEED_ADMIN_NAME, SEED_ADMIN_PASSWORD

logger = logging.getLogger("imtti.db")


class ConnectionState(enum.Enum):
    UNCONNECTED = "unconnected"
    CONNECTED = "connected"
    FAILED = "failed"


class Database:
    """Pooled connection to the institute database."""

    def __init__(self, url: Optional[str], pool_size: int = 10):
        self.url = url
        self.pool_size = pool_size
        self.engine: Optional[Engine] = None
        self._state = ConnectionState.UNCONNECTED

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    def _engine_options(self) -> dict:
        url = make_url(self.url)
        if url.get_backend_name() == "sqlite":
            return {"connect_args": {"check_same_thread": False}}
        options = {"pool_size": self.pool_size, "pool_pre_ping": True}
        if url.get_backend_name() == "mysql":
            # TLS on, server certificate and hostname not verified
            options["connect_args"] = {
                "ssl_disabled": False,
                "ssl_verify_cert": False,
                "ssl_verify_identity": False,
            }
        return options

    def connect(self) -> ConnectionState:
        """Build the pool and check that one connection can be opened.

        Never raises: any failure is logged and leaves the store in the
        `FAILED` state.
        """
        if self._state is ConnectionState.CONNECTED:
            return self._state
        if not self.url:
            logger.error("Database connection failed: no database credentials configured")
            self._state = ConnectionState.FAILED
            return self._state
        try:
            engine = create_engine(self.url, echo=False, **self._engine_options())
            with engine.connect():
                pass
        except Exception:
            logger.exception("Database connection failed")
            logger.warning("Running without database; data endpoints will answer 503")
            self._state = ConnectionState.FAILED
            return self._state
        self.engine = engine
        self._state = ConnectionState.CONNECTED
        logger.info("Database connected successfully")
        return self._state

    def create_schema(self) -> bool:
        """Create missing tables and seed the default admin.

        Idempotent. Returns False (after logging) when the store rejects
        the DDL or the seed insert; the caller keeps running either way.
        """
        if not self.is_connected:
            logger.warning("Skipping schema creation: database not connected")
            return False
        try:
            SQLModel.metadata.create_all(self.engine)
            self._seed_admin()
        except SQLAlchemyError:
            logger.exception("Error creating tables")
            return False
        logger.info("Database tables created successfully")
        return True

    def _seed_admin(self):
        with Session(self.engine) as session:
            stmt = select(models.Admin.id).where(models.Admin.email == SEED_ADMIN_EMAIL)
            if session.exec(stmt).first() is not None:
                return
            session.add(models.Admin(
                name=SEED_ADMIN_NAME,
                email=SEED_ADMIN_EMAIL,
                password=SEED_ADMIN_PASSWORD,
            ))
            session.commit()
            logger.info("Seeded default admin %s", SEED_ADMIN_EMAIL)

    def session(self) -> Iterator[Session]:
        """Yield a `Session` from the pool; closed when the caller is done."""
        with Session(self.engine) as session:
            yield session

    def dispose(self):
        """Release pooled connections."""
        if self.engine is not None:
            self.engine.dispose()
