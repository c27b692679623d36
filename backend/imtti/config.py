"""Application settings and validation."""

import os
from pathlib import Path
from typing import Optional
from urllib.parse import quote_plus

SEED_ADMIN_NAME = "IMTTI Administrator"
SEED_ADMIN_EMAIL = "admin@imtti.com"
SEED_ADMIN_PASSWORD = "admin123"

STATIC_ROOT = Path(__file__).resolve().parent.parent / "static"


class Settings:
    PORT: int
    MYSQL_HOST: Optional[str]
    MYSQL_USER: Optional[str]
    MYSQL_PASSWORD: Optional[str]
    MYSQL_DATABASE: Optional[str]
    DATABASE_URL: Optional[str]
    DB_POOL_SIZE: int
    LOG_LEVEL: str
    STATIC_DIR: Path
    ALLOW_DEV_CORS: bool

    def __init__(self):
        self.PORT = int(os.getenv("PORT", "3000"))
        self.MYSQL_HOST = os.getenv("MYSQL_HOST") or None
        self.MYSQL_USER = os.getenv("MYSQL_USER") or None
        self.MYSQL_PASSWORD = os.getenv("MYSQL_PASSWORD")
        self.MYSQL_DATABASE = os.getenv("MYSQL_DATABASE") or None
        self.DATABASE_URL = os.getenv("DATABASE_URL") or None
        self.DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "10"))
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.STATIC_DIR = Path(os.getenv("STATIC_DIR", str(STATIC_ROOT))).expanduser().resolve()
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self._validate()

    def _validate(self):
        if not 0 < self.PORT < 65536:
            raise RuntimeError(f"PORT must be between 1 and 65535, got {self.PORT}")
        if self.DB_POOL_SIZE < 1:
            raise RuntimeError("DB_POOL_SIZE must be at least 1")

    def database_url(self) -> Optional[str]:
        """Return the SQLAlchemy URL for the store, or `None` if unconfigured.

        `DATABASE_URL` wins when set. Otherwise the MySQL URL is assembled
        from the individual credentials; host, user and database name are
        required, the password may be empty.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if not (self.MYSQL_HOST and self.MYSQL_USER and self.MYSQL_DATABASE):
            return None
        password = quote_plus(self.MYSQL_PASSWORD or "")
        return (
            f"mysql+mysqlconnector://{quote_plus(self.MYSQL_USER)}:{password}"
            f"@{self.MYSQL_HOST}/{self.MYSQL_DATABASE}"
        )


settings = Settings()
