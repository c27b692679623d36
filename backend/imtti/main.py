"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the IMTTI institute backend.
Controllers are intentionally thin: they check that the database is
available, delegate to services, and return JSON responses.

Endpoints implemented:
- GET /api/test, GET /api/health
- GET|POST /api/centers
- GET|POST /api/students
- GET|POST /api/applications
- GET|POST /api/marks
- GET /api/admins
- POST /api/auth/admin, /api/auth/center, /api/auth/student
- GET /* (single-page app shell)
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional
import json
import logging
import time
import uuid

from fastapi import APIRouter, Body, Depends, FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from . import schemas, services
from .config import settings
from .database import Database

logger = logging.getLogger("imtti.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

UNAVAILABLE_MESSAGE = "Database not connected"
INVALID_CREDENTIALS = {"success": False, "message": "Invalid credentials"}


class StoreUnavailable(Exception):
    """Raised when a data endpoint is hit while the database is not connected."""


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_session(database: Database = Depends(get_database)):
    """Yield a pooled `Session`, or refuse with 503 when there is no pool."""
    if not database.is_connected:
        raise StoreUnavailable()
    yield from database.session()


def _error_message(exc: Exception) -> str:
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig)
    return str(exc)


def _store_failure(exc: Exception) -> JSONResponse:
    logger.warning("store failure: %s", _error_message(exc))
    return JSONResponse(status_code=500, content={"error": _error_message(exc)})


def _database_label(request: Request) -> str:
    return "connected" if get_database(request).is_connected else "disconnected"


def _ensure_json_compliant(body: Dict[str, Any]):
    # NaN/Infinity parse from the request but cannot be echoed back
    json.dumps(body, allow_nan=False)


def _create(service, payload_schema, body: Dict[str, Any]):
    """Insert one row and echo the request body with its new id.

    `ValueError` covers both pydantic's `ValidationError` and bodies that
    cannot be rendered as JSON; neither reaches the database.
    """
    try:
        _ensure_json_compliant(body)
        row = service.create(payload_schema.model_validate(body))
    except (ValueError, SQLAlchemyError) as exc:
        return _store_failure(exc)
    return {"id": row.id, **body}


router = APIRouter(prefix="/api")


@router.get("/test")
def test_route(request: Request):
    """Report that the server is up and whether the database is connected."""
    return {
        "message": "IMTTI Server is running!",
        "status": "success",
        "database": _database_label(request),
        "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
    }


@router.get("/health")
def health(request: Request):
    """Lightweight health check for uptime monitoring."""
    return {
        "status": "healthy",
        "message": "Server is running properly",
        "database": _database_label(request),
    }


# Centers

@router.get("/centers")
def list_centers(db: Session = Depends(get_session)):
    """List all centers, newest first."""
    try:
        return services.CenterService(db).list()
    except SQLAlchemyError as exc:
        return _store_failure(exc)


@router.post("/centers")
def create_center(body: Dict[str, Any] = Body(default_factory=dict), db: Session = Depends(get_session)):
    """Register a center and echo the request body with the new id.

    Duplicate emails are rejected by the database and reported as 500.
    """
    return _create(services.CenterService(db), schemas.CenterIn, body)


# Students

@router.get("/students")
def list_students(db: Session = Depends(get_session)):
    """List all students, newest first."""
    try:
        return services.StudentService(db).list()
    except SQLAlchemyError as exc:
        return _store_failure(exc)


@router.post("/students")
def create_student(body: Dict[str, Any] = Body(default_factory=dict), db: Session = Depends(get_session)):
    """Register a student. `center_id` is not checked against centers here."""
    return _create(services.StudentService(db), schemas.StudentIn, body)


# Applications

@router.get("/applications")
def list_applications(db: Session = Depends(get_session)):
    """List all applications, newest first, with `data` decoded."""
    try:
        return services.ApplicationService(db).list()
    except SQLAlchemyError as exc:
        return _store_failure(exc)


@router.post("/applications")
def create_application(body: Dict[str, Any] = Body(default_factory=dict), db: Session = Depends(get_session)):
    """Store an application.

    The echoed body is what the client sent, so a defaulted `status` of
    "pending" only shows up when listing.
    """
    return _create(services.ApplicationService(db), schemas.ApplicationIn, body)


# Marks

@router.get("/marks")
def list_marks(db: Session = Depends(get_session)):
    try:
        return services.MarkService(db).list()
    except SQLAlchemyError as exc:
        return _store_failure(exc)


@router.post("/marks")
def create_mark(body: Dict[str, Any] = Body(default_factory=dict), db: Session = Depends(get_session)):
    return _create(services.MarkService(db), schemas.MarkIn, body)


# Admins

@router.get("/admins")
def list_admins(db: Session = Depends(get_session)):
    """List admins. Admins are seeded at startup; there is no create route."""
    try:
        return services.AdminService(db).list()
    except SQLAlchemyError as exc:
        return _store_failure(exc)


# Authentication

def _auth_response(user: Optional[Dict[str, Any]]):
    if user is None:
        return JSONResponse(status_code=401, content=INVALID_CREDENTIALS)
    return {"success": True, "user": user}


@router.post("/auth/admin")
def auth_admin(body: Dict[str, Any] = Body(default_factory=dict), db: Session = Depends(get_session)):
    """Check admin email/password against the admins table."""
    try:
        user = services.AuthService(db).authenticate_admin(schemas.EmailLogin.model_validate(body))
    except (ValidationError, SQLAlchemyError) as exc:
        return _store_failure(exc)
    return _auth_response(user)


@router.post("/auth/center")
def auth_center(body: Dict[str, Any] = Body(default_factory=dict), db: Session = Depends(get_session)):
    """Check center email/password; only active centers may log in."""
    try:
        user = services.AuthService(db).authenticate_center(schemas.EmailLogin.model_validate(body))
    except (ValidationError, SQLAlchemyError) as exc:
        return _store_failure(exc)
    return _auth_response(user)


@router.post("/auth/student")
def auth_student(body: Dict[str, Any] = Body(default_factory=dict), db: Session = Depends(get_session)):
    """Log a student in with registration id and date of birth."""
    try:
        user = services.AuthService(db).authenticate_student(schemas.StudentLogin.model_validate(body))
    except (ValidationError, SQLAlchemyError) as exc:
        return _store_failure(exc)
    return _auth_response(user)


def serve_frontend(full_path: str, request: Request):
    """Serve a static asset, or the SPA entry document for client-side routes."""
    static_root: Path = request.app.state.static_dir
    if full_path:
        candidate = (static_root / full_path).resolve()
        if candidate.is_relative_to(static_root) and candidate.is_file():
            return FileResponse(candidate)
    index = static_root / "index.html"
    if index.is_file():
        return FileResponse(index)
    return JSONResponse(status_code=404, content={"error": "Not found"})


@asynccontextmanager
async def lifespan(app: FastAPI):
    database: Database = app.state.database
    state = await run_in_threadpool(database.connect)
    if database.is_connected:
        await run_in_threadpool(database.create_schema)
    logger.info("IMTTI server started (database %s)", state.value)
    yield
    database.dispose()


def _request_log_fields(request: Request, started: float, **extra) -> str:
    fields = {
        "request_id": request.state.request_id,
        "path": request.url.path,
        "method": request.method,
        **extra,
        "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
        "client": request.client.host if request.client else "unknown",
    }
    return json.dumps(fields, ensure_ascii=True)


async def request_context_middleware(request: Request, call_next):
    """Tag every response with `X-Request-ID` and log one line per API call."""
    request.state.request_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("request_failed %s", _request_log_fields(request, started))
        raise
    response.headers["X-Request-ID"] = request.state.request_id
    if request.url.path.startswith("/api"):
        logger.info("request_done %s", _request_log_fields(request, started, status_code=response.status_code))
    return response


def create_app(
    database: Optional[Database] = None,
    static_dir: Optional[Path] = None,
    allow_cors: Optional[bool] = None,
) -> FastAPI:
    """Build the application around an explicitly constructed `Database`.

    The database is connected (and its schema ensured) by the app lifespan,
    so nothing touches the network until the server starts.
    """
    if database is None:
        database = Database(settings.database_url(), pool_size=settings.DB_POOL_SIZE)
    app = FastAPI(title="IMTTI Institute API", lifespan=lifespan)
    app.state.database = database
    app.state.static_dir = Path(static_dir or settings.STATIC_DIR).resolve()

    if allow_cors is None:
        allow_cors = settings.ALLOW_DEV_CORS
    if allow_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.middleware("http")(request_context_middleware)

    @app.exception_handler(StoreUnavailable)
    async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
        return JSONResponse(status_code=503, content={"error": UNAVAILABLE_MESSAGE})

    @app.exception_handler(RequestValidationError)
    async def malformed_body_handler(request: Request, exc: RequestValidationError):
        # API bodies that are not JSON objects fail like any other bad insert
        if not request.url.path.startswith("/api"):
            return await request_validation_exception_handler(request, exc)
        message = "; ".join(err.get("msg", "invalid request") for err in exc.errors())
        logger.warning("malformed request body on %s: %s", request.url.path, message)
        return JSONResponse(status_code=500, content={"error": message or "invalid request body"})

    app.include_router(router)
    # catch-all goes last so it never shadows an API route
    app.add_api_route("/{full_path:path}", serve_frontend, methods=["GET"], include_in_schema=False)
    return app


app = create_app()
