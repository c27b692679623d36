"""Command line entry point.

`python -m imtti serve` runs the API under uvicorn on `PORT`;
`python -m imtti init-db` creates the tables and seed admin, then exits.
"""

import argparse
import logging
import sys

from .config import settings
from .database import Database


def _database() -> Database:
    return Database(settings.database_url(), pool_size=settings.DB_POOL_SIZE)


def init_db() -> int:
    """Connect once, ensure the schema, and report the outcome as an exit code."""
    database = _database()
    database.connect()
    if not database.is_connected:
        print("Database not connected; nothing created.", file=sys.stderr)
        return 1
    try:
        ok = database.create_schema()
    finally:
        database.dispose()
    print("Schema ready." if ok else "Schema creation failed; see log.")
    return 0 if ok else 1


def serve(host: str, port: int) -> int:
    import uvicorn
    from .main import create_app

    app = create_app(_database())
    logging.getLogger("imtti.api").info("IMTTI server running on port %s", port)
    uvicorn.run(app, host=host, port=port, log_level=settings.LOG_LEVEL.lower())
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="imtti", description="IMTTI institute backend")
    sub = parser.add_subparsers(dest="command")
    serve_parser = sub.add_parser("serve", help="run the HTTP server (default)")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=settings.PORT)
    sub.add_parser("init-db", help="create tables and seed the default admin")
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.LOG_LEVEL)
    if args.command == "init-db":
        return init_db()
    if args.command == "serve":
        return serve(args.host, args.port)
    return serve("0.0.0.0", settings.PORT)


if __name__ == "__main__":
    sys.exit(main())
