"""
SHOPSEED — Shared database engine helper.
Provides an engine factory and a connection-test function so the runner
can report a reachable or unreachable store before seeding starts.
"""

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError

import config


def get_engine(url: str | None = None) -> Engine:
    """Return a SQLAlchemy engine for the target store."""
    url = url or config.DATABASE_URL
    kwargs = {"echo": False, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        kwargs["pool_recycle"] = 300
        kwargs["connect_args"] = {"connect_timeout": 5}
    return create_engine(url, **kwargs)


def ping(engine: Engine) -> None:
    """Run a no-op query; raises the driver error if the store is down."""
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def check_connection(engine: Engine) -> bool:
    """Return True if the database is reachable, False otherwise."""
    try:
        ping(engine)
        return True
    except DBAPIError:
        return False
