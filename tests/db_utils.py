from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url

_TERMINATE_SESSIONS = text(
    """
    SELECT pg_terminate_backend(pid)
    FROM pg_stat_activity
    WHERE datname = :db_name
    """
)


def _admin_engine(base_url: str):
    admin_url = make_url(base_url).set(database="postgres")
    return create_engine(admin_url, isolation_level="AUTOCOMMIT", future=True)


@contextmanager
def scratch_postgres_database(base_url: str) -> Iterator[str]:
    """Yield the URL of a throwaway database on the server behind ``base_url``."""
    db_name = f"craftops_test_{uuid.uuid4().hex[:12]}"
    engine = _admin_engine(base_url)
    with engine.connect() as conn:
        conn.execute(text(f'CREATE DATABASE "{db_name}"'))
    try:
        yield str(make_url(base_url).set(database=db_name))
    finally:
        with engine.connect() as conn:
            conn.execute(_TERMINATE_SESSIONS, {"db_name": db_name})
            conn.execute(text(f'DROP DATABASE IF EXISTS "{db_name}"'))
        engine.dispose()
