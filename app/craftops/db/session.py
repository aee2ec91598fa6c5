import time

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from app.craftops.core.config import settings
from app.craftops.core.db_timing import add_db_time, get_db_time_ms


def _build_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite"):
        # SQLite ships with FK enforcement off for every new connection.
        sqlite_engine = create_engine(
            database_url,
            future=True,
            connect_args={"check_same_thread": False, "timeout": settings.SQLITE_BUSY_TIMEOUT_SECONDS},
        )

        @event.listens_for(sqlite_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return sqlite_engine
    return create_engine(database_url, future=True, pool_pre_ping=True)


engine = _build_engine(settings.DATABASE_URL)


@event.listens_for(engine, "before_cursor_execute")
def _start_query_clock(conn, cursor, statement, parameters, context, executemany):
    if get_db_time_ms() is not None:
        conn.info.setdefault("query_started", []).append(time.perf_counter())


@event.listens_for(engine, "after_cursor_execute")
def _stop_query_clock(conn, cursor, statement, parameters, context, executemany):
    started = conn.info.get("query_started")
    if get_db_time_ms() is None or not started:
        return
    add_db_time((time.perf_counter() - started.pop()) * 1000)


SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def get_db():
    """Request-scoped session; anything left uncommitted by a failing handler is rolled back."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
