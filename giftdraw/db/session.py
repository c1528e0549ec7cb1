from __future__ import annotations

from contextlib import contextmanager

from loguru import logger
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False)

SQLITE_BUSY_TIMEOUT_MS = 5000


def _apply_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        # cascades on draw_assignments and active_draw rely on this
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT_MS}")
    finally:
        cursor.close()


def init_engine(database_url: str):
    is_sqlite = database_url.startswith("sqlite")
    engine = create_engine(database_url, pool_pre_ping=not is_sqlite, future=True)
    if is_sqlite:
        event.listen(engine, "connect", _apply_sqlite_pragmas)
    SessionLocal.configure(bind=engine)
    logger.bind(url=engine.url.render_as_string(hide_password=True)).info("Database engine ready")
    return engine


def _ensure_initialized() -> None:
    if SessionLocal.kw.get("bind") is None:
        raise RuntimeError("Database engine not initialized. Call init_engine() before use.")


@contextmanager
def get_session():
    _ensure_initialized()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
