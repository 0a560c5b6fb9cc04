"""SQLite engine, schema upgrades and the ``get_session`` unit of work.

The engine is created on first use so importing Focusly never touches the
disk.  Tests swap it for an in-memory database with ``configure_engine``.
"""

import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.orm import sessionmaker, Session as OrmSession

from ..settings import APP_SUPPORT_DIR
from .models import Base

logger = logging.getLogger(__name__)

DB_PATH = APP_SUPPORT_DIR / "focusly.db"

_engine = None
_SessionFactory = None


def _build_engine(url: str):
    engine = create_engine(
        url,
        connect_args={"check_same_thread": False},
        echo=False,
    )
    if engine.url.database not in (None, "", ":memory:"):
        @event.listens_for(engine, "connect")
        def _set_wal(dbapi_connection, _record):
            # The timer writes while the UI reads statistics.
            dbapi_connection.execute("PRAGMA journal_mode = WAL")
    return engine


def get_engine():
    global _engine
    if _engine is None:
        APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
        _engine = _build_engine(f"sqlite:///{DB_PATH}")
    return _engine


def _get_session_factory():
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _SessionFactory


def configure_engine(url: str) -> None:
    """Point Focusly at *url* (tests use ``sqlite:///:memory:``)."""
    global _engine, _SessionFactory
    dispose_engine()
    _engine = _build_engine(url)


def dispose_engine() -> None:
    """Close pooled connections; the next use reopens the default database."""
    global _engine, _SessionFactory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None


def _add_missing_columns(engine) -> list[str]:
    """Bring tables from older versions up to the current models.

    Only nullable columns can be added in place; anything else is logged
    and left for a manual migration.  Returns ``table.column`` names added.
    """
    insp = inspect(engine)
    existing_tables = set(insp.get_table_names())
    added: list[str] = []

    with engine.connect() as conn:
        for table in Base.metadata.sorted_tables:
            if table.name not in existing_tables:
                continue
            present = {c["name"] for c in insp.get_columns(table.name)}
            for column in table.columns:
                if column.name in present:
                    continue
                if not column.nullable:
                    logger.warning(
                        "Cannot add NOT NULL column %s.%s to an existing table",
                        table.name, column.name,
                    )
                    continue
                col_type = column.type.compile(dialect=engine.dialect)
                conn.execute(text(
                    f'ALTER TABLE "{table.name}" ADD COLUMN "{column.name}" {col_type}'
                ))
                added.append(f"{table.name}.{column.name}")
        conn.commit()

    if added:
        logger.info("Upgraded database schema: added %s", ", ".join(added))
    return added


def init_db() -> None:
    """Create missing tables and upgrade existing ones."""
    engine = get_engine()
    Base.metadata.create_all(engine)
    _add_missing_columns(engine)
    logger.debug("Database ready at %s", engine.url)


@contextmanager
def get_session():
    """Yield a SQLAlchemy session; commit on success, rollback on error."""
    factory = _get_session_factory()
    session: OrmSession = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
