from datetime import datetime, timezone
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine, event, make_url
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Database:
    """
    Owns the SQLAlchemy engine and session factory.

    Built once when the application starts and disposed on shutdown; request
    handlers reach it through get_db instead of a module-level engine.
    """

    def __init__(self, url: str, **engine_kwargs):
        self.url = make_url(url)
        # 127.0.0.1 instead of localhost avoids Windows/Docker resolution issues
        if self.url.host == "localhost":
            self.url = self.url.set(host="127.0.0.1")

        if self.url.get_backend_name() == "sqlite":
            engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
        else:
            engine_kwargs.setdefault("pool_pre_ping", True)

        self.engine = create_engine(self.url, **engine_kwargs)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        if self.engine.url.get_backend_name() == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

    def session(self) -> Session:
        return self.SessionLocal()

    def init_db(self):
        """
        Creates all tables defined in the metadata.
        This replaces Alembic for simple setups.
        """
        # Import models here to ensure they are registered with Base
        from digital_menu import models  # noqa

        Base.metadata.create_all(bind=self.engine)

    def dispose(self):
        self.engine.dispose()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Yields a session from the application Database and closes it afterwards.
    Usage: db: Session = Depends(get_db)
    """
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
