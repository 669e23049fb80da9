# obra/db/session.py
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from obra.db.base import Base
from obra.db.init_db import import_models


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ships with FK enforcement off; cascades depend on it
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(db_url: str, *, echo: bool = False) -> Engine:
    if not db_url:
        raise RuntimeError("DATABASE_URL not set")

    connect_args = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    engine = create_engine(db_url, echo=echo, connect_args=connect_args)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


class Database:
    """
    Explicit persistence handle.

    One instance per application (or per test). Services never reach for it
    directly: they receive the Session it hands out.
    """

    def __init__(self, db_url: str, *, echo: bool = False):
        self.url = db_url
        self.engine = build_engine(db_url, echo=echo)
        self._session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
        )

    def session(self) -> Session:
        return self._session_factory()

    def create_all(self) -> None:
        import_models()
        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        import_models()
        Base.metadata.drop_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()
