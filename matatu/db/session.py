from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from matatu.core.config_env import settings
from matatu.core.errors import DependencyError


def make_engine(url: str):
    if url.startswith("sqlite"):
        # local/test runs: one shared in-memory connection, FK cascades on
        eng = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            future=True,
        )

        @event.listens_for(eng, "connect")
        def _sqlite_fk_on(dbapi_conn, _record):
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON")
            cur.close()

        return eng
    return create_engine(url, pool_pre_ping=True, future=True)


engine = make_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit(db) -> None:
    """Commits, or rolls back and reports the datastore as the failing dependency."""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise DependencyError("Database operation failed") from e
