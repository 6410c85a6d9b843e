from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from .config import settings


def make_engine(url: str, foreign_keys: bool = True, **kwargs):
    """Create an engine; SQLite gets cross-thread access and, by default, foreign keys."""
    if not url.startswith("sqlite"):
        return create_engine(url, **kwargs)

    # check_same_thread=False: sessions are used from FastAPI and asyncio.to_thread workers
    engine = create_engine(url, connect_args={"check_same_thread": False}, **kwargs)
    if not foreign_keys:
        return engine

    @event.listens_for(engine, "connect")
    def enable_sqlite_fk(dbapi_connection, _):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


engine = make_engine(settings.resolved_database_url)

# SessionLocal is the only way request handlers and stores talk to the DB
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


# FastAPI dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
