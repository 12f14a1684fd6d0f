"""
Engine and session factory for the back office database.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from config.settings import settings
from backoffice.models import Base


def make_session_factory(engine: Engine) -> sessionmaker:
    # Explicit flushes only; ClientMerger depends on it
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


engine = create_engine(settings.DATABASE_URL, echo=settings.DEBUG)
SessionLocal = make_session_factory(engine)


def init_db(bind: Engine = engine):
    """Create missing tables (and the sqlite data directory)."""
    if bind is engine and settings.is_sqlite:
        settings.resolve_path(settings.DATA_DIR).mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(bind=bind)


def get_db():
    """Yield a session that is closed when the caller is done with it."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
