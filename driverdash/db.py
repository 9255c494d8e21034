# driverdash/db.py
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, declarative_base
from driverdash.config import settings


def _engine_kwargs(url: str) -> dict:
    kwargs = {"pool_pre_ping": True, "future": True}
    if url.startswith("sqlite"):
        # Requests are served from a threadpool
        kwargs["connect_args"] = {"check_same_thread": False}
        db_path = make_url(url).database
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    return kwargs


# Create engine
engine = create_engine(settings.sqlalchemy_url, **_engine_kwargs(settings.sqlalchemy_url))

# Session factory
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False
)

# Base for models
Base = declarative_base()


# Dependency for FastAPI routes
def get_db():
    db = SessionLocal()
    try:
        yield db
    except SQLAlchemyError:
        db.rollback()
        raise
    finally:
        db.close()
