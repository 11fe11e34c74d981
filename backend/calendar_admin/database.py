"""SQLAlchemy engine, session factory and declarative Base."""

from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from calendar_admin.config import settings

Base = declarative_base()


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    # Built lazily so the JSON backend runs without any database settings.
    url = settings.database_url()
    connect_args = {"check_same_thread": False} if url.get_backend_name() == "sqlite" else {}
    return create_engine(url, connect_args=connect_args, pool_pre_ping=True)


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def get_db():
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()
