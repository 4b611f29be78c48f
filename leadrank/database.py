"""
Record store: engine, session factory and the declarative base.

SQLite for local dev and tests, Postgres in production. Schema is owned by
Alembic (alembic/versions); nothing here creates tables.
"""
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from leadrank.config import DATABASE_URL


class Base(DeclarativeBase):
    pass


def normalize_url(raw_url: str) -> str:
    """SQLAlchemy 2.x only accepts the postgresql:// scheme."""
    if raw_url.startswith('postgres://'):
        return 'postgresql://' + raw_url[len('postgres://'):]
    return raw_url


def _engine_kwargs(url: str) -> dict:
    if url.startswith('sqlite'):
        return {'connect_args': {'check_same_thread': False}}
    return {'pool_pre_ping': True, 'pool_size': 5, 'max_overflow': 10}


url = normalize_url(DATABASE_URL)
engine = create_engine(url, **_engine_kwargs(url))

if engine.dialect.name == 'sqlite':
    @event.listens_for(engine, 'connect')
    def _sqlite_foreign_keys(dbapi_connection, connection_record):
        # ranking_results → leads / ranking_runs must hold on SQLite too
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()

SessionLocal = sessionmaker(bind=engine)


def get_session():
    """Return a new DB session. Callers close it."""
    return SessionLocal()


def init_models():
    """Import every model so Base.metadata knows about all tables."""
    import importlib
    importlib.import_module('leadrank.models.lead')
    importlib.import_module('leadrank.models.ranking_run')
    importlib.import_module('leadrank.models.ranking_result')
    return Base.metadata
