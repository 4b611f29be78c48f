"""Shared test fixtures."""
import pytest
from unittest.mock import patch
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from leadrank.database import Base, init_models


class FakeRedis:
    """Minimal in-memory Redis fake (string keys + hashes + pipelines)."""

    def __init__(self):
        self.get_store = {}
        self.hash_store = {}

    def get(self, key):
        return self.get_store.get(key)

    def set(self, key, value):
        self.get_store[key] = str(value)

    def incr(self, key):
        val = int(self.get_store.get(key, 0)) + 1
        self.get_store[key] = str(val)
        return val

    def delete(self, *keys):
        for k in keys:
            self.get_store.pop(k, None)
            self.hash_store.pop(k, None)

    def hset(self, key, field, value):
        self.hash_store.setdefault(key, {})[field] = str(value)

    def hincrby(self, key, field, amount):
        h = self.hash_store.setdefault(key, {})
        h[field] = str(int(h.get(field, 0)) + amount)

    def hgetall(self, key):
        return dict(self.hash_store.get(key, {}))

    def pipeline(self):
        return FakePipeline(self)


class FakePipeline:
    """Queues commands and replays them on execute()."""

    def __init__(self, redis):
        self._redis = redis
        self._ops = []

    def __getattr__(self, name):
        def queue(*args):
            self._ops.append((name, args))
            return self
        return queue

    def execute(self):
        for name, args in self._ops:
            getattr(self._redis, name)(*args)
        self._ops = []


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with schema created, shared by every session."""
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    init_models()
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    """Session for arranging and inspecting rows inside a test."""
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(autouse=True)
def patch_get_session(session_factory):
    """Route every module's get_session() to fresh sessions on the test engine."""
    targets = [
        'leadrank.database.get_session',
        'leadrank.ranking.controller.get_session',
        'leadrank.services.leads_io.get_session',
    ]
    patchers = [patch(t, side_effect=lambda: session_factory()) for t in targets]
    for p in patchers:
        p.start()
    yield session_factory
    for p in patchers:
        p.stop()


@pytest.fixture(autouse=True)
def fresh_ranking_config():
    """Each test loads ranking_config.yaml from scratch."""
    from leadrank.ranking.ranking_config import reset_cache
    reset_cache()
    yield
    reset_cache()


@pytest.fixture(autouse=True)
def no_sleep():
    """Pacing never really sleeps in tests."""
    with patch('leadrank.ranking.pacing.time.sleep') as mock_sleep:
        yield mock_sleep


@pytest.fixture(autouse=True)
def breaker_registry(fake_redis):
    """Breakers live on fake Redis; registry cleared between tests."""
    from leadrank.services.circuit_breaker import _registry
    _registry.clear()
    with patch('leadrank.extensions.redis_client', fake_redis):
        yield _registry
    _registry.clear()


@pytest.fixture
def app(fake_redis):
    """Flask test app."""
    from leadrank import create_app
    app = create_app()
    app.config['TESTING'] = True
    yield app


@pytest.fixture
def client(app):
    """Flask test client."""
    with app.test_client() as c:
        yield c


@pytest.fixture
def make_lead(db_session):
    """Factory fixture — inserts a Lead row and returns its id."""
    from leadrank.models.lead import Lead

    def _make(**overrides):
        defaults = dict(
            account_name='Acme Robotics',
            lead_first_name='Sarah',
            lead_last_name='Chen',
            lead_job_title='VP of Sales',
            account_domain='acme.io',
            account_employee_range='51-200',
            account_industry='Manufacturing',
        )
        defaults.update(overrides)
        lead = Lead(**defaults)
        db_session.add(lead)
        db_session.commit()
        return lead.id
    return _make
