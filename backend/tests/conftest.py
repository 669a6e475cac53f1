import copy
import os
import sys
from datetime import datetime, timedelta, timezone

import pytest

# Ensure the backend root (containing the `housecup` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from housecup import create_app, db, socketio
from housecup.services.competition import domain
from housecup.services.competition.lifecycle import EventLifecycle
from housecup.services.competition.store import DELETE_FIELD, Repository, new_id


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    WTF_CSRF_ENABLED = False
    LOG_LEVEL = 'DEBUG'
    ADMIN_USERNAME = 'admin'
    ADMIN_PASSWORD = 'secret'
    DEFAULT_PLACEMENT_POINTS = {1: 5, 2: 3, 3: 1}
    CORS_ORIGINS = ['http://localhost:5173']


# ---- In-memory store ----

class MemoryRepository(Repository):
    """Dict-backed stand-in for the SQL repositories."""

    def __init__(self, record_type, order_by=None):
        super().__init__()
        self.record_type = record_type
        self.order_by = order_by
        self.records = {}
        self.writes = 0

    def get_all(self):
        records = [copy.deepcopy(r) for r in self.records.values()]
        if self.order_by:
            records.sort(key=lambda r: getattr(r, self.order_by))
        return records

    def get_by_id(self, record_id):
        record = self.records.get(record_id)
        return copy.deepcopy(record) if record else None

    def create(self, data):
        fields = {k: v for k, v in data.items() if v is not DELETE_FIELD}
        record_id = fields.pop('id', None) or new_id()
        self.records[record_id] = self.record_type(id=record_id, **copy.deepcopy(fields))
        self.writes += 1
        self.notify()
        return record_id

    def update(self, record_id, changes):
        record = self.records[record_id]
        for key, value in changes.items():
            setattr(record, key, None if value is DELETE_FIELD else copy.deepcopy(value))
        self.writes += 1
        self.notify()

    def delete(self, record_id):
        del self.records[record_id]
        self.writes += 1
        self.notify()


class StepClock:
    """Deterministic clock: each call advances one minute."""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 6, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        self.now = self.now + timedelta(minutes=1)
        return self.now


@pytest.fixture()
def clock():
    return StepClock()


@pytest.fixture()
def event_repo():
    return MemoryRepository(domain.Event, order_by='name')


@pytest.fixture()
def house_repo():
    return MemoryRepository(domain.House, order_by='name')


@pytest.fixture()
def player_repo():
    return MemoryRepository(domain.Player, order_by='full_name')


@pytest.fixture()
def category_repo():
    return MemoryRepository(domain.Category, order_by='name')


@pytest.fixture()
def lifecycle(event_repo, clock):
    return EventLifecycle(event_repo, clock=clock)


# ---- Flask app ----

@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import housecup.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def admin_client(flask_app):
    from housecup.models import User
    admin = User(username=TestConfig.ADMIN_USERNAME)
    admin.set_password(TestConfig.ADMIN_PASSWORD)
    db.session.add(admin)
    db.session.commit()

    test_client = flask_app.test_client()
    res = test_client.post('/login', json={
        'username': TestConfig.ADMIN_USERNAME,
        'password': TestConfig.ADMIN_PASSWORD,
    })
    assert res.status_code == 200
    return test_client


@pytest.fixture()
def categories(flask_app):
    from housecup.competition import get_competition
    registry = get_competition().categories
    return {
        name: registry.ensure(name, label)
        for name, label in [('kids', 'Kids'), ('adult-men', 'Adult Men')]
    }


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass
