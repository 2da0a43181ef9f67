import os
import random
import sys
import pytest

# Ensure the project root (containing the top-level packages) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from config import Settings
from game import SessionLifecycle, TimerScheduler, Broadcaster
from lobby import SessionRegistry, ConnectionDirectory, Matchmaker


class RecordingBroadcaster(Broadcaster):
    """Keeps every outbound event instead of sending it."""

    def __init__(self):
        self.sent = []

    def send(self, connection_id, event, payload):
        self.sent.append((connection_id, event, payload))

    def events_for(self, connection_id, event=None):
        return [payload for cid, name, payload in self.sent
                if cid == connection_id and (event is None or name == event)]

    def names_for(self, connection_id):
        return [name for cid, name, _ in self.sent if cid == connection_id]

    def count(self, event):
        return sum(1 for _, name, _ in self.sent if name == event)

    def clear(self):
        self.sent = []


class ManualTasks:
    """Stands in for socketio.start_background_task; tasks run only when asked."""

    def __init__(self):
        self.pending = []

    def spawn(self, fn, *args, **kwargs):
        self.pending.append((fn, args, kwargs))

    def run_all(self):
        ran = 0
        while self.pending:
            fn, args, kwargs = self.pending.pop(0)
            fn(*args, **kwargs)
            ran += 1
        return ran


class TestConfig(Settings):
    TESTING = True
    SECRET_KEY = 'test-secret'
    ASYNC_MODE = 'threading'
    KEEPALIVE_URL = ''
    CORS_ORIGINS = '*'


@pytest.fixture()
def tasks():
    return ManualTasks()


@pytest.fixture()
def scheduler(tasks):
    return TimerScheduler(tasks.spawn, lambda seconds: None)


@pytest.fixture()
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture()
def registry():
    return SessionRegistry(rng=random.Random(1234))


@pytest.fixture()
def directory():
    return ConnectionDirectory()


@pytest.fixture()
def lifecycle(registry, directory, broadcaster, scheduler):
    return SessionLifecycle(registry, directory, broadcaster, scheduler, rng=random.Random(42))


@pytest.fixture()
def matchmaker(registry, directory, lifecycle):
    return Matchmaker(registry, directory, lifecycle)


@pytest.fixture()
def seat(matchmaker, directory):
    """Quick-join a list of connection ids and return the session id of the last one."""
    def _seat(*connection_ids, character='goblin'):
        session_id = None
        for connection_id in connection_ids:
            directory.register_connection(connection_id)
            session_id = matchmaker.quick_join(connection_id, character)
        return session_id
    return _seat


@pytest.fixture()
def started(seat, lifecycle, tasks):
    """A two-player public session that has reached the playing state."""
    session_id = seat('p1', 'p2')
    lifecycle.set_ready('p1', session_id, True)
    lifecycle.set_ready('p2', session_id, True)
    tasks.run_all()
    return session_id


@pytest.fixture()
def flask_app(tasks):
    from app import create_app
    application, socketio = create_app(TestConfig, scheduler=TimerScheduler(tasks.spawn, lambda seconds: None))
    yield application


@pytest.fixture()
def socketio(flask_app):
    return flask_app.extensions['trash_rush']['socketio']


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()
