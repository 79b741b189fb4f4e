import os
import random
import sys
import pytest

# Ensure the backend root (containing the `buzzer` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from buzzer import create_app, socketio
from buzzer.services.party import PartyService
from buzzer.services.party.scheduler import PartyScheduler

NAMESPACE = '/ws'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = '*'
    SOCKETIO_NAMESPACE = NAMESPACE
    LOG_LEVEL = 'DEBUG'
    MAX_PLAYERS = 8
    CORRECT_ADVANCE_MS = 5000
    TIME_UP_DELAY_MS = 1800
    TIME_UP_ADVANCE_MS = 5000
    ENABLE_TIMERS_IN_TESTS = False


class TimedConfig(TestConfig):
    """Real background timers with short delays."""
    ENABLE_TIMERS_IN_TESTS = True
    CORRECT_ADVANCE_MS = 50
    TIME_UP_DELAY_MS = 20
    TIME_UP_ADVANCE_MS = 50


class RecordingChannel:
    """Stands in for Socket.IO rooms in engine-level tests."""

    def __init__(self):
        self.events = []
        self.rooms = {}

    def broadcast(self, code, event, payload=None):
        self.events.append((code, event, payload))

    def enter(self, conn_id, code):
        self.rooms.setdefault(code, set()).add(conn_id)

    def exit(self, conn_id, code):
        self.rooms.get(code, set()).discard(conn_id)

    def names(self):
        return [name for _, name, _ in self.events]

    def last(self, event):
        for _, name, payload in reversed(self.events):
            if name == event:
                return payload
        return None

    def clear(self):
        self.events = []


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


def _client_factory(application):
    clients = []

    def _connect():
        test_client = socketio.test_client(
            application,
            flask_test_client=application.test_client(),
            namespace=NAMESPACE,
        )
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        if test_client.is_connected(NAMESPACE):
            test_client.disconnect(namespace=NAMESPACE)


@pytest.fixture()
def sio_factory(flask_app):
    """Connect any number of Socket.IO test clients to the party namespace."""
    yield from _client_factory(flask_app)


@pytest.fixture()
def timed_app():
    application = create_app(TimedConfig)
    yield application


@pytest.fixture()
def timed_sio_factory(timed_app):
    yield from _client_factory(timed_app)


@pytest.fixture()
def channel():
    return RecordingChannel()


@pytest.fixture()
def service(channel):
    # No app: handles are recorded on the party but never started
    return PartyService(channel, PartyScheduler(socketio), rng=random.Random(1234))
