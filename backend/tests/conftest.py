import logging
import os
import random
import sys
import pytest

# Ensure the backend root (containing the `keys_arena` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from keys_arena import create_app, socketio
from keys_arena.services.rooms import ManualScheduler, RoomEngine, RoomPool


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ALLOWED_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/'
    ROOM_COUNT = 10
    MATCHMAKING_DURATION_SEC = 30
    PREGAME_COUNTDOWN_TICKS = 3
    ROUND_DURATION_SEC = 60
    SPAWN_INTERVAL_SEC = 0.9
    GAME_OVER_HOLD_SEC = 10
    LOBBY_HEARTBEAT_TICKS = 5
    ENABLE_SCHEDULER_IN_TESTS = False


class RecordingChannel:
    """Stands in for the Socket.IO server; remembers memberships and emits."""

    def __init__(self):
        self.members = {}
        self.events = []

    def join(self, sid, room_id):
        self.members.setdefault(room_id, set()).add(sid)

    def leave(self, sid, room_id):
        self.members.get(room_id, set()).discard(sid)

    def emit_all(self, event, data):
        self.events.append(('*', event, data))

    def emit_room(self, room_id, event, data):
        self.events.append((room_id, event, data))

    def named(self, event, target=None):
        return [data for to, name, data in self.events
                if name == event and (target is None or to == target)]

    def clear(self):
        self.events = []


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def engine_of(flask_app):
    return flask_app.extensions['room_engine']


@pytest.fixture()
def make_sio_client(flask_app):
    clients = []

    def _make():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace='/'
        )
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        try:
            if test_client.is_connected('/'):
                test_client.disconnect(namespace='/')
        except Exception:
            pass


@pytest.fixture()
def channel():
    return RecordingChannel()


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def engine(channel, scheduler):
    return RoomEngine(
        RoomPool(size=10, matchmaking_duration=30),
        channel,
        scheduler,
        config=TestConfig.__dict__,
        logger=logging.getLogger('tests.engine'),
        rng=random.Random(1234),
    )
