import os
import random
import sys
from collections import defaultdict

import pytest

# Ensure the backend root (containing the `mathduel` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from mathduel import create_app, socketio
from mathduel.services.duel.engine import RoundEngine, RoundSettings
from mathduel.services.duel.registry import MatchRegistry
from mathduel.services.duel.scheduler import ManualScheduler
from mathduel.services.leaderboard import LeaderboardStore


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/'
    ROUND_DURATION_SEC = 15
    TICK_INTERVAL_SEC = 1
    ROUND_COOLDOWN_SEC = 2
    WIN_STREAK = 3
    LOG_LEVEL = 'DEBUG'


class RecordingChannel:
    """In-memory room channel that remembers every outbound event."""

    def __init__(self):
        self.rooms = defaultdict(set)
        self.events = []

    def join(self, sid, room):
        self.rooms[room].add(sid)

    def leave(self, sid, room):
        self.rooms[room].discard(sid)

    def close(self, room):
        self.rooms.pop(room, None)

    def broadcast(self, room, event, payload=None):
        self.events.append((room, event, payload))

    def send(self, sid, event, payload=None):
        self.events.append((sid, event, payload))

    def named(self, event):
        return [payload for _, name, payload in self.events if name == event]


@pytest.fixture()
def flask_app(tmp_path):
    class Config(TestConfig):
        LEADERBOARD_FILE = str(tmp_path / 'leaderboard.json')

    application = create_app(Config)
    with application.app_context():
        yield application
    from mathduel import socketio_events
    socketio_events._sid_to_name.clear()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def services(flask_app):
    return flask_app.extensions['mathduel']


@pytest.fixture()
def connect(flask_app):
    """Factory for Socket.IO test clients, optionally with a display name set."""
    clients = []

    def _connect(name=None):
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        if name:
            test_client.emit('setName', {'name': name})
        test_client.get_received()
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass


def sid_of(test_client, namespace='/'):
    return socketio.server.manager.sid_from_eio_sid(test_client.eio_sid, namespace)


def names(received):
    return [pkt['name'] for pkt in received]


def first(received, event):
    for pkt in received:
        if pkt['name'] == event:
            return pkt['args'][0] if pkt['args'] else None
    raise AssertionError(f'{event} not in {names(received)}')


@pytest.fixture()
def channel():
    return RecordingChannel()


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def leaderboard(tmp_path):
    store = LeaderboardStore(str(tmp_path / 'leaderboard.json'))
    store.load()
    return store


@pytest.fixture()
def engine(channel, scheduler, leaderboard):
    return RoundEngine(
        MatchRegistry(rng=random.Random(7)),
        leaderboard,
        channel,
        scheduler,
        settings=RoundSettings(),
        rng=random.Random(11),
    )
