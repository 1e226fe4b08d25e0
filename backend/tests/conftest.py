import os
import sys
import pytest

# Ensure the backend root (containing the `party_relay` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from party_relay import create_app, socketio

NAMESPACE = '/ws'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    LOG_LEVEL = 'DEBUG'
    CORS_ORIGINS = '*'
    SOCKETIO_NAMESPACE = NAMESPACE
    PARTY_MAX_MEMBERS = 8
    PARTY_CODE_LENGTH = 4
    NAME_MAX_LENGTH = 20
    CHAT_MAX_LENGTH = 120
    HEARTBEAT_INTERVAL_SEC = 30


class RecordingDelivery:
    """Collects (handle, message) pairs instead of sending them."""

    def __init__(self):
        self.sent = []

    def send_to(self, handle, message):
        self.sent.append((handle, message))

    def broadcast_except(self, handles, exclude, message):
        for handle in handles:
            if exclude is not None and handle == exclude:
                continue
            self.send_to(handle, message)

    def to(self, handle):
        return [m for h, m in self.sent if h == handle]

    def recipients(self, msg_type):
        return {h for h, m in self.sent if m['type'] == msg_type}


def protocol_messages(sio_client):
    """Relay protocol messages received by a Socket.IO test client."""
    out = []
    for pkt in sio_client.get_received(NAMESPACE):
        if pkt['name'] != 'message':
            continue
        args = pkt['args']
        out.append(args[0] if isinstance(args, list) else args)
    return out


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def relay(flask_app):
    return flask_app.extensions['party_relay']


@pytest.fixture()
def delivery():
    return RecordingDelivery()


@pytest.fixture()
def connect(flask_app):
    """Factory for Socket.IO test clients on the relay namespace."""
    clients = []

    def _connect():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace=NAMESPACE,
        )
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        try:
            if test_client.is_connected(NAMESPACE):
                test_client.disconnect(namespace=NAMESPACE)
        except Exception:
            pass


@pytest.fixture()
def messages():
    return protocol_messages
