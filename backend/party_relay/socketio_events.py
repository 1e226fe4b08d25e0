import threading
import time
from typing import Any, Dict, Iterable, List

from flask import current_app, request
from flask_socketio import emit

from party_relay import socketio
from party_relay.services.party.heartbeat import HeartbeatSweeper
from party_relay.services.party.lifecycle import teardown_connection
from party_relay.services.party.registry import PartyRegistry
from party_relay.services.party.router import SessionRouter


class SocketIODelivery:
    """Delivery backed by Socket.IO rooms keyed by sid.

    Protocol messages travel as plain `message` events so any Socket.IO
    client can read them with `on('message')`.
    """

    def __init__(self, sio, namespace: str, logger) -> None:
        self.sio = sio
        self.namespace = namespace
        self.logger = logger

    def send_to(self, handle, message: Dict[str, Any]) -> None:
        try:
            self.sio.emit('message', message, to=handle, namespace=self.namespace)
        except Exception as exc:
            self.logger.debug(f"[send-failed] sid={handle} type={message.get('type')} error={exc}")

    def broadcast_except(self, handles: Iterable[Any], exclude, message: Dict[str, Any]) -> None:
        for handle in handles:
            if exclude is not None and handle == exclude:
                continue
            self.send_to(handle, message)


class Relay:
    """Per-app bundle of the registry, the router and the open sids."""

    def __init__(self, registry: PartyRegistry, router: SessionRouter, delivery: SocketIODelivery) -> None:
        self.registry = registry
        self.router = router
        self.delivery = delivery
        self.sweeper = None
        self._open = set()
        self._open_lock = threading.Lock()

    def opened(self, sid) -> None:
        with self._open_lock:
            self._open.add(sid)

    def closed(self, sid) -> None:
        with self._open_lock:
            self._open.discard(sid)

    def open_sids(self) -> List[Any]:
        with self._open_lock:
            return list(self._open)


def init_relay(flask_app) -> Relay:
    cfg = flask_app.config
    namespace = cfg.get('SOCKETIO_NAMESPACE', '/ws')
    registry = PartyRegistry(
        max_members=int(cfg.get('PARTY_MAX_MEMBERS', 8)),
        code_length=int(cfg.get('PARTY_CODE_LENGTH', 4)),
        name_max_length=int(cfg.get('NAME_MAX_LENGTH', 20)),
    )
    delivery = SocketIODelivery(socketio, namespace, flask_app.logger)
    router = SessionRouter(registry, delivery, chat_max_length=int(cfg.get('CHAT_MAX_LENGTH', 120)))
    relay = Relay(registry, router, delivery)
    flask_app.extensions['party_relay'] = relay
    return relay


def start_heartbeat(flask_app, relay: Relay) -> None:
    """Kick off the liveness sweep in a Socket.IO background task.

    No-ops in TESTING mode or when HEARTBEAT_INTERVAL_SEC is 0.
    """
    if flask_app.config.get('TESTING'):
        return
    try:
        interval = int(flask_app.config.get('HEARTBEAT_INTERVAL_SEC', 30))
    except (TypeError, ValueError):
        interval = 0
    if interval <= 0:
        return

    namespace = relay.delivery.namespace

    def _send_heartbeat(sid):
        socketio.emit('heartbeat', {'ts': int(time.time() * 1000)}, to=sid, namespace=namespace)

    relay.sweeper = HeartbeatSweeper(interval, relay.open_sids, _send_heartbeat, sleep=socketio.sleep)
    socketio.start_background_task(relay.sweeper.run)


def get_relay() -> Relay:
    return current_app.extensions['party_relay']


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect(auth=None):
    sid = _get_sid()
    get_relay().opened(sid)
    current_app.logger.info(f"[connect] sid={sid} addr={request.headers.get('X-Forwarded-For') or request.remote_addr}")
    emit('connected', {'message': 'Connected to party relay'})


def handle_disconnect(reason=None):
    sid = _get_sid()
    relay = get_relay()
    relay.closed(sid)
    teardown_connection(relay.registry, relay.delivery, sid)
    current_app.logger.info(f"[disconnect] sid={sid}")


def handle_message(data=None):
    get_relay().router.dispatch(_get_sid(), data)


def handle_ping(data=None):
    emit('pong', data or {})


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Bind the relay handlers to the shared SocketIO instance."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('message', handle_message, namespace=namespace)
    # clients using send(..., json=True) arrive on the 'json' event
    socketio.on_event('json', handle_message, namespace=namespace)
    socketio.on_event('ping', handle_ping, namespace=namespace)
