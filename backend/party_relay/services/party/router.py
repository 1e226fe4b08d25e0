import json
import logging
from typing import Any, Dict, Iterable, Optional, Protocol

from .errors import PartyError
from .models import as_text, is_falsy
from .registry import PartyRegistry

log = logging.getLogger(__name__)


class Delivery(Protocol):
    """Send primitives the transport hands to the router.

    Both are best-effort: closed handles are skipped and one failing
    recipient never stops the others.
    """

    def send_to(self, handle, message: Dict[str, Any]) -> None: ...

    def broadcast_except(self, handles: Iterable[Any], exclude, message: Dict[str, Any]) -> None: ...


def parse_message(raw) -> Optional[Dict[str, Any]]:
    """Decode an inbound frame; None means drop it without a reply."""
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode('utf-8')
        except UnicodeDecodeError:
            return None
    if not isinstance(raw, str):
        return None
    try:
        msg = json.loads(raw)
    except ValueError:
        return None
    return msg if isinstance(msg, dict) else None


class SessionRouter:
    """Interpret inbound messages against the registry and fan out replies.

    Only create/join misuse gets an `error` reply. Everything else that
    does not apply (no identity, unknown type, bad frame) is dropped
    silently.
    """

    def __init__(self, registry: PartyRegistry, delivery: Delivery, chat_max_length: int = 120) -> None:
        self.registry = registry
        self.delivery = delivery
        self.chat_max_length = chat_max_length
        self._handlers = {
            'create': self.handle_create,
            'join': self.handle_join,
            'state': self.handle_state,
            'chat': self.handle_chat,
            'event': self.handle_event,
        }

    def dispatch(self, handle, raw) -> None:
        msg = parse_message(raw)
        if msg is None:
            log.debug(f"[drop] handle={handle} unparseable frame")
            return
        kind = msg.get('type')
        handler = self._handlers.get(kind) if isinstance(kind, str) else None
        if handler is None:
            return
        try:
            with self.registry.lock:
                handler(handle, msg)
        except Exception:
            log.exception(f"[dispatch-failed] handle={handle} type={kind}")

    # ---- handlers ----

    def handle_create(self, handle, msg):
        try:
            created = self.registry.create_party(handle, msg.get('name'))
        except PartyError as exc:
            self._reply_error(handle, exc)
            return
        self.delivery.send_to(handle, {
            'type': 'welcome',
            'id': created.member.id,
            'code': created.code,
            'players': [],
            'color': created.color,
        })

    def handle_join(self, handle, msg):
        try:
            joined = self.registry.join_party(handle, msg.get('code'), msg.get('name'))
        except PartyError as exc:
            self._reply_error(handle, exc)
            return
        member = joined.member
        self.delivery.send_to(handle, {
            'type': 'welcome',
            'id': member.id,
            'code': member.party_code,
            'players': joined.existing,
            'color': member.color,
        })
        self.delivery.broadcast_except(joined.party.handles(), handle, {
            'type': 'joined',
            'id': member.id,
            'name': member.name,
            'color': member.color,
        })

    def handle_state(self, handle, msg):
        party = self._party_of(handle)
        if party is None:
            return
        state = self.registry.update_state(handle, msg)
        if state is None:
            return
        member = self.registry.resolve(handle)
        out = {'type': 'state', 'id': member.id}
        out.update(state.to_dict())
        self.delivery.broadcast_except(party.handles(), handle, out)

    def handle_chat(self, handle, msg):
        party = self._party_of(handle)
        if party is None:
            return
        member = self.registry.resolve(handle)
        text = '' if is_falsy(msg.get('text')) else as_text(msg['text'])
        text = text[:self.chat_max_length]
        # sender included: the echo is its delivery confirmation
        self.delivery.broadcast_except(party.handles(), None, {
            'type': 'chat',
            'id': member.id,
            'name': member.name,
            'text': text,
        })

    def handle_event(self, handle, msg):
        party = self._party_of(handle)
        if party is None:
            return
        member = self.registry.resolve(handle)
        self.delivery.broadcast_except(party.handles(), handle, {
            'type': 'event',
            'id': member.id,
            'ev': msg.get('ev'),
            'data': {} if is_falsy(msg.get('data')) else msg['data'],
        })

    # ---- helpers ----

    def _party_of(self, handle):
        member = self.registry.resolve(handle)
        if member is None:
            return None
        return self.registry.get_party(member.party_code)

    def _reply_error(self, handle, exc: PartyError):
        log.debug(f"[error-reply] handle={handle} msg={exc.message}")
        self.delivery.send_to(handle, {'type': 'error', 'msg': exc.message})
