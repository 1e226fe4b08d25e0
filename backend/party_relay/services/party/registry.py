import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .codes import assign_color, generate_code, generate_name
from .directory import ConnectionDirectory
from .errors import AlreadyInParty, PartyFull, PartyNotFound
from .models import Member, Party, State, as_text, is_falsy

log = logging.getLogger(__name__)


@dataclass
class CreatedParty:
    member: Member
    code: str
    color: str


@dataclass
class JoinedParty:
    member: Member
    party: Party
    existing: List[Dict[str, Any]]


@dataclass
class RemovedMember:
    member: Member
    party_code: str
    dissolved: bool
    remaining: List[Any] = field(default_factory=list)


class PartyRegistry:
    """In-memory owner of every live party and member.

    All reads and writes go through `lock`, a re-entrant lock the router
    also holds for the length of one dispatch, so code allocation and
    capacity checks cannot interleave across connections.
    """

    def __init__(
        self,
        max_members: int = 8,
        code_length: int = 4,
        name_max_length: int = 20,
        code_factory: Optional[Callable[[int], str]] = None,
        name_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self.max_members = max_members
        self.code_length = code_length
        self.name_max_length = name_max_length
        self._code_factory = code_factory or generate_code
        self._name_factory = name_factory or generate_name

        self.parties: Dict[str, Party] = {}
        self.directory = ConnectionDirectory()
        self.lock = threading.RLock()
        self._next_id = 1

    # ---- lookups ----

    def resolve(self, handle) -> Optional[Member]:
        with self.lock:
            return self.directory.get(handle)

    def get_party(self, code: str) -> Optional[Party]:
        with self.lock:
            return self.parties.get(code)

    def status(self) -> Dict[str, int]:
        with self.lock:
            return {'parties': len(self.parties), 'players': len(self.directory)}

    # ---- membership ----

    def create_party(self, handle, requested_name=None) -> CreatedParty:
        with self.lock:
            if handle in self.directory:
                raise AlreadyInParty()

            code = self._fresh_code()
            member = self._new_member(handle, requested_name, code)
            party = Party(code=code)
            party.members[member.id] = member
            self.parties[code] = party
            self.directory.add(member)

        log.info(f"[party-create] code={code} member={member.id} name={member.name}")
        return CreatedParty(member=member, code=code, color=member.color)

    def join_party(self, handle, code, requested_name=None) -> JoinedParty:
        with self.lock:
            if handle in self.directory:
                raise AlreadyInParty()

            code = '' if is_falsy(code) else as_text(code).upper().strip()
            party = self.parties.get(code)
            if not party:
                raise PartyNotFound(code)
            if len(party) >= self.max_members:
                raise PartyFull(self.max_members)

            existing = party.snapshot()
            member = self._new_member(handle, requested_name, code)
            party.members[member.id] = member
            self.directory.add(member)

        log.info(f"[party-join] code={code} member={member.id} name={member.name} size={len(party)}")
        return JoinedParty(member=member, party=party, existing=existing)

    def remove_by_connection(self, handle) -> Optional[RemovedMember]:
        with self.lock:
            member = self.directory.pop(handle)
            if not member:
                return None

            party = self.parties.get(member.party_code)
            remaining = []
            dissolved = True
            if party:
                party.members.pop(member.id, None)
                if len(party) == 0:
                    del self.parties[party.code]
                else:
                    dissolved = False
                    remaining = party.handles()

        return RemovedMember(
            member=member,
            party_code=member.party_code,
            dissolved=dissolved,
            remaining=remaining,
        )

    def update_state(self, handle, fields) -> Optional[State]:
        with self.lock:
            member = self.directory.get(handle)
            if not member:
                return None
            state = State.from_fields(fields)
            member.last_state = state
            return state

    # ---- helpers ----

    def _fresh_code(self) -> str:
        while True:
            code = self._code_factory(self.code_length)
            if code not in self.parties:
                return code

    def _new_member(self, handle, requested_name, code) -> Member:
        member_id = str(self._next_id)
        self._next_id += 1
        if is_falsy(requested_name):
            requested_name = self._name_factory()
        name = as_text(requested_name)[:self.name_max_length]
        return Member(
            id=member_id,
            name=name,
            color=assign_color(self._next_id),
            handle=handle,
            party_code=code,
        )
