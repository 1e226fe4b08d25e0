from typing import Any, Dict, List, Optional

from .models import Member


class ConnectionDirectory:
    """Non-owning index from connection handle to its Member.

    The registry owns member lifetime and keeps this in step with party
    membership; nothing else should add or pop entries.
    """

    def __init__(self) -> None:
        self._members: Dict[Any, Member] = {}

    def add(self, member: Member) -> None:
        self._members[member.handle] = member

    def get(self, handle) -> Optional[Member]:
        return self._members.get(handle)

    def pop(self, handle) -> Optional[Member]:
        return self._members.pop(handle, None)

    def handles(self) -> List[Any]:
        return list(self._members)

    def __contains__(self, handle) -> bool:
        return handle in self._members

    def __len__(self) -> int:
        return len(self._members)
