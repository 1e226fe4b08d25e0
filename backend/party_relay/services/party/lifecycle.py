import logging
from typing import Optional

from .registry import PartyRegistry, RemovedMember

log = logging.getLogger(__name__)


def teardown_connection(registry: PartyRegistry, delivery, handle) -> Optional[RemovedMember]:
    """Remove whoever was behind a closed connection and tell the rest.

    Safe to call more than once per handle; later calls find nothing and
    return None without broadcasting.
    """
    with registry.lock:
        removed = registry.remove_by_connection(handle)
        if removed is None:
            return None

        member = removed.member
        if removed.remaining:
            delivery.broadcast_except(removed.remaining, None, {'type': 'left', 'id': member.id})

    log.info(f"[party-leave] code={removed.party_code} member={member.id} name={member.name}")
    if removed.dissolved:
        log.info(f"[party-dissolve] code={removed.party_code}")
    return removed
