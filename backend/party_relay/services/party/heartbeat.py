import logging
import time
from typing import Any, Callable, Iterable

log = logging.getLogger(__name__)


class HeartbeatSweeper:
    """Probe every open connection on a fixed interval.

    Timeouts belong to the transport: a connection that stops answering is
    closed there, which in turn runs the lifecycle teardown.
    """

    def __init__(
        self,
        interval: float,
        list_handles: Callable[[], Iterable[Any]],
        probe: Callable[[Any], None],
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.interval = interval
        self._list_handles = list_handles
        self._probe = probe
        self._sleep = sleep
        self._running = False

    def sweep(self) -> int:
        probed = 0
        for handle in list(self._list_handles()):
            try:
                self._probe(handle)
                probed += 1
            except Exception as exc:
                log.debug(f"[heartbeat-miss] handle={handle} error={exc}")
        return probed

    def run(self) -> None:
        self._running = True
        log.info(f"[heartbeat-start] interval={self.interval}s")
        while self._running:
            self._sleep(self.interval)
            if not self._running:
                break
            count = self.sweep()
            log.debug(f"[heartbeat] probed={count}")

    def stop(self) -> None:
        self._running = False
