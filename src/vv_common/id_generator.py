"""Time-ordered string ids for bet attempts and positions.

Ids carry a type prefix (``bet_``, ``pos_``) over a snowflake-style integer:
41 bits of milliseconds since EPOCH_MS, 10 bits of node id, 12 bits of
per-millisecond sequence. Within one node, later ids compare greater as
integers. The node id comes from ``settings.ID_NODE`` and must differ between
running instances that share a store.
"""

import threading
import time
from collections.abc import Callable

from config.settings import settings

EPOCH_MS = 1_700_000_000_000
_NODE_BITS = 10
_SEQUENCE_BITS = 12
_MAX_NODE = (1 << _NODE_BITS) - 1
_MAX_SEQUENCE = (1 << _SEQUENCE_BITS) - 1

ATTEMPT_PREFIX = "bet_"
POSITION_PREFIX = "pos_"


def _wall_ms() -> int:
    return int(time.time() * 1000)


class SnowflakeIdGenerator:
    def __init__(self, node_id: int = 0, clock_ms: Callable[[], int] = _wall_ms) -> None:
        if not 0 <= node_id <= _MAX_NODE:
            raise ValueError(f"node_id must be 0-{_MAX_NODE}, got {node_id}")
        self._node_id = node_id
        self._clock_ms = clock_ms
        self._sequence = 0
        self._last_ms = -1
        self._lock = threading.Lock()

    @property
    def node_id(self) -> int:
        return self._node_id

    def next_int(self) -> int:
        with self._lock:
            now_ms = self._clock_ms()
            if now_ms < self._last_ms:
                # clock stepped back: stay on the last millisecond
                now_ms = self._last_ms
            if now_ms == self._last_ms:
                self._sequence = (self._sequence + 1) & _MAX_SEQUENCE
                if self._sequence == 0:
                    # sequence exhausted within this millisecond
                    while now_ms <= self._last_ms:
                        now_ms = self._clock_ms()
            else:
                self._sequence = 0
            self._last_ms = now_ms
            return (
                ((now_ms - EPOCH_MS) << (_NODE_BITS + _SEQUENCE_BITS))
                | (self._node_id << _SEQUENCE_BITS)
                | self._sequence
            )

    def next_id(self, prefix: str = "") -> str:
        return f"{prefix}{self.next_int()}"


_default_generator = SnowflakeIdGenerator(node_id=settings.ID_NODE)


def new_attempt_id() -> str:
    return _default_generator.next_id(ATTEMPT_PREFIX)


def new_position_id() -> str:
    return _default_generator.next_id(POSITION_PREFIX)
