from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field


@dataclass
class DetailIdGenerator:
    """Monotonic detail identifiers scoped to one transaction."""

    transaction_id: int
    start: int = 1
    _counter: itertools.count = field(init=False, repr=False)
    _lock: threading.Lock = field(init=False, repr=False, default_factory=threading.Lock)
    issued: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        if self.start < 1:
            raise ValueError("detail ids start at 1 or above")
        self._counter = itertools.count(self.start)

    def next_id(self) -> int:
        with self._lock:
            self.issued += 1
            return next(self._counter)
