from __future__ import annotations

from collections import defaultdict, deque
from typing import Deque, Dict


class MetricsRegistry:
    """In-process relay counters plus bounded latency samples for /healthz."""

    def __init__(self, window: int = 500) -> None:
        self.window = window
        self.counters: Dict[str, int] = defaultdict(int)
        self.samples: Dict[str, Deque[float]] = {}

    def inc(self, name: str, amount: int = 1) -> None:
        self.counters[name] += amount

    def observe(self, name: str, value: float) -> None:
        self.samples.setdefault(name, deque(maxlen=self.window)).append(value)

    def percentile(self, name: str, pct: float) -> float:
        data = sorted(self.samples.get(name, ()))
        if not data:
            return 0.0
        return data[min(int(len(data) * pct), len(data) - 1)]

    def snapshot(self) -> dict[str, int]:
        return dict(sorted(self.counters.items()))
