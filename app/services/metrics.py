"""
METRICS MODULE
==============

Process-local counters and gauges reported by GET /api/status. Each worker
process keeps its own numbers; nothing here is persisted or shared.
"""

from typing import Optional


class Metrics:
    """Request counter, in-flight gauge and mean inference latency."""

    def __init__(self):
        self.requests_total = 0
        self.in_flight = 0
        self.inference_calls = 0
        self._inference_ms_total = 0.0

    def request_started(self) -> None:
        self.requests_total += 1
        self.in_flight += 1

    def request_finished(self) -> None:
        self.in_flight = max(0, self.in_flight - 1)

    def record_inference(self, elapsed_ms: float) -> None:
        self.inference_calls += 1
        self._inference_ms_total += elapsed_ms

    @property
    def mean_inference_ms(self) -> Optional[float]:
        if not self.inference_calls:
            return None
        return round(self._inference_ms_total / self.inference_calls, 2)
