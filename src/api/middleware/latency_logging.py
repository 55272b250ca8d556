"""Per-request timing logs and a rolling latency window for system stats."""

import logging
import re
import time
from collections import deque
from typing import Callable

from fastapi import Request, Response

logger = logging.getLogger(__name__)

SLOW_REQUEST_MS = 1000
VERY_SLOW_REQUEST_MS = 3000

UNTRACKED_PATHS = frozenset({"/health", "/health/ready"})

_ID_SEGMENT = re.compile(r"[0-9a-f]{8}(?:-[0-9a-f]{4}){3}-[0-9a-f]{12}", re.IGNORECASE)


def route_key(path: str) -> str:
    """Collapse UUID path segments so requests group by route."""
    return _ID_SEGMENT.sub("{id}", path)


def _percentile(ordered: list[float], fraction: float) -> float:
    return round(ordered[min(int(len(ordered) * fraction), len(ordered) - 1)], 2)


class LatencyStats:
    """The most recent request latencies, in milliseconds."""

    def __init__(self, max_samples: int = 1000) -> None:
        self._samples: deque[tuple[str, float]] = deque(maxlen=max_samples)

    def record(self, path: str, latency_ms: float) -> None:
        self._samples.append((route_key(path), latency_ms))

    def get_stats(self) -> dict[str, float | int]:
        """Request count, mean and p50/p95/p99 over the window."""
        ordered = sorted(latency for _, latency in self._samples)
        if not ordered:
            return {"total_requests": 0, "avg_latency_ms": 0, "p50_latency_ms": 0, "p95_latency_ms": 0, "p99_latency_ms": 0}

        return {
            "total_requests": len(ordered),
            "avg_latency_ms": round(sum(ordered) / len(ordered), 2),
            "p50_latency_ms": _percentile(ordered, 0.50),
            "p95_latency_ms": _percentile(ordered, 0.95),
            "p99_latency_ms": _percentile(ordered, 0.99),
        }

    def get_stats_by_path(self) -> dict[str, dict[str, float | int]]:
        """Count, mean and p95 per route."""
        grouped: dict[str, list[float]] = {}
        for route, latency in self._samples:
            grouped.setdefault(route, []).append(latency)

        return {
            route: {
                "count": len(latencies),
                "avg_ms": round(sum(latencies) / len(latencies), 2),
                "p95_ms": _percentile(sorted(latencies), 0.95),
            }
            for route, latencies in grouped.items()
        }


_latency_stats = LatencyStats()


def get_latency_stats() -> LatencyStats:
    return _latency_stats


def _level_for(status_code: int, latency_ms: float) -> tuple[int, str]:
    if status_code >= 500:
        return logging.ERROR, ""
    if latency_ms > VERY_SLOW_REQUEST_MS:
        return logging.ERROR, "VERY SLOW REQUEST: "
    if latency_ms > SLOW_REQUEST_MS:
        return logging.WARNING, "SLOW REQUEST: "
    if status_code >= 400:
        return logging.WARNING, ""
    return logging.INFO, ""


async def latency_logging_middleware(request: Request, call_next: Callable) -> Response:
    """Log ``METHOD path - status - ms`` for each request and record the latency.

    Health check paths are neither recorded nor logged.
    """
    started = time.perf_counter()
    status_code = 500

    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        path = request.url.path
        if path not in UNTRACKED_PATHS:
            latency_ms = (time.perf_counter() - started) * 1000
            _latency_stats.record(path, latency_ms)
            level, prefix = _level_for(status_code, latency_ms)
            logger.log(level, "%s%s %s - %d - %.2fms", prefix, request.method, path, status_code, latency_ms)
