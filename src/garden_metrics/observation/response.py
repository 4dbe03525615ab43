"""Last measured API server response times of Shoots."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Any

from garden_metrics.observation.models import project_from_namespace


class ResponseDurations:
    """Thread-safe store of response durations in milliseconds, keyed by (project, shoot).

    A missing entry means the Shoot's API server was not reachable on the last
    measurement. Entries older than ``max_age_seconds`` count as missing and are
    dropped on lookup; ``None`` keeps them until ``forget`` is called.
    """

    def __init__(
        self,
        max_age_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_age_seconds is not None and max_age_seconds <= 0:
            raise ValueError(f"max_age_seconds must be positive, got {max_age_seconds}")
        self.max_age_seconds = max_age_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._durations: dict[tuple[str, str], tuple[float, float]] = {}

    def observe(self, project: str, name: str, milliseconds: float) -> None:
        if milliseconds < 0:
            raise ValueError(f"negative response duration for {project}/{name}: {milliseconds}")
        with self._lock:
            self._durations[(project, name)] = (float(milliseconds), self._clock())

    def forget(self, project: str, name: str) -> None:
        with self._lock:
            self._durations.pop((project, name), None)

    def forget_shoot(self, obj: dict[str, Any]) -> None:
        """Drop the entry of a deleted Shoot given as a raw object."""
        meta = obj.get("metadata") or {}
        self.forget(project_from_namespace(meta.get("namespace") or ""), meta.get("name") or "")

    def _expired(self, observed_at: float, now: float) -> bool:
        return self.max_age_seconds is not None and now - observed_at > self.max_age_seconds

    def get(self, project: str, name: str) -> float | None:
        key = (project, name)
        with self._lock:
            entry = self._durations.get(key)
            if entry is None:
                return None
            milliseconds, observed_at = entry
            if self._expired(observed_at, self._clock()):
                del self._durations[key]
                return None
            return milliseconds

    def __len__(self) -> int:
        with self._lock:
            return len(self._durations)
