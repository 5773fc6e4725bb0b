from __future__ import annotations

import copy
from collections import deque
from threading import Lock
from typing import Any, Deque, Dict

RECENT_REQUEST_CAPACITY = 10


class DeviceStateCache:
    """In-memory record of when each (sensor, model) pair last reported.

    Writes are last-write-wins: an out-of-order reading replaces a newer one.
    """

    def __init__(self, capacity: int = RECENT_REQUEST_CAPACITY) -> None:
        self._last_seen: Dict[str, Dict[str, int]] = {}
        self._recent_requests: Deque[str] = deque(maxlen=capacity)
        self._lock = Lock()

    def record(self, sensor_id: str, model_type: str, timestamp: int) -> None:
        with self._lock:
            self._last_seen.setdefault(sensor_id, {})[model_type] = timestamp

    def track_request(self, path: str) -> None:
        with self._lock:
            self._recent_requests.append(path)

    def last_seen(self, sensor_id: str, model_type: str) -> int | None:
        with self._lock:
            return self._last_seen.get(sensor_id, {}).get(model_type)

    def snapshot(self) -> Dict[str, Any]:
        """Return copies of the last-seen map and the recent request log."""

        with self._lock:
            return {
                "lastSeen": copy.deepcopy(self._last_seen),
                "last10Reqs": list(self._recent_requests),
            }
