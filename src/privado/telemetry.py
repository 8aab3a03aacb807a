"""Usage metrics recorded during a command and posted once at the end.

Only a fixed set of metric keys is accepted; anything else is dropped.
Posting is best effort — callers log failures and move on.
"""

from __future__ import annotations

import json
import logging
import platform
import threading
from typing import Any

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)

EVENT_TYPE = "PRIVADO_CLI"

SUPPORTED_METRICS = frozenset({
    "os",
    "arch",
    "cmd",
    "dockerCmd",
    "version",
    "env",
    "ci",
    "ciProvider",
    "didReceiveCloudLinkMessage",
    "didParseCloudLink",
    "didAutoSpawnBrowser",
    "warning",
    "error",
})


class TelemetryRequestConfig(BaseModel):
    url: str
    user_hash: str = ""
    session_id: str = ""
    authentication_key_hash: str = ""
    timeout: float = 10.0


class Telemetry:
    """Thread-safe metric map for one CLI invocation."""

    def __init__(self) -> None:
        self._metrics: dict[str, str | list[str]] = {}
        self._lock = threading.Lock()
        self.recorded = False
        self.record_atomic_metric("os", platform.system().lower())
        self.record_atomic_metric("arch", platform.machine().lower())

    def record_atomic_metric(self, key: str, value: Any) -> None:
        """Set *key* to the string form of *value*, replacing any previous value."""
        if key not in SUPPORTED_METRICS:
            return
        with self._lock:
            self._metrics[key] = _stringify(value)

    def record_array_metric(self, key: str, value: Any) -> None:
        """Append the string form of *value* to the list stored under *key*."""
        if key not in SUPPORTED_METRICS:
            return
        with self._lock:
            existing = self._metrics.get(key)
            if existing is None:
                self._metrics[key] = [_stringify(value)]
            elif isinstance(existing, list):
                existing.append(_stringify(value))
            else:
                self._metrics[key] = [existing, _stringify(value)]

    def metrics(self) -> dict[str, str | list[str]]:
        with self._lock:
            return {k: list(v) if isinstance(v, list) else v for k, v in self._metrics.items()}

    def post_recorded(
        self,
        request: TelemetryRequestConfig,
        *,
        client: httpx.Client | None = None,
    ) -> None:
        """POST the recorded metrics; raises :class:`httpx.HTTPError` on failure."""
        body = {
            "event_type": EVENT_TYPE,
            "event_message": json.dumps(self.metrics(), indent=4),
            "user_hash": request.user_hash,
            "session_id": request.session_id,
        }
        headers = {
            "Authentication": request.authentication_key_hash,
            "Content-Type": "application/json",
        }

        owns_client = client is None
        http = client or httpx.Client(timeout=request.timeout)
        try:
            response = http.post(request.url, json=body, headers=headers)
        finally:
            if owns_client:
                http.close()

        if response.status_code != 201:
            msg = f"received non-ok status from telemetry: {response.status_code}"
            raise httpx.HTTPStatusError(msg, request=response.request, response=response)
        self.recorded = True
        logger.debug("Posted telemetry event for session %s", request.session_id)


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(str(v) for v in value) + "]"
    return str(value)
