"""Alert sink adapters for user-facing failure notifications."""

from __future__ import annotations

import sys
from typing import TextIO

from lwm_core.ports.workflow import AlertSinkProtocol
from lwm_schemas.responses import ErrorResponse


class InMemoryAlertSink(AlertSinkProtocol):
    """Alert sink that keeps alerts for the view to display."""

    def __init__(self) -> None:
        self._alerts: list[ErrorResponse] = []

    @property
    def alerts(self) -> list[ErrorResponse]:
        """Return a copy of stored alerts."""
        return list(self._alerts)

    def alert(self, error: ErrorResponse) -> None:
        self._alerts.append(error)

    def clear(self) -> None:
        self._alerts.clear()


class ConsoleAlertSink(AlertSinkProtocol):
    """Alert sink that prints one line per alert."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stderr

    def alert(self, error: ErrorResponse) -> None:
        self._stream.write(f"[{error.code}] {error.message}\n")
        self._stream.flush()
