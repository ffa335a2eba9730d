"""Log sink adapters for workflow events."""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import TextIO

from lwm_core.ports.workflow import LogSinkProtocol
from lwm_schemas.config import LoggingConfig
from lwm_schemas.logs import LogEntry
from lwm_schemas.primitives import LabworkId, LogSinkType


class FileSystemLogSink(LogSinkProtocol):
    """Log sink that appends JSONL entries to one file per labwork."""

    def __init__(self, logs_dir: str) -> None:
        """Initialize the log sink with a log directory."""
        self._logs_dir = Path(logs_dir)

    def log_path(self, labwork_id: LabworkId) -> Path:
        """Return the JSONL path entries for a labwork are written to."""
        return self._logs_dir / f"{labwork_id}.jsonl"

    async def emit_log(self, entry: LogEntry) -> None:
        """Append a log entry to the labwork's JSONL file."""
        await asyncio.to_thread(_append_jsonl, self.log_path(entry.labwork_id), entry)


class CompositeLogSink(LogSinkProtocol):
    """Log sink that fans workflow entries out to several sinks.

    Every sink receives every entry, even when an earlier sink fails. The
    first failure is raised once all sinks have been tried.
    """

    def __init__(self, sinks: Iterable[LogSinkProtocol]) -> None:
        self._sinks = list(sinks)

    async def emit_log(self, entry: LogEntry) -> None:
        """Forward an entry to each sink in configuration order.

        Raises:
            Exception: The first error raised by any sink.
        """
        first_error: Exception | None = None
        for sink in self._sinks:
            try:
                await sink.emit_log(entry)
            except Exception as exc:
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error


class ConsoleLogSink(LogSinkProtocol):
    """Log sink that prints one JSONL line per workflow event.

    Lines carry the labwork id, so output of several open labwork views can
    share one stream.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        """Initialize the console log sink.

        Args:
            stream: Output stream, stderr by default.
        """
        self._stream = stream or sys.stderr

    async def emit_log(self, entry: LogEntry) -> None:
        self._stream.write(entry.model_dump_json(exclude_none=False) + "\n")
        self._stream.flush()


class InMemoryLogSink(LogSinkProtocol):
    """Log sink that keeps entries for inspection, e.g. by a debug panel."""

    def __init__(self) -> None:
        self._entries: list[LogEntry] = []

    @property
    def entries(self) -> list[LogEntry]:
        """Return a copy of stored log entries."""
        return list(self._entries)

    def for_labwork(self, labwork_id: LabworkId) -> list[LogEntry]:
        """Return the stored entries of one labwork in emission order."""
        return [entry for entry in self._entries if entry.labwork_id == labwork_id]

    async def emit_log(self, entry: LogEntry) -> None:
        self._entries.append(entry)


class NoopLogSink(LogSinkProtocol):
    """Default sink of a workflow view without logging configured."""

    async def emit_log(self, entry: LogEntry) -> None:
        return None


def build_log_sink(
    logging_config: LoggingConfig, *, stream: TextIO | None = None
) -> LogSinkProtocol:
    """Build the sink a workflow controller writes to.

    Args:
        logging_config: Logging section of the workflow configuration.
        stream: Optional stream for the console sink.

    Returns:
        LogSinkProtocol: The single configured sink, or a composite of all.
    """
    sinks = [
        _build_sink(LogSinkType(sink_config.type), logging_config, stream)
        for sink_config in logging_config.sinks
    ]
    if len(sinks) == 1:
        return sinks[0]
    return CompositeLogSink(sinks)


def _build_sink(
    sink_type: LogSinkType, logging_config: LoggingConfig, stream: TextIO | None
) -> LogSinkProtocol:
    match sink_type:
        case LogSinkType.FILE:
            return FileSystemLogSink(str(logging_config.log_dir))
        case LogSinkType.CONSOLE:
            return ConsoleLogSink(stream=stream)
        case LogSinkType.NOOP:
            return NoopLogSink()
    raise ValueError(f"Unsupported log sink type: {sink_type}")


def _append_jsonl(path: Path, entry: LogEntry) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "a", encoding="utf-8") as handle:
        handle.write(entry.model_dump_json(exclude_none=False) + "\n")
