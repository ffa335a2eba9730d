"""Log sink adapters."""

from lwm_io.storage.log_sink import (
    CompositeLogSink,
    ConsoleLogSink,
    FileSystemLogSink,
    InMemoryLogSink,
    NoopLogSink,
    build_log_sink,
)

__all__ = [
    "CompositeLogSink",
    "ConsoleLogSink",
    "FileSystemLogSink",
    "InMemoryLogSink",
    "NoopLogSink",
    "build_log_sink",
]
