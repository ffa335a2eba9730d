"""lwm-io: Adapters for the labwork workflow (backend double, sinks, config)."""

from lwm_io.alerts import ConsoleAlertSink, InMemoryAlertSink
from lwm_io.backend import InMemoryLabworkBackend
from lwm_io.config import ConfigError, load_workflow_config
from lwm_io.storage import (
    CompositeLogSink,
    ConsoleLogSink,
    FileSystemLogSink,
    InMemoryLogSink,
    NoopLogSink,
    build_log_sink,
)

__all__ = [
    "CompositeLogSink",
    "ConfigError",
    "ConsoleAlertSink",
    "ConsoleLogSink",
    "FileSystemLogSink",
    "InMemoryAlertSink",
    "InMemoryLabworkBackend",
    "InMemoryLogSink",
    "NoopLogSink",
    "build_log_sink",
    "load_workflow_config",
]
