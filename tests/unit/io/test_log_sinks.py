"""Unit tests for workflow log and alert sinks."""

import asyncio
import io
import json
from pathlib import Path
from uuid import UUID

import pytest

from lwm_core.ports.workflow import (
    LogSinkProtocol,
    WorkflowErrorCode,
    WorkflowErrorInfo,
    build_phase_changed_log,
    build_source_failed_log,
)
from lwm_io.alerts import ConsoleAlertSink, InMemoryAlertSink
from lwm_io.storage import (
    CompositeLogSink,
    ConsoleLogSink,
    FileSystemLogSink,
    InMemoryLogSink,
    NoopLogSink,
    build_log_sink,
)
from lwm_schemas.config import LoggingConfig, LogSinkConfig
from lwm_schemas.logs import LogEntry
from lwm_schemas.primitives import LogSinkType, WorkflowPhase, WorkflowSource
from tests.helpers.labwork_factory import LABWORK_ID

TIMESTAMP = "2026-10-17T09:00:00Z"


class _FailingLogSink(LogSinkProtocol):
    async def emit_log(self, entry: LogEntry) -> None:
        raise OSError("log directory is read-only")


def _entry() -> LogEntry:
    return build_phase_changed_log(
        TIMESTAMP, LABWORK_ID, WorkflowPhase.GROUPS, WorkflowPhase.SCHEDULE
    )


@pytest.mark.unit
def test_console_log_sink_writes_jsonl() -> None:
    stream = io.StringIO()
    sink = ConsoleLogSink(stream=stream)

    asyncio.run(sink.emit_log(_entry()))

    payload = json.loads(stream.getvalue().strip())
    assert payload["event"] == "phase_changed"
    assert payload["phase"] == "schedule"
    assert payload["data"] == {"previous": "groups", "current": "schedule"}


@pytest.mark.unit
def test_file_log_sink_appends_per_labwork(tmp_path: Path) -> None:
    sink = FileSystemLogSink(str(tmp_path / "logs"))
    failed = build_source_failed_log(
        TIMESTAMP, LABWORK_ID, WorkflowSource.TIMETABLE, "timeout"
    )

    async def _emit() -> None:
        await sink.emit_log(_entry())
        await sink.emit_log(failed)

    asyncio.run(_emit())

    path = sink.log_path(LABWORK_ID)
    assert path == tmp_path / "logs" / f"{LABWORK_ID}.jsonl"
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["event"] for line in lines] == [
        "phase_changed",
        "source_load_failed",
    ]
    assert json.loads(lines[1])["level"] == "error"


@pytest.mark.unit
def test_composite_log_sink_forwards_to_all(log_sink: InMemoryLogSink) -> None:
    first = log_sink
    second = InMemoryLogSink()
    sink = CompositeLogSink([first, second, NoopLogSink()])

    asyncio.run(sink.emit_log(_entry()))

    assert first.entries == [_entry()]
    assert second.entries == [_entry()]


@pytest.mark.unit
def test_sinks_satisfy_protocol() -> None:
    assert isinstance(InMemoryLogSink(), LogSinkProtocol)
    assert isinstance(NoopLogSink(), LogSinkProtocol)


@pytest.mark.unit
def test_build_log_sink_single_console() -> None:
    stream = io.StringIO()
    config = LoggingConfig(sinks=[LogSinkConfig(type=LogSinkType.CONSOLE)])

    sink = build_log_sink(config, stream=stream)

    assert isinstance(sink, ConsoleLogSink)
    asyncio.run(sink.emit_log(_entry()))
    assert stream.getvalue().count("\n") == 1


@pytest.mark.unit
def test_build_log_sink_composite(tmp_path: Path) -> None:
    config = LoggingConfig(
        sinks=[
            LogSinkConfig(type=LogSinkType.FILE),
            LogSinkConfig(type=LogSinkType.NOOP),
        ],
        log_dir=str(tmp_path),
    )

    sink = build_log_sink(config)
    asyncio.run(sink.emit_log(_entry()))

    assert isinstance(sink, CompositeLogSink)
    assert (tmp_path / f"{LABWORK_ID}.jsonl").exists()


@pytest.mark.unit
def test_alert_sinks(alert_sink: InMemoryAlertSink) -> None:
    response = WorkflowErrorInfo(
        code=WorkflowErrorCode.MUTATION_FAILED, message="commit_preview failed"
    ).to_error_response()
    memory = alert_sink
    stream = io.StringIO()

    memory.alert(response)
    ConsoleAlertSink(stream).alert(response)

    assert memory.alerts == [response]
    assert stream.getvalue() == "[mutation_failed] commit_preview failed\n"
    memory.clear()
    assert memory.alerts == []


@pytest.mark.unit
def test_composite_log_sink_reaches_sinks_after_a_failure() -> None:
    after = InMemoryLogSink()
    sink = CompositeLogSink([_FailingLogSink(), after])

    with pytest.raises(OSError, match="read-only"):
        asyncio.run(sink.emit_log(_entry()))

    assert after.entries == [_entry()]


@pytest.mark.unit
def test_in_memory_log_sink_filters_by_labwork() -> None:
    sink = InMemoryLogSink()
    other = _entry().model_copy(
        update={"labwork_id": UUID("01890a5c-91c8-7b2a-9f51-9b40d0cf0102")}
    )

    async def _emit() -> None:
        await sink.emit_log(_entry())
        await sink.emit_log(other)

    asyncio.run(_emit())

    assert sink.for_labwork(LABWORK_ID) == [_entry()]
    assert len(sink.entries) == 2
