"""JSONL log entry schema for workflow events."""

from __future__ import annotations

from pydantic import Field

from lwm_schemas.base import BaseSchema
from lwm_schemas.primitives import (
    EventName,
    JsonValue,
    LabworkId,
    LogLevel,
    Timestamp,
    WorkflowPhase,
)


class LogEntry(BaseSchema):
    """Single log line in JSONL format."""

    timestamp: Timestamp = Field(
        ..., description="ISO-8601 timestamp for the log entry"
    )
    level: LogLevel = Field(..., description="Log level")
    event: EventName = Field(..., description="Event name")
    labwork_id: LabworkId = Field(..., description="Labwork the workflow belongs to")
    phase: WorkflowPhase | None = Field(None, description="Workflow phase if applicable")
    message: str = Field(..., min_length=1, description="Log message")
    data: dict[str, JsonValue] | None = Field(None, description="Structured event data")
