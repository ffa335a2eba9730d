"""Protocol definitions, errors and log builders for the workflow controller."""

from __future__ import annotations

from enum import StrEnum
from typing import Protocol, runtime_checkable

from pydantic import Field

from lwm_schemas.base import BaseSchema
from lwm_schemas.events import (
    ControllerClosedData,
    ControllerEvent,
    MutationData,
    MutationEvent,
    NavigationEvent,
    PhaseChangedData,
    SourceEvent,
    SourceFailedData,
    SourceLoadedData,
    TransitionRefusedData,
)
from lwm_schemas.logs import LogEntry
from lwm_schemas.primitives import (
    LabworkId,
    LogLevel,
    Timestamp,
    WorkflowOperation,
    WorkflowPhase,
    WorkflowSource,
)
from lwm_schemas.responses import ErrorDetails, ErrorResponse


@runtime_checkable
class LogSinkProtocol(Protocol):
    """Protocol for emitting JSONL log entries."""

    async def emit_log(self, entry: LogEntry) -> None:
        """Emit a log entry."""
        raise NotImplementedError


@runtime_checkable
class AlertSinkProtocol(Protocol):
    """Protocol for user-facing failure notifications."""

    def alert(self, error: ErrorResponse) -> None:
        """Show a failure to the user."""
        raise NotImplementedError


class WorkflowErrorCode(StrEnum):
    """Categorized error codes for workflow failures."""

    LOAD_FAILED = "load_failed"
    MUTATION_FAILED = "mutation_failed"
    INVALID_TRANSITION = "invalid_transition"
    PERMISSION_DENIED = "permission_denied"
    MUTATION_IN_PROGRESS = "mutation_in_progress"
    INVALID_STATE = "invalid_state"


class WorkflowErrorDetails(BaseSchema):
    """Detailed workflow error context."""

    phase: WorkflowPhase | None = Field(None, description="Phase associated with error")
    target_phase: WorkflowPhase | None = Field(
        None, description="Requested phase for navigation errors"
    )
    source: WorkflowSource | None = Field(None, description="Source that failed")
    operation: WorkflowOperation | None = Field(
        None, description="Mutation associated with error"
    )
    reason: str | None = Field(None, description="Additional error context")


class WorkflowErrorInfo(BaseSchema):
    """Structured workflow error data."""

    code: WorkflowErrorCode = Field(..., description="Error code")
    message: str = Field(..., min_length=1, description="Error message")
    details: WorkflowErrorDetails | None = Field(None, description="Error details")

    def to_error_response(self) -> ErrorResponse:
        """Convert workflow error info to standard error response.

        Returns:
            ErrorResponse: Standard response error payload.
        """
        details: ErrorDetails | None = None
        if self.details is not None:
            if self.details.target_phase is not None:
                details = ErrorDetails(
                    field="phase", provided=str(self.details.target_phase)
                )
            elif self.details.operation is not None:
                details = ErrorDetails(
                    field="operation", provided=str(self.details.operation)
                )
            elif self.details.source is not None:
                details = ErrorDetails(
                    field="source", provided=str(self.details.source)
                )
        return ErrorResponse(code=str(self.code), message=self.message, details=details)


class WorkflowError(Exception):
    """Workflow error with structured details."""

    def __init__(self, info: WorkflowErrorInfo) -> None:
        """Initialize the workflow error.

        Args:
            info: Structured workflow error information.
        """
        super().__init__(info.message)
        self.info = info

    @property
    def code(self) -> WorkflowErrorCode:
        """Error code of the wrapped info."""
        return WorkflowErrorCode(self.info.code)


class GroupsLockUndefinedError(TypeError):
    """The binary lock predicate was asked about the groups phase."""

    def __init__(self) -> None:
        """Initialize with the fixed guidance message."""
        super().__init__("groups has no binary lock, use group_view_mode() instead")


def build_source_loaded_log(
    timestamp: Timestamp, labwork_id: LabworkId, source: WorkflowSource
) -> LogEntry:
    """Build a log entry for a resolved source.

    Args:
        timestamp: ISO-8601 timestamp.
        labwork_id: Labwork identifier.
        source: Source that resolved.

    Returns:
        LogEntry: Structured source load log entry.
    """
    return LogEntry(
        timestamp=timestamp,
        level=LogLevel.DEBUG,
        event=SourceEvent.LOADED,
        labwork_id=labwork_id,
        phase=None,
        message=f"Loaded {source}",
        data=SourceLoadedData(source=source).model_dump(exclude_none=True),
    )


def build_source_failed_log(
    timestamp: Timestamp, labwork_id: LabworkId, source: WorkflowSource, reason: str
) -> LogEntry:
    """Build a log entry for a failed source load.

    Args:
        timestamp: ISO-8601 timestamp.
        labwork_id: Labwork identifier.
        source: Source that failed.
        reason: Failure reason.

    Returns:
        LogEntry: Structured source failure log entry.
    """
    return LogEntry(
        timestamp=timestamp,
        level=LogLevel.ERROR,
        event=SourceEvent.FAILED,
        labwork_id=labwork_id,
        phase=None,
        message=f"Failed to load {source}",
        data=SourceFailedData(source=source, reason=reason).model_dump(
            exclude_none=True
        ),
    )


def build_phase_changed_log(
    timestamp: Timestamp,
    labwork_id: LabworkId,
    previous: WorkflowPhase,
    current: WorkflowPhase,
) -> LogEntry:
    """Build a log entry for a cursor move.

    Args:
        timestamp: ISO-8601 timestamp.
        labwork_id: Labwork identifier.
        previous: Phase left.
        current: Phase entered.

    Returns:
        LogEntry: Structured phase change log entry.
    """
    return LogEntry(
        timestamp=timestamp,
        level=LogLevel.INFO,
        event=NavigationEvent.PHASE_CHANGED,
        labwork_id=labwork_id,
        phase=current,
        message=f"Moved from {previous} to {current}",
        data=PhaseChangedData(previous=previous, current=current).model_dump(
            exclude_none=True
        ),
    )


def build_transition_refused_log(
    timestamp: Timestamp,
    labwork_id: LabworkId,
    current: WorkflowPhase,
    target: WorkflowPhase | None,
    reason: str,
) -> LogEntry:
    """Build a log entry for refused navigation.

    Args:
        timestamp: ISO-8601 timestamp.
        labwork_id: Labwork identifier.
        current: Phase the cursor stays on.
        target: Requested phase, None if there is no neighbour.
        reason: Refusal reason.

    Returns:
        LogEntry: Structured refusal log entry.
    """
    return LogEntry(
        timestamp=timestamp,
        level=LogLevel.WARN,
        event=NavigationEvent.TRANSITION_REFUSED,
        labwork_id=labwork_id,
        phase=current,
        message=reason,
        data=TransitionRefusedData(
            current=current, target=target, reason=reason
        ).model_dump(exclude_none=True),
    )


def build_mutation_completed_log(
    timestamp: Timestamp,
    labwork_id: LabworkId,
    phase: WorkflowPhase,
    operation: WorkflowOperation,
) -> LogEntry:
    """Build a log entry for a completed mutation.

    Args:
        timestamp: ISO-8601 timestamp.
        labwork_id: Labwork identifier.
        phase: Phase the cursor is on afterwards.
        operation: Mutation hook.

    Returns:
        LogEntry: Structured mutation log entry.
    """
    return LogEntry(
        timestamp=timestamp,
        level=LogLevel.INFO,
        event=MutationEvent.COMPLETED,
        labwork_id=labwork_id,
        phase=phase,
        message=f"{operation} completed",
        data=MutationData(operation=operation).model_dump(exclude_none=True),
    )


def build_mutation_failed_log(
    timestamp: Timestamp,
    labwork_id: LabworkId,
    phase: WorkflowPhase,
    operation: WorkflowOperation,
    reason: str,
) -> LogEntry:
    """Build a log entry for a failed mutation.

    Args:
        timestamp: ISO-8601 timestamp.
        labwork_id: Labwork identifier.
        phase: Phase the cursor is on.
        operation: Mutation hook.
        reason: Failure reason.

    Returns:
        LogEntry: Structured mutation failure log entry.
    """
    return LogEntry(
        timestamp=timestamp,
        level=LogLevel.ERROR,
        event=MutationEvent.FAILED,
        labwork_id=labwork_id,
        phase=phase,
        message=f"{operation} failed",
        data=MutationData(operation=operation, reason=reason).model_dump(
            exclude_none=True
        ),
    )


def build_controller_activated_log(
    timestamp: Timestamp, labwork_id: LabworkId
) -> LogEntry:
    """Build a log entry for controller activation.

    Args:
        timestamp: ISO-8601 timestamp.
        labwork_id: Labwork identifier.

    Returns:
        LogEntry: Structured activation log entry.
    """
    return LogEntry(
        timestamp=timestamp,
        level=LogLevel.INFO,
        event=ControllerEvent.ACTIVATED,
        labwork_id=labwork_id,
        phase=None,
        message="Workflow activated",
        data=None,
    )


def build_controller_closed_log(
    timestamp: Timestamp, labwork_id: LabworkId, cancelled_requests: int
) -> LogEntry:
    """Build a log entry for controller close.

    Args:
        timestamp: ISO-8601 timestamp.
        labwork_id: Labwork identifier.
        cancelled_requests: Outstanding requests that were dropped.

    Returns:
        LogEntry: Structured close log entry.
    """
    return LogEntry(
        timestamp=timestamp,
        level=LogLevel.INFO,
        event=ControllerEvent.CLOSED,
        labwork_id=labwork_id,
        phase=None,
        message="Workflow closed",
        data=ControllerClosedData(
            cancelled_requests=cancelled_requests
        ).model_dump(exclude_none=True),
    )
