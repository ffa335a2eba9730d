"""Event taxonomy and structured payloads for workflow observability."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from lwm_schemas.base import BaseSchema
from lwm_schemas.primitives import WorkflowOperation, WorkflowPhase, WorkflowSource


class SourceEvent(StrEnum):
    """Event names for source loads."""

    LOADED = "source_loaded"
    FAILED = "source_load_failed"


class NavigationEvent(StrEnum):
    """Event names for cursor movement."""

    PHASE_CHANGED = "phase_changed"
    TRANSITION_REFUSED = "transition_refused"


class MutationEvent(StrEnum):
    """Event names for mutation hooks."""

    COMPLETED = "mutation_completed"
    FAILED = "mutation_failed"


class ControllerEvent(StrEnum):
    """Event names for the controller lifecycle."""

    ACTIVATED = "controller_activated"
    CLOSED = "controller_closed"


class SourceLoadedData(BaseSchema):
    """Payload for source load events."""

    source: WorkflowSource = Field(..., description="Source that resolved")


class SourceFailedData(BaseSchema):
    """Payload for source load failure events."""

    source: WorkflowSource = Field(..., description="Source that failed")
    reason: str = Field(..., min_length=1, description="Failure reason")


class PhaseChangedData(BaseSchema):
    """Payload for phase change events."""

    previous: WorkflowPhase = Field(..., description="Phase left")
    current: WorkflowPhase = Field(..., description="Phase entered")


class TransitionRefusedData(BaseSchema):
    """Payload for refused navigation."""

    current: WorkflowPhase = Field(..., description="Phase the cursor stays on")
    target: WorkflowPhase | None = Field(None, description="Requested phase")
    reason: str = Field(..., min_length=1, description="Refusal reason")


class MutationData(BaseSchema):
    """Payload for mutation events."""

    operation: WorkflowOperation = Field(..., description="Mutation hook")
    reason: str | None = Field(None, description="Failure reason if any")


class ControllerClosedData(BaseSchema):
    """Payload for controller close events."""

    cancelled_requests: int = Field(..., ge=0, description="Outstanding requests dropped")
