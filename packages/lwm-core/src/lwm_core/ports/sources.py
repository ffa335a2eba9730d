"""Protocol definitions for the backend services feeding a workflow."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol, runtime_checkable

from pydantic import Field

from lwm_schemas.base import BaseSchema
from lwm_schemas.labwork import (
    AssignmentPlan,
    Labwork,
    SchedulePreview,
    ScheduleEntry,
    Timetable,
)
from lwm_schemas.primitives import LabworkId, WorkflowOperation, WorkflowSource


class SourceErrorCode(StrEnum):
    """Error codes raised by source and mutation adapters."""

    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"
    REJECTED = "rejected"


class SourceErrorInfo(BaseSchema):
    """Structured adapter error data."""

    code: SourceErrorCode = Field(..., description="Error code")
    message: str = Field(..., min_length=1, description="Error message")
    source: WorkflowSource | None = Field(None, description="Source that failed")
    operation: WorkflowOperation | None = Field(
        None, description="Mutation that failed"
    )


class SourceError(Exception):
    """Failure reported by a backend adapter."""

    def __init__(self, info: SourceErrorInfo) -> None:
        """Initialize the source error.

        Args:
            info: Structured adapter error information.
        """
        super().__init__(info.message)
        self.info = info


class SourceNotFoundError(SourceError):
    """Requested entity does not exist."""


@runtime_checkable
class LabworkSourceProtocol(Protocol):
    """Resolves a labwork by identity."""

    async def fetch_labwork(self, labwork_id: LabworkId) -> Labwork:
        """Fetch the labwork, raising SourceNotFoundError if it is unknown."""
        raise NotImplementedError


@runtime_checkable
class TimetableSourceProtocol(Protocol):
    """Get-or-create access to a labwork's timetable and its blacklists."""

    async def fetch_or_create_timetable(self, labwork: Labwork) -> Timetable:
        """Return the timetable, creating an empty one if none exists."""
        raise NotImplementedError


@runtime_checkable
class AssignmentPlanSourceProtocol(Protocol):
    """Get-or-create access to a labwork's assignment plan."""

    async def fetch_or_create_assignment_plan(self, labwork: Labwork) -> AssignmentPlan:
        """Return the assignment plan, creating an empty one if none exists."""
        raise NotImplementedError


@runtime_checkable
class ApplicationSourceProtocol(Protocol):
    """Counts submitted applications."""

    async def fetch_application_count(self, labwork: Labwork) -> int:
        """Return the number of applications for the labwork."""
        raise NotImplementedError


@runtime_checkable
class ScheduleSourceProtocol(Protocol):
    """Reads committed schedule entries."""

    async def fetch_schedule_entries(self, labwork: Labwork) -> list[ScheduleEntry]:
        """Return the committed entries in schedule order, possibly empty."""
        raise NotImplementedError


@runtime_checkable
class ReportCardSourceProtocol(Protocol):
    """Counts generated report card entries."""

    async def fetch_report_card_entry_count(self, labwork: Labwork) -> int:
        """Return the number of report card entries for the labwork."""
        raise NotImplementedError


@runtime_checkable
class WorkflowMutationsProtocol(Protocol):
    """Mutations that move a labwork through its workflow.

    Every method returns the new authoritative value or raises SourceError.
    """

    async def preview_schedule(self, labwork: Labwork) -> SchedulePreview:
        """Compute a candidate schedule without committing it."""
        raise NotImplementedError

    async def commit_preview(
        self, labwork: Labwork, preview: SchedulePreview
    ) -> list[ScheduleEntry]:
        """Persist the preview's groups and entries."""
        raise NotImplementedError

    async def discard_preview(self, labwork: Labwork, preview: SchedulePreview) -> None:
        """Drop a preview and anything reserved for it."""
        raise NotImplementedError

    async def create_schedule_entries(
        self, labwork: Labwork, entries: list[ScheduleEntry]
    ) -> list[ScheduleEntry]:
        """Persist the given entries."""
        raise NotImplementedError

    async def delete_schedule_entries(self, labwork: Labwork) -> None:
        """Delete every committed entry and the groups derived with them."""
        raise NotImplementedError

    async def create_report_cards(self, labwork: Labwork) -> int:
        """Generate report cards and return how many exist afterwards."""
        raise NotImplementedError

    async def delete_report_cards(self, labwork: Labwork) -> None:
        """Delete every report card of the labwork."""
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class WorkflowSources:
    """Bundle of the read-side collaborators a controller subscribes to."""

    labworks: LabworkSourceProtocol
    timetables: TimetableSourceProtocol
    assignment_plans: AssignmentPlanSourceProtocol
    applications: ApplicationSourceProtocol
    schedules: ScheduleSourceProtocol
    report_cards: ReportCardSourceProtocol

    @classmethod
    def from_backend(cls, backend: object) -> WorkflowSources:
        """Use one object implementing every source protocol for all slots.

        Raises:
            TypeError: If the backend misses one of the protocols.
        """
        required = (
            LabworkSourceProtocol,
            TimetableSourceProtocol,
            AssignmentPlanSourceProtocol,
            ApplicationSourceProtocol,
            ScheduleSourceProtocol,
            ReportCardSourceProtocol,
        )
        missing = [proto.__name__ for proto in required if not isinstance(backend, proto)]
        if missing:
            raise TypeError(f"backend does not implement: {', '.join(missing)}")
        return cls(
            labworks=backend,  # type: ignore[arg-type]
            timetables=backend,  # type: ignore[arg-type]
            assignment_plans=backend,  # type: ignore[arg-type]
            applications=backend,  # type: ignore[arg-type]
            schedules=backend,  # type: ignore[arg-type]
            report_cards=backend,  # type: ignore[arg-type]
        )
