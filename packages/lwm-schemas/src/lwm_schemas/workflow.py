"""Workflow snapshot and derived phase state schemas."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from uuid import UUID

from pydantic import Field

from lwm_schemas.base import BaseSchema
from lwm_schemas.labwork import (
    AssignmentPlan,
    Authority,
    Labwork,
    SchedulePreview,
    ScheduleEntry,
    Timetable,
)
from lwm_schemas.primitives import (
    CourseId,
    GroupViewMode,
    LabworkId,
    WorkflowPhase,
    WorkflowSource,
)

COURSE_ROUTE_PARAM = "cid"
LABWORK_ROUTE_PARAM = "lid"

_IDENTITY_FIELDS = frozenset({"labwork_id", "course_id"})


class NavigationContext(BaseSchema):
    """Identity and actor information the workflow view is opened with."""

    course_id: CourseId = Field(..., description="Course from the route")
    labwork_id: LabworkId = Field(..., description="Labwork from the route")
    authorities: list[Authority] = Field(
        default_factory=list, description="Authorities of the acting user"
    )

    @classmethod
    def from_route_params(
        cls, params: Mapping[str, str], authorities: list[Authority]
    ) -> NavigationContext:
        """Build a context from `courses/:cid/labworks/:lid/chain` route params.

        Args:
            params: Route parameters by name.
            authorities: Authorities of the acting user.

        Returns:
            NavigationContext: Parsed navigation context.

        Raises:
            ValueError: If a parameter is missing or not a UUID.
        """
        try:
            course_id = UUID(params[COURSE_ROUTE_PARAM])
            labwork_id = UUID(params[LABWORK_ROUTE_PARAM])
        except KeyError as exc:
            raise ValueError(f"missing route parameter: {exc.args[0]}") from exc
        return cls(course_id=course_id, labwork_id=labwork_id, authorities=authorities)


class PhaseState(BaseSchema):
    """Derived flags of one phase, as rendered by the presentation layer."""

    phase: WorkflowPhase = Field(..., description="Phase")
    label: str = Field(..., min_length=1, description="Localized phase label")
    completed: bool = Field(..., description="Completion flag")
    locked: bool | None = Field(
        None, description="Lock flag, None for the groups phase"
    )
    group_view_mode: GroupViewMode | None = Field(
        None, description="Groups sub-state, only set for the groups phase"
    )


@dataclass(slots=True)
class WorkflowSnapshot:
    """Latest known value of every workflow source for one labwork.

    Loadable fields stay ``None`` until their source resolves; use
    :meth:`is_loaded` to tell "not loaded yet" apart from an empty value.
    Each field is written through exactly one ``apply_*`` method.
    """

    labwork_id: LabworkId
    course_id: CourseId
    labwork: Labwork | None = None
    timetable: Timetable | None = None
    assignment_plan: AssignmentPlan | None = None
    application_count: int | None = None
    schedule_preview: SchedulePreview | None = None
    schedule_entries: list[ScheduleEntry] | None = None
    report_card_count: int | None = None
    loaded_sources: set[WorkflowSource] = field(default_factory=set)
    failed_sources: set[WorkflowSource] = field(default_factory=set)

    def __setattr__(self, name: str, value: object) -> None:
        if name in _IDENTITY_FIELDS and hasattr(self, name):
            raise AttributeError(f"{name} is fixed for the lifetime of a snapshot")
        object.__setattr__(self, name, value)

    def is_loaded(self, source: WorkflowSource) -> bool:
        """Return True once the source has delivered a value."""
        return source in self.loaded_sources

    @property
    def has_schedule_preview(self) -> bool:
        """Whether an uncommitted preview is held."""
        return self.schedule_preview is not None

    @property
    def has_schedule_entries(self) -> bool:
        """Whether committed entries are known to exist."""
        return bool(self.schedule_entries)

    @property
    def has_report_cards(self) -> bool:
        """Whether report cards are known to exist."""
        return (self.report_card_count or 0) > 0

    def apply_labwork(self, labwork: Labwork) -> None:
        """Record the resolved labwork.

        Raises:
            ValueError: If the labwork does not match the snapshot identity.
        """
        if labwork.id != self.labwork_id:
            raise ValueError("labwork does not belong to this snapshot")
        if labwork.course.id != self.course_id:
            raise ValueError("labwork belongs to a different course")
        self.labwork = labwork
        self._mark_loaded(WorkflowSource.LABWORK)

    def apply_timetable(self, timetable: Timetable) -> None:
        """Record the timetable (with blacklists)."""
        self.timetable = timetable
        self._mark_loaded(WorkflowSource.TIMETABLE)

    def apply_assignment_plan(self, plan: AssignmentPlan) -> None:
        """Record the assignment plan."""
        self.assignment_plan = plan
        self._mark_loaded(WorkflowSource.ASSIGNMENT_PLAN)

    def apply_application_count(self, count: int) -> None:
        """Record the number of submitted applications.

        Raises:
            ValueError: If the count is negative.
        """
        if count < 0:
            raise ValueError("application count must not be negative")
        self.application_count = count
        self._mark_loaded(WorkflowSource.APPLICATIONS)

    def apply_schedule_entries(self, entries: list[ScheduleEntry]) -> None:
        """Record committed schedule entries.

        Non-empty entries replace any held preview.

        Raises:
            ValueError: If entries are cleared while report cards exist.
        """
        if not entries and self.has_report_cards:
            raise ValueError("schedule entries cannot be empty while report cards exist")
        self.schedule_entries = list(entries)
        if entries:
            self.schedule_preview = None
        self._mark_loaded(WorkflowSource.SCHEDULE_ENTRIES)

    def apply_schedule_preview(self, preview: SchedulePreview) -> None:
        """Hold an uncommitted preview.

        Raises:
            ValueError: If committed entries already exist.
        """
        if self.has_schedule_entries:
            raise ValueError("a preview cannot coexist with committed entries")
        self.schedule_preview = preview

    def clear_schedule_preview(self) -> None:
        """Drop the held preview."""
        self.schedule_preview = None

    def apply_report_card_count(self, count: int) -> None:
        """Record the number of generated report cards.

        Raises:
            ValueError: If the count is negative or report cards would exist
                while the schedule is known to be empty.
        """
        if count < 0:
            raise ValueError("report card count must not be negative")
        if (
            count > 0
            and self.is_loaded(WorkflowSource.SCHEDULE_ENTRIES)
            and not self.has_schedule_entries
        ):
            raise ValueError("report cards require committed schedule entries")
        self.report_card_count = count
        self._mark_loaded(WorkflowSource.REPORT_CARDS)

    def mark_failed(self, source: WorkflowSource) -> None:
        """Degrade a source's field to unknown after a failed load."""
        match source:
            case WorkflowSource.LABWORK:
                self.labwork = None
            case WorkflowSource.TIMETABLE:
                self.timetable = None
            case WorkflowSource.ASSIGNMENT_PLAN:
                self.assignment_plan = None
            case WorkflowSource.APPLICATIONS:
                self.application_count = None
            case WorkflowSource.SCHEDULE_ENTRIES:
                self.schedule_entries = None
            case WorkflowSource.REPORT_CARDS:
                self.report_card_count = None
        self.loaded_sources.discard(source)
        self.failed_sources.add(source)

    def _mark_loaded(self, source: WorkflowSource) -> None:
        self.loaded_sources.add(source)
        self.failed_sources.discard(source)
