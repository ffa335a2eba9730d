"""Labwork entities as consumed by the workflow controller.

These are read-only views of backend payloads. Only the attributes the
workflow or its adapters read are modelled; everything else is ignored.
"""

from __future__ import annotations

from datetime import date, time

from pydantic import Field, model_validator

from lwm_schemas.base import BaseSchema
from lwm_schemas.primitives import CourseId, EntityId, LabworkId, UserId, UserRole


class Course(BaseSchema):
    """Course owning one or more labworks."""

    id: CourseId = Field(..., description="Course identifier")
    label: str = Field(..., min_length=1, description="Course label")
    abbreviation: str = Field(..., min_length=1, description="Short course label")
    lecturer: UserId | None = Field(None, description="Responsible lecturer")


class Labwork(BaseSchema):
    """Single laboratory course instance."""

    id: LabworkId = Field(..., description="Labwork identifier")
    label: str = Field(..., min_length=1, description="Labwork label")
    course: Course = Field(..., description="Owning course")
    semester: EntityId | None = Field(None, description="Semester identifier")
    degree: EntityId | None = Field(None, description="Degree identifier")
    subscribable: bool = Field(False, description="Open for applications")
    published: bool = Field(False, description="Visible to students")


class Authority(BaseSchema):
    """Role grant held by the acting user, optionally scoped to a course."""

    role: UserRole = Field(..., description="Granted role")
    course: CourseId | None = Field(None, description="Course scope, None if global")


class Blacklist(BaseSchema):
    """Blocked day or blocked time span."""

    id: EntityId = Field(..., description="Blacklist identifier")
    label: str = Field(..., min_length=1, description="Reason for the block")
    day: date = Field(..., description="Blocked day")
    start: time | None = Field(None, description="Start of the blocked span")
    end: time | None = Field(None, description="End of the blocked span")
    is_global: bool = Field(False, description="Applies to all labworks")

    @model_validator(mode="after")
    def validate_span(self) -> Blacklist:
        """Ensure a partial-day block has a well-formed span.

        Returns:
            Blacklist: Validated blacklist.

        Raises:
            ValueError: If only one bound is set or the span is empty.
        """
        if (self.start is None) != (self.end is None):
            raise ValueError("start and end must be set together")
        if self.start is not None and self.end is not None and self.start >= self.end:
            raise ValueError("start must be before end")
        return self


class TimetableEntry(BaseSchema):
    """Weekly slot of the timetable."""

    supervisor: list[UserId] = Field(default_factory=list, description="Supervisors")
    room: EntityId = Field(..., description="Room identifier")
    day_index: int = Field(..., ge=0, le=6, description="Weekday, Monday is 0")
    start: time = Field(..., description="Slot start")
    end: time = Field(..., description="Slot end")


class Timetable(BaseSchema):
    """Framework plan of weekly slots plus the blocked days."""

    id: EntityId = Field(..., description="Timetable identifier")
    labwork: LabworkId = Field(..., description="Labwork identifier")
    entries: list[TimetableEntry] = Field(default_factory=list)
    start: date | None = Field(None, description="First day the plan applies")
    blacklists: list[Blacklist] = Field(default_factory=list)


class AssignmentEntry(BaseSchema):
    """Single assignment of the assignment plan."""

    index: int = Field(..., ge=0, description="Position in the plan")
    label: str = Field(..., min_length=1, description="Assignment label")
    duration: int = Field(1, ge=1, description="Number of meetings it spans")


class AssignmentPlan(BaseSchema):
    """Ordered assignments every group works through."""

    id: EntityId = Field(..., description="Assignment plan identifier")
    labwork: LabworkId = Field(..., description="Labwork identifier")
    entries: list[AssignmentEntry] = Field(default_factory=list)


class ScheduleGroup(BaseSchema):
    """Student group as computed for a schedule."""

    id: EntityId = Field(..., description="Group identifier")
    label: str = Field(..., min_length=1, description="Group label")
    labwork: LabworkId = Field(..., description="Labwork identifier")
    members: list[UserId] = Field(default_factory=list)


class ScheduleEntry(BaseSchema):
    """Committed meeting of one group."""

    id: EntityId = Field(..., description="Schedule entry identifier")
    labwork: LabworkId = Field(..., description="Labwork identifier")
    group: EntityId = Field(..., description="Group identifier")
    room: EntityId = Field(..., description="Room identifier")
    supervisor: list[UserId] = Field(default_factory=list)
    day: date = Field(..., description="Meeting day")
    start: time = Field(..., description="Meeting start")
    end: time = Field(..., description="Meeting end")


class SchedulePreview(BaseSchema):
    """Server-computed candidate schedule that is not committed yet."""

    labwork: LabworkId = Field(..., description="Labwork identifier")
    entries: list[ScheduleEntry] = Field(default_factory=list)
    groups: list[ScheduleGroup] = Field(default_factory=list)
    conflict_value: int = Field(0, ge=0, description="Remaining scheduling conflicts")
    fitness: int = Field(0, ge=0, description="Fitness of the computed candidate")
