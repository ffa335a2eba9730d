"""Primitive types and enums shared across lwm schemas."""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal
from uuid import UUID

from pydantic import Field

ISO_8601_PATTERN = (
    r"^\d{4}-\d{2}-\d{2}T"
    r"\d{2}:\d{2}:\d{2}"
    r"(?:\.\d+)?"
    r"(?:Z|[+-]\d{2}:\d{2})$"
)
EVENT_NAME_PATTERN = r"^[a-z][a-z0-9_]*$"

type EntityId = UUID
type LabworkId = UUID
type CourseId = UUID
type UserId = UUID
type Timestamp = Annotated[str, Field(pattern=ISO_8601_PATTERN)]
type EventName = Annotated[str, Field(pattern=EVENT_NAME_PATTERN)]

type JsonPrimitive = str | int | float | bool | None
type JsonValue = JsonPrimitive | list["JsonValue"] | dict[str, "JsonValue"]


class WorkflowPhase(StrEnum):
    """Labwork workflow phase names."""

    APPLICATION = "application"
    TIMETABLE = "timetable"
    BLACKLISTS = "blacklists"
    GROUPS = "groups"
    SCHEDULE = "schedule"
    CLOSING = "closing"


WORKFLOW_PHASE_ORDER: tuple[WorkflowPhase, ...] = (
    WorkflowPhase.APPLICATION,
    WorkflowPhase.TIMETABLE,
    WorkflowPhase.BLACKLISTS,
    WorkflowPhase.GROUPS,
    WorkflowPhase.SCHEDULE,
    WorkflowPhase.CLOSING,
)

# Groups availability is three-valued (see GroupViewMode), so the binary lock
# predicate only accepts the remaining phases.
type LockablePhase = Literal[
    WorkflowPhase.APPLICATION,
    WorkflowPhase.TIMETABLE,
    WorkflowPhase.BLACKLISTS,
    WorkflowPhase.SCHEDULE,
    WorkflowPhase.CLOSING,
]


class GroupViewMode(StrEnum):
    """Sub-state of the groups phase."""

    WAITING_FOR_APPLICATIONS = "waitingForApplications"
    WAITING_FOR_PREVIEW = "waitingForPreview"
    GROUPS_PRESENT = "groupsPresent"


class UserRole(StrEnum):
    """Roles an authority can grant."""

    ADMIN = "admin"
    COURSE_MANAGER = "courseManager"
    COURSE_EMPLOYEE = "courseEmployee"
    COURSE_ASSISTANT = "courseAssistant"
    EMPLOYEE = "employee"
    STUDENT = "student"


class WorkflowSource(StrEnum):
    """Asynchronous data sources feeding a workflow snapshot."""

    LABWORK = "labwork"
    TIMETABLE = "timetable"
    ASSIGNMENT_PLAN = "assignment_plan"
    APPLICATIONS = "applications"
    SCHEDULE_ENTRIES = "schedule_entries"
    REPORT_CARDS = "report_cards"


class WorkflowOperation(StrEnum):
    """Mutation hooks exposed by the workflow controller."""

    PREVIEW_SCHEDULE = "preview_schedule"
    COMMIT_PREVIEW = "commit_preview"
    DISCARD_PREVIEW = "discard_preview"
    CREATE_ENTRIES = "create_entries"
    DELETE_ENTRIES = "delete_entries"
    CREATE_REPORT_CARDS = "create_report_cards"
    DELETE_REPORT_CARDS = "delete_report_cards"


class Locale(StrEnum):
    """Supported label locales."""

    DE = "de"
    EN = "en"


class LogLevel(StrEnum):
    """Log level values for JSONL logs."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class LogSinkType(StrEnum):
    """Supported log sink types."""

    CONSOLE = "console"
    FILE = "file"
    NOOP = "noop"
