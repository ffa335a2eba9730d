"""Ports (protocols, errors, log builders) of the labwork workflow."""

from lwm_core.ports.sources import (
    ApplicationSourceProtocol,
    AssignmentPlanSourceProtocol,
    LabworkSourceProtocol,
    ReportCardSourceProtocol,
    ScheduleSourceProtocol,
    SourceError,
    SourceErrorCode,
    SourceErrorInfo,
    SourceNotFoundError,
    TimetableSourceProtocol,
    WorkflowMutationsProtocol,
    WorkflowSources,
)
from lwm_core.ports.workflow import (
    AlertSinkProtocol,
    GroupsLockUndefinedError,
    LogSinkProtocol,
    WorkflowError,
    WorkflowErrorCode,
    WorkflowErrorDetails,
    WorkflowErrorInfo,
)

__all__ = [
    "AlertSinkProtocol",
    "ApplicationSourceProtocol",
    "AssignmentPlanSourceProtocol",
    "GroupsLockUndefinedError",
    "LabworkSourceProtocol",
    "LogSinkProtocol",
    "ReportCardSourceProtocol",
    "ScheduleSourceProtocol",
    "SourceError",
    "SourceErrorCode",
    "SourceErrorInfo",
    "SourceNotFoundError",
    "TimetableSourceProtocol",
    "WorkflowError",
    "WorkflowErrorCode",
    "WorkflowErrorDetails",
    "WorkflowErrorInfo",
    "WorkflowMutationsProtocol",
    "WorkflowSources",
]
