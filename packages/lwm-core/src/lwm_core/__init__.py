"""lwm-core: Phase-progression workflow logic for labworks."""

from lwm_core.controller import WorkflowController
from lwm_core.guards import (
    derive_phase_states,
    group_view_mode,
    is_completed,
    is_locked,
    phase_state,
)
from lwm_core.permissions import (
    can_administer,
    has_admin_status,
    has_any_role,
    is_course_manager,
)
from lwm_core.phases import (
    MISSING_LABEL,
    has_next,
    has_previous,
    label,
    next_label,
    next_phase,
    phase_index,
    phases_between,
    previous_label,
    previous_phase,
)
from lwm_core.ports import (
    GroupsLockUndefinedError,
    SourceError,
    SourceNotFoundError,
    WorkflowError,
    WorkflowErrorCode,
    WorkflowErrorInfo,
    WorkflowSources,
)

__all__ = [
    "MISSING_LABEL",
    "GroupsLockUndefinedError",
    "SourceError",
    "SourceNotFoundError",
    "WorkflowController",
    "WorkflowError",
    "WorkflowErrorCode",
    "WorkflowErrorInfo",
    "WorkflowSources",
    "can_administer",
    "derive_phase_states",
    "group_view_mode",
    "has_admin_status",
    "has_any_role",
    "has_next",
    "has_previous",
    "is_completed",
    "is_course_manager",
    "is_locked",
    "label",
    "next_label",
    "next_phase",
    "phase_index",
    "phase_state",
    "phases_between",
    "previous_label",
    "previous_phase",
]
