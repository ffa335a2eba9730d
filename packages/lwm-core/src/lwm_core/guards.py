"""Completion and lock predicates over a workflow snapshot.

Every function here is pure: it reads a snapshot and returns a flag. Fields
whose source has not resolved yet are never treated as empty. Completion
needs positive evidence, so unknown fields count as "not completed". Locks
protect downstream artifacts, so unknown downstream fields count as "may
exist" and lock.
"""

from __future__ import annotations

from lwm_core.phases import label
from lwm_core.ports.workflow import GroupsLockUndefinedError
from lwm_schemas.primitives import (
    WORKFLOW_PHASE_ORDER,
    GroupViewMode,
    Locale,
    LockablePhase,
    WorkflowPhase,
    WorkflowSource,
)
from lwm_schemas.workflow import PhaseState, WorkflowSnapshot


def _downstream_artifacts_exist(snapshot: WorkflowSnapshot) -> bool:
    if snapshot.has_schedule_preview:
        return True
    if not snapshot.is_loaded(WorkflowSource.SCHEDULE_ENTRIES):
        return True
    if not snapshot.is_loaded(WorkflowSource.REPORT_CARDS):
        return True
    return snapshot.has_schedule_entries or snapshot.has_report_cards


def _report_cards_may_exist(snapshot: WorkflowSnapshot) -> bool:
    if not snapshot.is_loaded(WorkflowSource.REPORT_CARDS):
        return True
    return snapshot.has_report_cards


def is_completed(phase: WorkflowPhase, snapshot: WorkflowSnapshot) -> bool:
    """Return True when a phase has produced what later phases need.

    Args:
        phase: Phase to evaluate.
        snapshot: Current workflow snapshot.

    Returns:
        bool: Completion flag.
    """
    match WorkflowPhase(phase):
        case WorkflowPhase.APPLICATION | WorkflowPhase.TIMETABLE | WorkflowPhase.BLACKLISTS:
            return True
        case WorkflowPhase.GROUPS:
            return snapshot.has_schedule_preview or snapshot.has_schedule_entries
        case WorkflowPhase.SCHEDULE:
            return snapshot.has_schedule_entries
        case WorkflowPhase.CLOSING:
            return (
                is_completed(WorkflowPhase.SCHEDULE, snapshot)
                and snapshot.has_report_cards
            )


def is_locked(
    phase: LockablePhase, snapshot: WorkflowSnapshot, can_administer: bool
) -> bool:
    """Return True when a phase must not be edited any more.

    Args:
        phase: Phase to evaluate; groups is not accepted.
        snapshot: Current workflow snapshot.
        can_administer: Whether the actor may administer the labwork.

    Returns:
        bool: Lock flag.

    Raises:
        GroupsLockUndefinedError: If called for the groups phase.
    """
    if WorkflowPhase(phase) is WorkflowPhase.GROUPS:
        raise GroupsLockUndefinedError()
    if not can_administer:
        return True

    match WorkflowPhase(phase):
        case WorkflowPhase.APPLICATION | WorkflowPhase.TIMETABLE | WorkflowPhase.BLACKLISTS:
            return _downstream_artifacts_exist(snapshot)
        case WorkflowPhase.SCHEDULE:
            if snapshot.has_schedule_preview:
                return False
            if not snapshot.is_loaded(WorkflowSource.SCHEDULE_ENTRIES):
                return True
            return snapshot.has_schedule_entries
        case WorkflowPhase.CLOSING:
            return is_locked(
                WorkflowPhase.SCHEDULE, snapshot, can_administer
            ) and _report_cards_may_exist(snapshot)
    raise ValueError(f"unknown phase: {phase}")


def group_view_mode(snapshot: WorkflowSnapshot) -> GroupViewMode:
    """Return the sub-state the groups phase is in.

    A committed schedule implies groups; otherwise submitted applications are
    enough to request a preview.
    """
    if snapshot.has_schedule_entries:
        return GroupViewMode.GROUPS_PRESENT
    if (snapshot.application_count or 0) > 0:
        return GroupViewMode.WAITING_FOR_PREVIEW
    return GroupViewMode.WAITING_FOR_APPLICATIONS


def phase_state(
    phase: WorkflowPhase,
    snapshot: WorkflowSnapshot,
    can_administer: bool,
    locale: Locale = Locale.DE,
) -> PhaseState:
    """Bundle the derived flags of one phase for rendering."""
    phase = WorkflowPhase(phase)
    if phase is WorkflowPhase.GROUPS:
        return PhaseState(
            phase=phase,
            label=label(phase, locale),
            completed=is_completed(phase, snapshot),
            locked=None,
            group_view_mode=group_view_mode(snapshot),
        )
    return PhaseState(
        phase=phase,
        label=label(phase, locale),
        completed=is_completed(phase, snapshot),
        locked=is_locked(phase, snapshot, can_administer),  # type: ignore[arg-type]
        group_view_mode=None,
    )


def derive_phase_states(
    snapshot: WorkflowSnapshot, can_administer: bool, locale: Locale = Locale.DE
) -> list[PhaseState]:
    """Derive the flags of every phase in workflow order."""
    return [
        phase_state(phase, snapshot, can_administer, locale)
        for phase in WORKFLOW_PHASE_ORDER
    ]
