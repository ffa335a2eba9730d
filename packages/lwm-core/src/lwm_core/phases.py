"""Ordered workflow phases with label and adjacency lookups."""

from __future__ import annotations

from lwm_schemas.primitives import WORKFLOW_PHASE_ORDER, Locale, WorkflowPhase

MISSING_LABEL = "???"

_LABELS: dict[Locale, dict[WorkflowPhase, str]] = {
    Locale.DE: {
        WorkflowPhase.APPLICATION: "Ablaufplan",
        WorkflowPhase.TIMETABLE: "Rahmenplan",
        WorkflowPhase.BLACKLISTS: "Geblockte Tage",
        WorkflowPhase.GROUPS: "Gruppen",
        WorkflowPhase.SCHEDULE: "Staffelplan",
        WorkflowPhase.CLOSING: "Abschluss",
    },
    Locale.EN: {
        WorkflowPhase.APPLICATION: "Application",
        WorkflowPhase.TIMETABLE: "Timetable",
        WorkflowPhase.BLACKLISTS: "Blocked days",
        WorkflowPhase.GROUPS: "Groups",
        WorkflowPhase.SCHEDULE: "Schedule",
        WorkflowPhase.CLOSING: "Closing",
    },
}


def phase_index(phase: WorkflowPhase) -> int:
    """Return the position of a phase in the workflow order."""
    return WORKFLOW_PHASE_ORDER.index(WorkflowPhase(phase))


def label(phase: WorkflowPhase, locale: Locale = Locale.DE) -> str:
    """Return the localized label of a phase."""
    return _LABELS[Locale(locale)][WorkflowPhase(phase)]


def next_phase(phase: WorkflowPhase) -> WorkflowPhase | None:
    """Return the following phase, or None at the terminal phase."""
    index = phase_index(phase) + 1
    if index >= len(WORKFLOW_PHASE_ORDER):
        return None
    return WORKFLOW_PHASE_ORDER[index]


def previous_phase(phase: WorkflowPhase) -> WorkflowPhase | None:
    """Return the preceding phase, or None at the initial phase."""
    index = phase_index(phase) - 1
    if index < 0:
        return None
    return WORKFLOW_PHASE_ORDER[index]


def has_next(phase: WorkflowPhase) -> bool:
    return next_phase(phase) is not None


def has_previous(phase: WorkflowPhase) -> bool:
    return previous_phase(phase) is not None


def next_label(phase: WorkflowPhase, locale: Locale = Locale.DE) -> str:
    """Label for a "next" button, or a placeholder at the terminal phase."""
    target = next_phase(phase)
    return label(target, locale) if target is not None else MISSING_LABEL


def previous_label(phase: WorkflowPhase, locale: Locale = Locale.DE) -> str:
    """Label for a "previous" button, or a placeholder at the initial phase."""
    target = previous_phase(phase)
    return label(target, locale) if target is not None else MISSING_LABEL


def phases_between(
    start: WorkflowPhase, end: WorkflowPhase
) -> tuple[WorkflowPhase, ...]:
    """Return the phases strictly between two phases, in workflow order."""
    low, high = sorted((phase_index(start), phase_index(end)))
    return WORKFLOW_PHASE_ORDER[low + 1 : high]
