"""Unit tests for phase ordering, labels and adjacency."""

import pytest

from lwm_core.phases import (
    MISSING_LABEL,
    has_next,
    has_previous,
    label,
    next_label,
    next_phase,
    phases_between,
    previous_label,
    previous_phase,
)
from lwm_schemas.primitives import WORKFLOW_PHASE_ORDER, Locale, WorkflowPhase


@pytest.mark.unit
def test_phase_order_is_fixed() -> None:
    assert WORKFLOW_PHASE_ORDER == (
        WorkflowPhase.APPLICATION,
        WorkflowPhase.TIMETABLE,
        WorkflowPhase.BLACKLISTS,
        WorkflowPhase.GROUPS,
        WorkflowPhase.SCHEDULE,
        WorkflowPhase.CLOSING,
    )


@pytest.mark.unit
def test_next_and_previous_step_by_one() -> None:
    """Every step moves exactly one position."""
    for index, phase in enumerate(WORKFLOW_PHASE_ORDER[:-1]):
        assert next_phase(phase) is WORKFLOW_PHASE_ORDER[index + 1]
        assert previous_phase(WORKFLOW_PHASE_ORDER[index + 1]) is phase


@pytest.mark.unit
def test_sequence_ends_have_no_neighbour() -> None:
    assert next_phase(WorkflowPhase.CLOSING) is None
    assert previous_phase(WorkflowPhase.APPLICATION) is None
    assert not has_next(WorkflowPhase.CLOSING)
    assert not has_previous(WorkflowPhase.APPLICATION)
    assert has_next(WorkflowPhase.APPLICATION)
    assert has_previous(WorkflowPhase.CLOSING)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("phase", "german", "english"),
    [
        (WorkflowPhase.APPLICATION, "Ablaufplan", "Application"),
        (WorkflowPhase.TIMETABLE, "Rahmenplan", "Timetable"),
        (WorkflowPhase.BLACKLISTS, "Geblockte Tage", "Blocked days"),
        (WorkflowPhase.GROUPS, "Gruppen", "Groups"),
        (WorkflowPhase.SCHEDULE, "Staffelplan", "Schedule"),
        (WorkflowPhase.CLOSING, "Abschluss", "Closing"),
    ],
)
def test_labels_per_locale(phase: WorkflowPhase, german: str, english: str) -> None:
    assert label(phase) == german
    assert label(phase, Locale.EN) == english


@pytest.mark.unit
def test_button_labels_fall_back_to_placeholder() -> None:
    """Navigation button labels name the neighbour or show a placeholder."""
    assert next_label(WorkflowPhase.GROUPS) == "Staffelplan"
    assert previous_label(WorkflowPhase.GROUPS, Locale.EN) == "Blocked days"
    assert next_label(WorkflowPhase.CLOSING) == MISSING_LABEL
    assert previous_label(WorkflowPhase.APPLICATION) == MISSING_LABEL


@pytest.mark.unit
def test_phases_between_excludes_ends() -> None:
    assert phases_between(WorkflowPhase.TIMETABLE, WorkflowPhase.SCHEDULE) == (
        WorkflowPhase.BLACKLISTS,
        WorkflowPhase.GROUPS,
    )
    assert phases_between(WorkflowPhase.SCHEDULE, WorkflowPhase.TIMETABLE) == (
        WorkflowPhase.BLACKLISTS,
        WorkflowPhase.GROUPS,
    )
    assert phases_between(WorkflowPhase.GROUPS, WorkflowPhase.SCHEDULE) == ()
