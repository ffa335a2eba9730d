"""Unit tests for the workflow snapshot and navigation context."""

from __future__ import annotations

from uuid import UUID

import pytest
from pydantic import ValidationError

from lwm_schemas.primitives import WorkflowSource
from lwm_schemas.workflow import NavigationContext, WorkflowSnapshot
from tests.helpers.labwork_factory import (
    COURSE_ID,
    LABWORK_ID,
    OTHER_COURSE_ID,
    build_labwork,
    build_preview,
    build_schedule_entries,
    build_snapshot,
    manager_authorities,
)


@pytest.mark.unit
def test_new_snapshot_has_nothing_loaded() -> None:
    """Fields start unknown, which is distinct from empty."""
    snapshot = WorkflowSnapshot(labwork_id=LABWORK_ID, course_id=COURSE_ID)

    assert snapshot.schedule_entries is None
    assert snapshot.report_card_count is None
    assert all(not snapshot.is_loaded(source) for source in WorkflowSource)


@pytest.mark.unit
def test_identity_fields_cannot_be_reassigned() -> None:
    """Labwork and course identity stay fixed."""
    snapshot = WorkflowSnapshot(labwork_id=LABWORK_ID, course_id=COURSE_ID)

    with pytest.raises(AttributeError):
        snapshot.labwork_id = UUID("01890a5c-91c8-7b2a-9f51-9b40d0cfffff")
    with pytest.raises(AttributeError):
        snapshot.course_id = OTHER_COURSE_ID


@pytest.mark.unit
def test_apply_labwork_rejects_foreign_course() -> None:
    """A labwork of another course does not fit the snapshot."""
    snapshot = WorkflowSnapshot(labwork_id=LABWORK_ID, course_id=COURSE_ID)

    with pytest.raises(ValueError):
        snapshot.apply_labwork(build_labwork(course_id=OTHER_COURSE_ID))
    assert not snapshot.is_loaded(WorkflowSource.LABWORK)


@pytest.mark.unit
def test_empty_entries_are_loaded_not_unknown() -> None:
    """An empty schedule is a loaded value."""
    snapshot = build_snapshot()

    assert snapshot.schedule_entries == []
    assert snapshot.is_loaded(WorkflowSource.SCHEDULE_ENTRIES)
    assert not snapshot.has_schedule_entries


@pytest.mark.unit
def test_committed_entries_replace_preview() -> None:
    """Preview and committed entries never coexist."""
    snapshot = build_snapshot(application_count=4, preview=build_preview(2))

    snapshot.apply_schedule_entries(build_schedule_entries(2))

    assert snapshot.schedule_preview is None
    assert snapshot.has_schedule_entries


@pytest.mark.unit
def test_preview_rejected_while_entries_exist() -> None:
    """A preview cannot be held next to a committed schedule."""
    snapshot = build_snapshot(entries=build_schedule_entries(1))

    with pytest.raises(ValueError):
        snapshot.apply_schedule_preview(build_preview())
    assert snapshot.schedule_preview is None


@pytest.mark.unit
def test_report_cards_require_entries() -> None:
    """Report cards cannot exist next to a known empty schedule."""
    snapshot = build_snapshot()

    with pytest.raises(ValueError):
        snapshot.apply_report_card_count(3)
    assert snapshot.report_card_count == 0


@pytest.mark.unit
def test_entries_cannot_be_cleared_while_report_cards_exist() -> None:
    """Clearing the schedule under existing report cards is rejected."""
    snapshot = build_snapshot(entries=build_schedule_entries(2), report_card_count=4)

    with pytest.raises(ValueError):
        snapshot.apply_schedule_entries([])
    assert snapshot.has_schedule_entries


@pytest.mark.unit
def test_report_cards_accepted_before_entries_load() -> None:
    """Sources may resolve in any order."""
    snapshot = WorkflowSnapshot(labwork_id=LABWORK_ID, course_id=COURSE_ID)

    snapshot.apply_report_card_count(6)
    snapshot.apply_schedule_entries(build_schedule_entries(3))

    assert snapshot.report_card_count == 6
    assert snapshot.has_report_cards


@pytest.mark.unit
def test_mark_failed_degrades_to_unknown() -> None:
    """A failed reload drops the previous value."""
    snapshot = build_snapshot(application_count=7)

    snapshot.mark_failed(WorkflowSource.APPLICATIONS)

    assert snapshot.application_count is None
    assert not snapshot.is_loaded(WorkflowSource.APPLICATIONS)
    assert WorkflowSource.APPLICATIONS in snapshot.failed_sources

    snapshot.apply_application_count(8)
    assert WorkflowSource.APPLICATIONS not in snapshot.failed_sources


@pytest.mark.unit
def test_negative_counts_rejected() -> None:
    snapshot = WorkflowSnapshot(labwork_id=LABWORK_ID, course_id=COURSE_ID)

    with pytest.raises(ValueError):
        snapshot.apply_application_count(-1)
    with pytest.raises(ValueError):
        snapshot.apply_report_card_count(-1)


@pytest.mark.unit
def test_navigation_context_from_route_params() -> None:
    """Route parameters resolve the labwork identity."""
    context = NavigationContext.from_route_params(
        {"cid": str(COURSE_ID), "lid": str(LABWORK_ID)}, manager_authorities()
    )

    assert context.course_id == COURSE_ID
    assert context.labwork_id == LABWORK_ID
    assert len(context.authorities) == 2


@pytest.mark.unit
@pytest.mark.parametrize(
    "params",
    [
        {"cid": str(COURSE_ID)},
        {"cid": "not-a-uuid", "lid": str(LABWORK_ID)},
    ],
)
def test_navigation_context_rejects_bad_route(params: dict[str, str]) -> None:
    with pytest.raises(ValueError):
        NavigationContext.from_route_params(params, [])


@pytest.mark.unit
def test_navigation_context_is_strict() -> None:
    """Identity must be passed as UUIDs."""
    with pytest.raises(ValidationError):
        NavigationContext(course_id=str(COURSE_ID), labwork_id=LABWORK_ID)
