"""Builders for labwork workflow test data."""

from __future__ import annotations

from datetime import date, time, timedelta
from uuid import UUID

from lwm_io.backend import InMemoryLabworkBackend
from lwm_schemas.labwork import (
    AssignmentEntry,
    AssignmentPlan,
    Authority,
    Blacklist,
    Course,
    Labwork,
    SchedulePreview,
    ScheduleEntry,
    Timetable,
    TimetableEntry,
)
from lwm_schemas.primitives import UserRole
from lwm_schemas.workflow import NavigationContext, WorkflowSnapshot

COURSE_ID = UUID("01890a5c-91c8-7b2a-9f51-9b40d0cf0001")
OTHER_COURSE_ID = UUID("01890a5c-91c8-7b2a-9f51-9b40d0cf0002")
LABWORK_ID = UUID("01890a5c-91c8-7b2a-9f51-9b40d0cf0101")
GROUP_ID = UUID("01890a5c-91c8-7b2a-9f51-9b40d0cf0201")
ROOM_ID = UUID("01890a5c-91c8-7b2a-9f51-9b40d0cf0301")
FIRST_DAY = date(2026, 10, 5)


def build_course(course_id: UUID = COURSE_ID) -> Course:
    return Course(id=course_id, label="Algorithmen und Programmierung", abbreviation="AP")


def build_labwork(
    labwork_id: UUID = LABWORK_ID, course_id: UUID = COURSE_ID
) -> Labwork:
    return Labwork(
        id=labwork_id,
        label="AP Praktikum WS 26/27",
        course=build_course(course_id),
        subscribable=True,
    )


def user_id(index: int) -> UUID:
    return UUID(int=0x01890A5C91C87B2A9F519B40D0CF1000 + index)


def build_schedule_entry(index: int = 0, labwork_id: UUID = LABWORK_ID) -> ScheduleEntry:
    return ScheduleEntry(
        id=UUID(int=0x01890A5C91C87B2A9F519B40D0CF2000 + index),
        labwork=labwork_id,
        group=GROUP_ID,
        room=ROOM_ID,
        supervisor=[user_id(900)],
        day=FIRST_DAY + timedelta(weeks=index),
        start=time(8, 0),
        end=time(9, 30),
    )


def build_schedule_entries(count: int) -> list[ScheduleEntry]:
    return [build_schedule_entry(index) for index in range(count)]


def build_preview(entry_count: int = 3) -> SchedulePreview:
    return SchedulePreview(
        labwork=LABWORK_ID, entries=build_schedule_entries(entry_count), groups=[]
    )


def build_snapshot(
    *,
    application_count: int = 0,
    preview: SchedulePreview | None = None,
    entries: list[ScheduleEntry] | None = None,
    report_card_count: int = 0,
) -> WorkflowSnapshot:
    """Build a snapshot whose count and schedule sources are all loaded."""
    snapshot = WorkflowSnapshot(labwork_id=LABWORK_ID, course_id=COURSE_ID)
    snapshot.apply_labwork(build_labwork())
    snapshot.apply_application_count(application_count)
    snapshot.apply_schedule_entries(entries or [])
    if preview is not None:
        snapshot.apply_schedule_preview(preview)
    snapshot.apply_report_card_count(report_card_count)
    return snapshot


def manager_authorities(course_id: UUID = COURSE_ID) -> list[Authority]:
    return [
        Authority(role=UserRole.EMPLOYEE),
        Authority(role=UserRole.COURSE_MANAGER, course=course_id),
    ]


def admin_authorities() -> list[Authority]:
    return [Authority(role=UserRole.ADMIN)]


def student_authorities() -> list[Authority]:
    return [Authority(role=UserRole.STUDENT)]


def build_context(authorities: list[Authority] | None = None) -> NavigationContext:
    return NavigationContext(
        course_id=COURSE_ID,
        labwork_id=LABWORK_ID,
        authorities=manager_authorities() if authorities is None else authorities,
    )


def build_backend(
    *,
    applicants: int = 12,
    assignments: int = 2,
    group_size: int = 5,
    with_timetable: bool = True,
) -> InMemoryLabworkBackend:
    """Build a backend seeded with one labwork ready for scheduling."""
    backend = InMemoryLabworkBackend(group_size=group_size)
    backend.add_labwork(build_labwork())
    backend.add_blacklist(
        Blacklist(
            id=UUID("01890a5c-91c8-7b2a-9f51-9b40d0cf0401"),
            label="Tag der Deutschen Einheit",
            day=date(2026, 10, 3),
            is_global=True,
        )
    )
    if with_timetable:
        backend.set_timetable(
            Timetable(
                id=UUID("01890a5c-91c8-7b2a-9f51-9b40d0cf0501"),
                labwork=LABWORK_ID,
                entries=[
                    TimetableEntry(
                        supervisor=[user_id(900)],
                        room=ROOM_ID,
                        day_index=0,
                        start=time(8, 0),
                        end=time(9, 30),
                    ),
                    TimetableEntry(
                        supervisor=[user_id(901)],
                        room=ROOM_ID,
                        day_index=2,
                        start=time(11, 30),
                        end=time(13, 0),
                    ),
                ],
                start=FIRST_DAY,
                blacklists=[],
            )
        )
    backend.set_assignment_plan(
        AssignmentPlan(
            id=UUID("01890a5c-91c8-7b2a-9f51-9b40d0cf0601"),
            labwork=LABWORK_ID,
            entries=[
                AssignmentEntry(index=index, label=f"Aufgabe {index + 1}")
                for index in range(assignments)
            ],
        )
    )
    backend.add_applications(LABWORK_ID, [user_id(index) for index in range(applicants)])
    return backend
