"""In-memory backend implementing every workflow source and mutation port."""

from __future__ import annotations

import asyncio
from datetime import date, timedelta
from uuid import uuid4

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
)
from lwm_schemas.labwork import (
    AssignmentPlan,
    Blacklist,
    Labwork,
    SchedulePreview,
    ScheduleEntry,
    ScheduleGroup,
    Timetable,
)
from lwm_schemas.primitives import LabworkId, UserId, WorkflowOperation, WorkflowSource

DEFAULT_GROUP_SIZE = 10


class InMemoryLabworkBackend(
    LabworkSourceProtocol,
    TimetableSourceProtocol,
    AssignmentPlanSourceProtocol,
    ApplicationSourceProtocol,
    ScheduleSourceProtocol,
    ReportCardSourceProtocol,
    WorkflowMutationsProtocol,
):
    """Backend double holding labwork data in memory.

    Every call yields to the event loop once (plus an optional per-call delay)
    so concurrent requests interleave like real network calls. Failures can be
    injected per method name with :meth:`fail`.
    """

    def __init__(self, *, group_size: int = DEFAULT_GROUP_SIZE) -> None:
        """Initialize an empty backend.

        Args:
            group_size: Maximum members per generated group.

        Raises:
            ValueError: If group_size is not positive.
        """
        if group_size <= 0:
            raise ValueError("group_size must be positive")
        self._group_size = group_size
        self._labworks: dict[LabworkId, Labwork] = {}
        self._blacklists: list[Blacklist] = []
        self._timetables: dict[LabworkId, Timetable] = {}
        self._assignment_plans: dict[LabworkId, AssignmentPlan] = {}
        self._applicants: dict[LabworkId, list[UserId]] = {}
        self._groups: dict[LabworkId, list[ScheduleGroup]] = {}
        self._schedule_entries: dict[LabworkId, list[ScheduleEntry]] = {}
        self._report_cards: dict[LabworkId, int] = {}
        self._failures: dict[str, Exception] = {}
        self._delays: dict[str, float] = {}
        self.calls: list[str] = []

    # --------------------------------------------------------------- seeding

    def add_labwork(self, labwork: Labwork) -> None:
        self._labworks[labwork.id] = labwork

    def add_blacklist(self, blacklist: Blacklist) -> None:
        """Register a blocked day copied into newly created timetables."""
        self._blacklists.append(blacklist)

    def set_timetable(self, timetable: Timetable) -> None:
        self._timetables[timetable.labwork] = timetable

    def set_assignment_plan(self, plan: AssignmentPlan) -> None:
        self._assignment_plans[plan.labwork] = plan

    def add_applications(self, labwork_id: LabworkId, applicants: list[UserId]) -> None:
        self._applicants.setdefault(labwork_id, []).extend(applicants)

    def set_schedule_entries(
        self, labwork_id: LabworkId, entries: list[ScheduleEntry]
    ) -> None:
        self._schedule_entries[labwork_id] = list(entries)

    def set_report_card_count(self, labwork_id: LabworkId, count: int) -> None:
        self._report_cards[labwork_id] = count

    def fail(self, method: str, error: Exception | None = None) -> None:
        """Make every following call of a method raise.

        Args:
            method: Name of the backend method, e.g. ``fetch_schedule_entries``.
            error: Error to raise; an ``unavailable`` SourceError by default.
        """
        self._failures[method] = error or SourceError(
            SourceErrorInfo(
                code=SourceErrorCode.UNAVAILABLE,
                message=f"{method} is unavailable",
            )
        )

    def recover(self, method: str) -> None:
        self._failures.pop(method, None)

    def delay(self, method: str, seconds: float) -> None:
        """Hold every following call of a method for some seconds."""
        self._delays[method] = seconds

    # --------------------------------------------------------------- sources

    async def fetch_labwork(self, labwork_id: LabworkId) -> Labwork:
        await self._enter("fetch_labwork")
        labwork = self._labworks.get(labwork_id)
        if labwork is None:
            raise SourceNotFoundError(
                SourceErrorInfo(
                    code=SourceErrorCode.NOT_FOUND,
                    message=f"Labwork {labwork_id} not found",
                    source=WorkflowSource.LABWORK,
                )
            )
        return labwork

    async def fetch_or_create_timetable(self, labwork: Labwork) -> Timetable:
        await self._enter("fetch_or_create_timetable")
        timetable = self._timetables.get(labwork.id)
        if timetable is None:
            timetable = Timetable(
                id=uuid4(),
                labwork=labwork.id,
                entries=[],
                start=None,
                blacklists=list(self._blacklists),
            )
            self._timetables[labwork.id] = timetable
        return timetable

    async def fetch_or_create_assignment_plan(self, labwork: Labwork) -> AssignmentPlan:
        await self._enter("fetch_or_create_assignment_plan")
        plan = self._assignment_plans.get(labwork.id)
        if plan is None:
            plan = AssignmentPlan(id=uuid4(), labwork=labwork.id, entries=[])
            self._assignment_plans[labwork.id] = plan
        return plan

    async def fetch_application_count(self, labwork: Labwork) -> int:
        await self._enter("fetch_application_count")
        return len(self._applicants.get(labwork.id, []))

    async def fetch_schedule_entries(self, labwork: Labwork) -> list[ScheduleEntry]:
        await self._enter("fetch_schedule_entries")
        return list(self._schedule_entries.get(labwork.id, []))

    async def fetch_report_card_entry_count(self, labwork: Labwork) -> int:
        await self._enter("fetch_report_card_entry_count")
        return self._report_cards.get(labwork.id, 0)

    # ------------------------------------------------------------- mutations

    async def preview_schedule(self, labwork: Labwork) -> SchedulePreview:
        await self._enter("preview_schedule")
        applicants = self._applicants.get(labwork.id, [])
        if not applicants:
            raise self._rejected(WorkflowOperation.PREVIEW_SCHEDULE, "no applications")
        timetable = self._timetables.get(labwork.id)
        if timetable is None or not timetable.entries:
            raise self._rejected(
                WorkflowOperation.PREVIEW_SCHEDULE, "timetable has no entries"
            )
        plan = self._assignment_plans.get(labwork.id)
        if plan is None or not plan.entries:
            raise self._rejected(
                WorkflowOperation.PREVIEW_SCHEDULE, "assignment plan has no entries"
            )

        groups = [
            ScheduleGroup(
                id=uuid4(),
                label=chr(ord("A") + index) if index < 26 else f"G{index + 1}",
                labwork=labwork.id,
                members=applicants[offset : offset + self._group_size],
            )
            for index, offset in enumerate(
                range(0, len(applicants), self._group_size)
            )
        ]
        blocked = {blacklist.day for blacklist in timetable.blacklists}
        first_day = timetable.start or date.today()
        entries: list[ScheduleEntry] = []
        for index, group in enumerate(groups):
            slot = timetable.entries[index % len(timetable.entries)]
            day = _next_weekday(first_day, slot.day_index)
            for _ in plan.entries:
                while day in blocked:
                    day += timedelta(weeks=1)
                entries.append(
                    ScheduleEntry(
                        id=uuid4(),
                        labwork=labwork.id,
                        group=group.id,
                        room=slot.room,
                        supervisor=list(slot.supervisor),
                        day=day,
                        start=slot.start,
                        end=slot.end,
                    )
                )
                day += timedelta(weeks=1)
        entries.sort(key=lambda entry: (entry.day, entry.start))
        return SchedulePreview(
            labwork=labwork.id, entries=entries, groups=groups, conflict_value=0
        )

    async def commit_preview(
        self, labwork: Labwork, preview: SchedulePreview
    ) -> list[ScheduleEntry]:
        await self._enter("commit_preview")
        if self._schedule_entries.get(labwork.id):
            raise self._rejected(
                WorkflowOperation.COMMIT_PREVIEW, "schedule entries already exist"
            )
        self._groups[labwork.id] = list(preview.groups)
        self._schedule_entries[labwork.id] = list(preview.entries)
        return list(preview.entries)

    async def discard_preview(self, labwork: Labwork, preview: SchedulePreview) -> None:
        await self._enter("discard_preview")

    async def create_schedule_entries(
        self, labwork: Labwork, entries: list[ScheduleEntry]
    ) -> list[ScheduleEntry]:
        await self._enter("create_schedule_entries")
        if self._schedule_entries.get(labwork.id):
            raise self._rejected(
                WorkflowOperation.CREATE_ENTRIES, "schedule entries already exist"
            )
        self._schedule_entries[labwork.id] = list(entries)
        return list(entries)

    async def delete_schedule_entries(self, labwork: Labwork) -> None:
        await self._enter("delete_schedule_entries")
        if self._report_cards.get(labwork.id, 0) > 0:
            raise self._rejected(
                WorkflowOperation.DELETE_ENTRIES, "report cards still exist"
            )
        self._schedule_entries.pop(labwork.id, None)
        self._groups.pop(labwork.id, None)

    async def create_report_cards(self, labwork: Labwork) -> int:
        await self._enter("create_report_cards")
        entries = self._schedule_entries.get(labwork.id, [])
        if not entries:
            raise self._rejected(
                WorkflowOperation.CREATE_REPORT_CARDS, "no schedule entries"
            )
        plan = self._assignment_plans.get(labwork.id)
        assignments = len(plan.entries) if plan is not None else 0
        groups = self._groups.get(labwork.id)
        if groups:
            students = sum(len(group.members) for group in groups)
        else:
            students = len(self._applicants.get(labwork.id, []))
        count = students * assignments
        self._report_cards[labwork.id] = count
        return count

    async def delete_report_cards(self, labwork: Labwork) -> None:
        await self._enter("delete_report_cards")
        self._report_cards.pop(labwork.id, None)

    # -------------------------------------------------------------- internals

    async def _enter(self, method: str) -> None:
        self.calls.append(method)
        await asyncio.sleep(self._delays.get(method, 0))
        error = self._failures.get(method)
        if error is not None:
            raise error

    @staticmethod
    def _rejected(operation: WorkflowOperation, reason: str) -> SourceError:
        return SourceError(
            SourceErrorInfo(
                code=SourceErrorCode.REJECTED,
                message=f"{operation} rejected: {reason}",
                operation=operation,
            )
        )


def _next_weekday(start: date, day_index: int) -> date:
    return start + timedelta(days=(day_index - start.weekday()) % 7)
