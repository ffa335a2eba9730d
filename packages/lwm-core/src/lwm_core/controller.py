"""Workflow controller for a single labwork view."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Coroutine
from datetime import UTC, datetime
from typing import Any, TypeVar

from lwm_core.guards import (
    derive_phase_states,
    group_view_mode,
    is_completed,
    is_locked,
)
from lwm_core.permissions import can_administer
from lwm_core.phases import (
    label,
    next_label,
    next_phase,
    phase_index,
    phases_between,
    previous_label,
    previous_phase,
)
from lwm_core.ports.sources import WorkflowMutationsProtocol, WorkflowSources
from lwm_core.ports.workflow import (
    AlertSinkProtocol,
    LogSinkProtocol,
    WorkflowError,
    WorkflowErrorCode,
    WorkflowErrorDetails,
    WorkflowErrorInfo,
    build_controller_activated_log,
    build_controller_closed_log,
    build_mutation_completed_log,
    build_mutation_failed_log,
    build_phase_changed_log,
    build_source_failed_log,
    build_source_loaded_log,
    build_transition_refused_log,
)
from lwm_schemas.config import WorkflowConfig
from lwm_schemas.labwork import Labwork, ScheduleEntry
from lwm_schemas.logs import LogEntry
from lwm_schemas.primitives import (
    GroupViewMode,
    Locale,
    LockablePhase,
    Timestamp,
    WorkflowOperation,
    WorkflowPhase,
    WorkflowSource,
)
from lwm_schemas.workflow import NavigationContext, PhaseState, WorkflowSnapshot

T = TypeVar("T")

type Listener = Callable[[WorkflowController], None]


class WorkflowController:
    """Keeps one labwork's workflow snapshot current and gates navigation.

    Sources are requested concurrently on :meth:`activate` and applied to the
    snapshot in whatever order they resolve. Phase flags are re-derived after
    every change and listeners are notified so the view can re-render.
    """

    def __init__(
        self,
        context: NavigationContext,
        sources: WorkflowSources,
        mutations: WorkflowMutationsProtocol,
        *,
        log_sink: LogSinkProtocol | None = None,
        alert_sink: AlertSinkProtocol | None = None,
        config: WorkflowConfig | None = None,
        clock: Callable[[], Timestamp] | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            context: Labwork identity and actor authorities of the view.
            sources: Read-side collaborators.
            mutations: Write-side collaborator.
            log_sink: Optional sink for structured log entries.
            alert_sink: Optional sink for user-facing failure notifications.
            config: Workflow configuration, defaults when omitted.
            clock: Optional timestamp factory.
        """
        self._context = context
        self._sources = sources
        self._mutations = mutations
        self._log_sink = log_sink
        self._alert_sink = alert_sink
        self._config = config or WorkflowConfig()
        self._locale = Locale(self._config.locale)
        self._clock = clock or _now_timestamp
        self._can_administer = can_administer(context.authorities, context.course_id)
        self._snapshot = WorkflowSnapshot(
            labwork_id=context.labwork_id, course_id=context.course_id
        )
        self._current = WorkflowPhase(self._config.initial_phase)
        self._tasks: dict[WorkflowSource, asyncio.Task[None]] = {}
        self._load_errors: dict[WorkflowSource, WorkflowErrorInfo] = {}
        self._listeners: list[Listener] = []
        self._pending_logs: list[LogEntry] = []
        self._mutation: WorkflowOperation | None = None
        self._activated = False
        self._dependents_started = False
        self._closed = False
        self._phase_states = self._derive()

    # ----------------------------------------------------------------- state

    @property
    def snapshot(self) -> WorkflowSnapshot:
        return self._snapshot

    @property
    def current_phase(self) -> WorkflowPhase:
        return self._current

    @property
    def current_label(self) -> str:
        return label(self._current, self._locale)

    @property
    def next_label(self) -> str:
        return next_label(self._current, self._locale)

    @property
    def previous_label(self) -> str:
        return previous_label(self._current, self._locale)

    @property
    def can_administer(self) -> bool:
        return self._can_administer

    @property
    def phase_states(self) -> list[PhaseState]:
        """Flags of every phase, derived from the latest snapshot."""
        return list(self._phase_states)

    @property
    def load_errors(self) -> dict[WorkflowSource, WorkflowErrorInfo]:
        """Latest failure per source that has not recovered yet."""
        return dict(self._load_errors)

    @property
    def pending_sources(self) -> set[WorkflowSource]:
        """Sources with a request still in flight."""
        return {source for source, task in self._tasks.items() if not task.done()}

    @property
    def mutation_in_flight(self) -> WorkflowOperation | None:
        """Mutation currently awaiting its result; controls should be disabled."""
        return self._mutation

    @property
    def closed(self) -> bool:
        return self._closed

    def is_completed(self, phase: WorkflowPhase) -> bool:
        return is_completed(phase, self._snapshot)

    def is_locked(self, phase: LockablePhase) -> bool:
        return is_locked(phase, self._snapshot, self._can_administer)

    def group_view_mode(self) -> GroupViewMode:
        return group_view_mode(self._snapshot)

    def add_listener(self, listener: Listener) -> None:
        """Register a callback invoked after every snapshot change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ------------------------------------------------------------- lifecycle

    async def activate(self) -> None:
        """Start loading every source.

        Returns once the requests are in flight; use :meth:`settle` to wait
        for them.

        Raises:
            WorkflowError: If the controller was already activated or closed.
        """
        if self._activated or self._closed:
            raise WorkflowError(
                WorkflowErrorInfo(
                    code=WorkflowErrorCode.INVALID_STATE,
                    message="Workflow controller can only be activated once",
                )
            )
        self._activated = True
        self._queue_log(
            build_controller_activated_log(self._clock(), self._context.labwork_id)
        )
        self._start(WorkflowSource.LABWORK, self._load_labwork())
        await self._flush_logs()

    async def refresh(self, source: WorkflowSource) -> None:
        """Request one source again; the newer result supersedes the older.

        Raises:
            WorkflowError: If the controller is not active or the labwork is
                not resolved yet.
        """
        source = WorkflowSource(source)
        if not self._activated or self._closed:
            raise WorkflowError(
                WorkflowErrorInfo(
                    code=WorkflowErrorCode.INVALID_STATE,
                    message="Workflow controller is not active",
                    details=WorkflowErrorDetails(source=source),
                )
            )
        if source is WorkflowSource.LABWORK:
            self._start(source, self._load_labwork())
            return
        labwork = self._snapshot.labwork
        if labwork is None:
            raise WorkflowError(
                WorkflowErrorInfo(
                    code=WorkflowErrorCode.INVALID_STATE,
                    message="Labwork is not loaded",
                    details=WorkflowErrorDetails(source=source),
                )
            )
        self._start(source, self._dependent_load(source, labwork))

    async def settle(self) -> None:
        """Wait until no source request is in flight."""
        while True:
            pending = [task for task in self._tasks.values() if not task.done()]
            if not pending:
                break
            await asyncio.wait(pending)
        await self._flush_logs()

    async def close(self) -> None:
        """Release every outstanding request; late results are discarded."""
        if self._closed:
            return
        self._closed = True
        self._listeners.clear()
        pending = [task for task in self._tasks.values() if not task.done()]
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        self._tasks.clear()
        self._queue_log(
            build_controller_closed_log(
                self._clock(), self._context.labwork_id, len(pending)
            )
        )
        await self._flush_logs()

    # ------------------------------------------------------------ navigation

    def can_enter(self, phase: WorkflowPhase) -> bool:
        """Whether the cursor may move forward onto a phase.

        Groups has no binary lock; administrators may always open it and its
        view mode decides what is shown.
        """
        phase = WorkflowPhase(phase)
        if phase is WorkflowPhase.GROUPS:
            return self._can_administer
        return not is_locked(phase, self._snapshot, self._can_administer)  # type: ignore[arg-type]

    def advance(self) -> WorkflowPhase:
        """Move to the next phase if it is not locked.

        Returns:
            WorkflowPhase: The new current phase.

        Raises:
            WorkflowError: If there is no next phase or it is locked.
        """
        target = next_phase(self._current)
        if target is None:
            self._refuse(None, f"{self._current} is the last phase")
        if not self.can_enter(target):
            self._refuse(target, f"{target} is locked")
        self._move_to(target)
        return target

    def retreat(self) -> WorkflowPhase:
        """Move to the previous phase; stepping back needs no lock check.

        Returns:
            WorkflowPhase: The new current phase.

        Raises:
            WorkflowError: If the cursor is on the first phase.
        """
        target = previous_phase(self._current)
        if target is None:
            self._refuse(None, f"{self._current} is the first phase")
        self._move_to(target)
        return target

    def jump(self, phase: WorkflowPhase) -> WorkflowPhase:
        """Move to any phase; forward only across completed phases.

        A forward jump applies the same entry check as :meth:`advance`, so
        a non-administrator cannot reach a later phase by jumping. Backward
        jumps are always allowed.

        Returns:
            WorkflowPhase: The new current phase.

        Raises:
            WorkflowError: If a phase between the cursor and the target is
                not completed, or the target cannot be entered.
        """
        target = WorkflowPhase(phase)
        if phase_index(target) > phase_index(self._current):
            for between in phases_between(self._current, target):
                if not is_completed(between, self._snapshot):
                    self._refuse(target, f"{between} is not completed")
            if not self.can_enter(target):
                self._refuse(target, f"{target} is locked")
        if target is not self._current:
            self._move_to(target)
        return target

    def jump_to_groups(self) -> None:
        """Put the cursor on the groups phase."""
        if self._current is not WorkflowPhase.GROUPS:
            self._move_to(WorkflowPhase.GROUPS)

    # ------------------------------------------------------------- mutations

    async def request_preview(self) -> bool:
        """Ask the backend for a candidate schedule and hold it.

        Raises:
            WorkflowError: If not permitted, the schedule is not loaded or
                groups is not waiting for a preview.
        """
        operation = WorkflowOperation.PREVIEW_SCHEDULE
        labwork = self._check_mutation(operation)
        self._require_loaded(operation, WorkflowSource.SCHEDULE_ENTRIES)
        if group_view_mode(self._snapshot) is not GroupViewMode.WAITING_FOR_PREVIEW:
            self._invalid_state(operation, "groups phase is not waiting for a preview")
        return await self._mutate(
            operation,
            self._mutations.preview_schedule(labwork),
            self._snapshot.apply_schedule_preview,
        )

    async def commit_preview(self) -> bool:
        """Persist the held preview as the schedule.

        Raises:
            WorkflowError: If not permitted or no preview is held.
        """
        operation = WorkflowOperation.COMMIT_PREVIEW
        labwork = self._check_mutation(operation)
        preview = self._snapshot.schedule_preview
        if preview is None:
            self._invalid_state(operation, "no schedule preview to commit")

        return await self._mutate(
            operation,
            self._mutations.commit_preview(labwork, preview),
            self._apply_committed_entries,
            supersedes=WorkflowSource.SCHEDULE_ENTRIES,
        )

    async def discard_preview(self) -> bool:
        """Drop the held preview and return to the groups phase.

        Raises:
            WorkflowError: If not permitted or no preview is held.
        """
        operation = WorkflowOperation.DISCARD_PREVIEW
        labwork = self._check_mutation(operation)
        preview = self._snapshot.schedule_preview
        if preview is None:
            self._invalid_state(operation, "no schedule preview to discard")

        def apply(_: None) -> None:
            self._snapshot.clear_schedule_preview()
            self.jump_to_groups()

        return await self._mutate(
            operation, self._mutations.discard_preview(labwork, preview), apply
        )

    async def create_entries(self, entries: list[ScheduleEntry]) -> bool:
        """Persist schedule entries directly.

        Raises:
            WorkflowError: If not permitted, no entries are given or a
                schedule is already committed.
        """
        operation = WorkflowOperation.CREATE_ENTRIES
        labwork = self._check_mutation(operation)
        self._require_loaded(operation, WorkflowSource.SCHEDULE_ENTRIES)
        if not entries:
            self._invalid_state(operation, "no schedule entries to create")
        if self._snapshot.has_schedule_entries:
            self._invalid_state(operation, "schedule entries already exist")
        return await self._mutate(
            operation,
            self._mutations.create_schedule_entries(labwork, list(entries)),
            self._apply_committed_entries,
            supersedes=WorkflowSource.SCHEDULE_ENTRIES,
        )

    async def delete_entries(self) -> bool:
        """Delete the committed schedule and return to the groups phase.

        Raises:
            WorkflowError: If not permitted or report cards still exist or
                are not loaded yet.
        """
        operation = WorkflowOperation.DELETE_ENTRIES
        labwork = self._check_mutation(operation)
        self._require_loaded(operation, WorkflowSource.REPORT_CARDS)
        if self._snapshot.has_report_cards:
            self._invalid_state(operation, "report cards must be deleted first")

        def apply(_: None) -> None:
            self._snapshot.apply_schedule_entries([])
            self.jump_to_groups()

        return await self._mutate(
            operation,
            self._mutations.delete_schedule_entries(labwork),
            apply,
            supersedes=WorkflowSource.SCHEDULE_ENTRIES,
        )

    async def create_report_cards(self) -> bool:
        """Generate report cards for the committed schedule.

        Raises:
            WorkflowError: If not permitted or no schedule is committed.
        """
        operation = WorkflowOperation.CREATE_REPORT_CARDS
        labwork = self._check_mutation(operation)
        if not self._snapshot.has_schedule_entries:
            self._invalid_state(operation, "report cards require schedule entries")
        return await self._mutate(
            operation,
            self._mutations.create_report_cards(labwork),
            self._snapshot.apply_report_card_count,
            supersedes=WorkflowSource.REPORT_CARDS,
        )

    async def delete_report_cards(self) -> bool:
        """Delete every report card.

        Raises:
            WorkflowError: If not permitted.
        """
        operation = WorkflowOperation.DELETE_REPORT_CARDS
        labwork = self._check_mutation(operation)
        return await self._mutate(
            operation,
            self._mutations.delete_report_cards(labwork),
            lambda _: self._snapshot.apply_report_card_count(0),
            supersedes=WorkflowSource.REPORT_CARDS,
        )

    # -------------------------------------------------------------- internals

    def _derive(self) -> list[PhaseState]:
        return derive_phase_states(self._snapshot, self._can_administer, self._locale)

    def _changed(self) -> None:
        if self._closed:
            return
        self._phase_states = self._derive()
        for listener in list(self._listeners):
            listener(self)

    def _start(
        self, source: WorkflowSource, coro: Coroutine[Any, Any, None]
    ) -> None:
        self._cancel_load(source)
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks[source] = task
        task.add_done_callback(lambda done: self._forget(source, done))

    def _forget(self, source: WorkflowSource, task: asyncio.Task[None]) -> None:
        if self._tasks.get(source) is task:
            del self._tasks[source]

    def _cancel_load(self, source: WorkflowSource) -> None:
        task = self._tasks.pop(source, None)
        if task is not None and not task.done():
            task.cancel()

    async def _load_labwork(self) -> None:
        loaded = await self._load(
            WorkflowSource.LABWORK,
            self._sources.labworks.fetch_labwork(self._context.labwork_id),
            self._snapshot.apply_labwork,
        )
        labwork = self._snapshot.labwork
        if loaded and labwork is not None and not self._dependents_started:
            self._dependents_started = True
            for source in (
                WorkflowSource.TIMETABLE,
                WorkflowSource.ASSIGNMENT_PLAN,
                WorkflowSource.APPLICATIONS,
                WorkflowSource.SCHEDULE_ENTRIES,
                WorkflowSource.REPORT_CARDS,
            ):
                self._start(source, self._dependent_load(source, labwork))

    async def _dependent_load(self, source: WorkflowSource, labwork: Labwork) -> None:
        sources = self._sources
        snapshot = self._snapshot
        match source:
            case WorkflowSource.TIMETABLE:
                await self._load(
                    source,
                    sources.timetables.fetch_or_create_timetable(labwork),
                    snapshot.apply_timetable,
                )
            case WorkflowSource.ASSIGNMENT_PLAN:
                await self._load(
                    source,
                    sources.assignment_plans.fetch_or_create_assignment_plan(labwork),
                    snapshot.apply_assignment_plan,
                )
            case WorkflowSource.APPLICATIONS:
                await self._load(
                    source,
                    sources.applications.fetch_application_count(labwork),
                    snapshot.apply_application_count,
                )
            case WorkflowSource.SCHEDULE_ENTRIES:
                await self._load(
                    source,
                    sources.schedules.fetch_schedule_entries(labwork),
                    snapshot.apply_schedule_entries,
                )
            case WorkflowSource.REPORT_CARDS:
                await self._load(
                    source,
                    sources.report_cards.fetch_report_card_entry_count(labwork),
                    snapshot.apply_report_card_count,
                )

    async def _load(
        self,
        source: WorkflowSource,
        request: Awaitable[T],
        apply: Callable[[T], None],
    ) -> bool:
        try:
            value = await request
            if self._closed:
                return False
            apply(value)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if not self._closed:
                self._record_load_failure(source, exc)
                await self._flush_logs()
            return False
        self._load_errors.pop(source, None)
        self._queue_log(
            build_source_loaded_log(self._clock(), self._context.labwork_id, source)
        )
        self._changed()
        await self._flush_logs()
        return True

    def _record_load_failure(self, source: WorkflowSource, exc: Exception) -> None:
        reason = str(exc) or type(exc).__name__
        self._snapshot.mark_failed(source)
        info = WorkflowErrorInfo(
            code=WorkflowErrorCode.LOAD_FAILED,
            message=f"Failed to load {source}",
            details=WorkflowErrorDetails(source=source, reason=reason),
        )
        self._load_errors[source] = info
        self._queue_log(
            build_source_failed_log(
                self._clock(), self._context.labwork_id, source, reason
            )
        )
        self._alert(info)
        self._changed()

    def _check_mutation(self, operation: WorkflowOperation) -> Labwork:
        if not self._can_administer:
            raise WorkflowError(
                WorkflowErrorInfo(
                    code=WorkflowErrorCode.PERMISSION_DENIED,
                    message="Only course managers and admins can change the workflow",
                    details=WorkflowErrorDetails(operation=operation),
                )
            )
        if self._mutation is not None:
            raise WorkflowError(
                WorkflowErrorInfo(
                    code=WorkflowErrorCode.MUTATION_IN_PROGRESS,
                    message=f"{self._mutation} is still in progress",
                    details=WorkflowErrorDetails(operation=operation),
                )
            )
        labwork = self._snapshot.labwork
        if self._closed or labwork is None:
            self._invalid_state(operation, "workflow is not loaded")
        return labwork

    def _require_loaded(
        self, operation: WorkflowOperation, source: WorkflowSource
    ) -> None:
        if not self._snapshot.is_loaded(source):
            self._invalid_state(operation, f"{source} is not loaded")

    def _invalid_state(self, operation: WorkflowOperation, reason: str) -> Any:
        raise WorkflowError(
            WorkflowErrorInfo(
                code=WorkflowErrorCode.INVALID_STATE,
                message=reason,
                details=WorkflowErrorDetails(
                    phase=self._current, operation=operation, reason=reason
                ),
            )
        )

    def _apply_committed_entries(self, entries: list[ScheduleEntry]) -> None:
        """Record committed entries; an empty schedule puts the cursor on groups."""
        self._snapshot.apply_schedule_entries(entries)
        self._snapshot.clear_schedule_preview()
        if not entries:
            self.jump_to_groups()

    async def _mutate(
        self,
        operation: WorkflowOperation,
        request: Awaitable[T],
        apply: Callable[[T], None],
        *,
        supersedes: WorkflowSource | None = None,
    ) -> bool:
        self._mutation = operation
        try:
            try:
                result = await request
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                if not self._closed:
                    self._record_mutation_failure(operation, exc)
                return False
            if self._closed:
                return False
            try:
                apply(result)
            except Exception as exc:
                self._record_mutation_failure(operation, exc)
                return False
            if supersedes is not None:
                self._cancel_load(supersedes)
            self._queue_log(
                build_mutation_completed_log(
                    self._clock(), self._context.labwork_id, self._current, operation
                )
            )
            self._changed()
            return True
        finally:
            self._mutation = None
            await self._flush_logs()

    def _record_mutation_failure(
        self, operation: WorkflowOperation, exc: Exception
    ) -> None:
        reason = str(exc) or type(exc).__name__
        info = WorkflowErrorInfo(
            code=WorkflowErrorCode.MUTATION_FAILED,
            message=f"{operation} failed",
            details=WorkflowErrorDetails(
                phase=self._current, operation=operation, reason=reason
            ),
        )
        self._queue_log(
            build_mutation_failed_log(
                self._clock(), self._context.labwork_id, self._current, operation, reason
            )
        )
        self._alert(info)

    def _move_to(self, target: WorkflowPhase) -> None:
        previous = self._current
        self._current = target
        self._queue_log(
            build_phase_changed_log(
                self._clock(), self._context.labwork_id, previous, target
            )
        )
        self._changed()

    def _refuse(self, target: WorkflowPhase | None, reason: str) -> Any:
        self._queue_log(
            build_transition_refused_log(
                self._clock(), self._context.labwork_id, self._current, target, reason
            )
        )
        raise WorkflowError(
            WorkflowErrorInfo(
                code=WorkflowErrorCode.INVALID_TRANSITION,
                message=reason,
                details=WorkflowErrorDetails(
                    phase=self._current, target_phase=target, reason=reason
                ),
            )
        )

    def _alert(self, info: WorkflowErrorInfo) -> None:
        if self._alert_sink is not None:
            self._alert_sink.alert(info.to_error_response())

    def _queue_log(self, entry: LogEntry) -> None:
        if self._log_sink is not None:
            self._pending_logs.append(entry)

    async def _flush_logs(self) -> None:
        """Emit queued entries; synchronous navigation only queues them."""
        while self._pending_logs:
            entry = self._pending_logs.pop(0)
            await self._log_sink.emit_log(entry)  # type: ignore[union-attr]


def _now_timestamp() -> Timestamp:
    value = datetime.now(tz=UTC).isoformat()
    return value.replace("+00:00", "Z")
