"""ResourceListViewModel: paginated, filterable, bulk-actionable list state.

One instance backs one list screen (audit logs, users, pincodes...). It owns
the filter snapshots, the current page, the row selection and the realtime
poller; the network is reached only through injected callables.

Requests are numbered from a single counter shared by user-triggered,
poll-triggered and post-mutation fetches. A response is applied only if it
belongs to the most recently issued request, so a slow, superseded response
can never overwrite a newer page. Exports do not take part in the
numbering and are never discarded by list browsing.
"""

from __future__ import annotations

import dataclasses
import itertools
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Any, Dict, Hashable, Iterable, Mapping, Optional, Sequence, Tuple

from adminconsole.application.interfaces import (
    PageFetcher,
    ResourceAction,
    ResourceGateway,
    RowExporter,
    StatsFetcher,
)
from adminconsole.application.presets import ResourceDefinition
from adminconsole.application.services.csv_exporter import SUPPORTED_FORMATS, CsvExporter
from adminconsole.application.services.filter_store import FilterStore
from adminconsole.application.services.page_payload import (
    items_from_payload,
    page_from_payload,
    stats_from_payload,
)
from adminconsole.domain.models import (
    EMPTY_PAGE,
    BulkActionResult,
    ExportColumn,
    ExportResult,
    FilterField,
    FilterSet,
    Page,
    PageRequest,
)
from adminconsole.errors import (
    AdminConsoleError,
    ControllerDisposedError,
    ExportError,
    TransportError,
)
from adminconsole.errors.handler import ErrorHandler
from adminconsole.events.bus import EventBus
from adminconsole.events.list_events import (
    BulkActionCompletedEvent,
    ExportCompletedEvent,
    FiltersCommittedEvent,
    PageLoadedEvent,
)
from adminconsole.infrastructure.services.scheduler import ScheduledTask, Scheduler, ThreadingScheduler
from adminconsole.settings.manager import ListSettings

from .base import BaseViewModel
from .selection import SelectionModel
from .signal import ObservableProperty, Signal

VISIBLE = "visible"
SILENT = "silent"
_MODES = (VISIBLE, SILENT)

_instance_ids = itertools.count(1)


def _completed(value: Any) -> Future:
    future: Future = Future()
    future.set_result(value)
    return future


class ResourceListViewModel(BaseViewModel):
    """List controller for one resource type; pure Python, no Qt dependency.

    Operations that reach the network return a ``concurrent.futures.Future``.
    Visible fetches resolve to the applied :class:`Page`, to ``None`` when a
    newer request superseded them, or raise :class:`TransportError`. Silent
    (poll) fetches never raise.
    """

    def __init__(
        self,
        fetch_page: PageFetcher,
        *,
        resource: str = "resource",
        id_field: str = "id",
        filter_fields: Iterable[FilterField] = (),
        date_ranges: Iterable[Tuple[str, str]] = (),
        initial_filters: Optional[Mapping[str, Any]] = None,
        export_rows: Optional[RowExporter] = None,
        export_columns: Sequence[ExportColumn] = (),
        fetch_stats: Optional[StatsFetcher] = None,
        stats_keys: Sequence[str] = (),
        items_keys: Sequence[str] = (),
        total_keys: Sequence[str] = (),
        settings: Optional[ListSettings] = None,
        scheduler: Optional[Scheduler] = None,
        event_bus: Optional[EventBus] = None,
        error_handler: Optional[ErrorHandler] = None,
    ) -> None:
        super().__init__()
        self._logger = logging.getLogger(__name__)
        self._fetch_page = fetch_page
        self._export_rows = export_rows
        self._fetch_stats = fetch_stats
        self._stats_keys = tuple(stats_keys)
        self._resource = resource
        self._id_field = id_field
        self._items_keys = tuple(items_keys)
        self._total_keys = tuple(total_keys)
        self._settings = settings or ListSettings()
        self._scheduler = scheduler or ThreadingScheduler()
        self._event_bus = event_bus
        self._error_handler = error_handler
        self._source = f"{resource}#{next(_instance_ids)}"
        self._exporter = CsvExporter(export_columns, placeholder=self._settings.missing_placeholder)
        self._filters = FilterStore(filter_fields, date_ranges=date_ranges, initial=initial_filters)

        self._lock = threading.RLock()
        self._page_number = 1
        self._page_size = self._settings.page_size
        self._loaded = False
        self._request_seq = 0
        self._outstanding = 0
        self._visible_outstanding = 0
        self._exports_running = 0
        self._latest_fetch: Optional[Future] = None
        self._stats_seq = 0
        self._latest_stats: Optional[Future] = None
        self._poll_task: Optional[ScheduledTask] = None
        self._poll_generation = 0
        self._poll_interval_ms = self._settings.poll_interval_ms

        self._workers = ThreadPoolExecutor(max_workers=4, thread_name_prefix=f"{resource}-list")
        self._actions = ThreadPoolExecutor(
            max_workers=self._settings.max_concurrency,
            thread_name_prefix=f"{resource}-action",
        )
        self.add_teardown(lambda: self._workers.shutdown(wait=False, cancel_futures=True))
        self.add_teardown(lambda: self._actions.shutdown(wait=False, cancel_futures=True))

        # Observable state
        self.page = ObservableProperty(EMPTY_PAGE)
        self.draft_filters = ObservableProperty(self._filters.draft)
        self.applied_filters = ObservableProperty(self._filters.applied)
        self.visible_loading = ObservableProperty(False)
        self.polling_enabled = ObservableProperty(False)
        self.exporting = ObservableProperty(False)
        self.busy_ids = ObservableProperty(frozenset())
        self.last_error = ObservableProperty(None)
        self.stats = ObservableProperty(None)
        self.selection = SelectionModel()

        # Signals
        self.page_loaded = Signal()  # emits (page)
        self.error_occurred = Signal()  # emits (exception)
        self.filters_committed = Signal()  # emits (applied filters)
        self.bulk_completed = Signal()  # emits (BulkActionResult)
        self.export_completed = Signal()  # emits (ExportResult)

    @classmethod
    def for_resource(
        cls,
        definition: ResourceDefinition,
        gateway: ResourceGateway,
        **kwargs: Any,
    ) -> "ResourceListViewModel":
        """Build a controller for a preset screen backed by *gateway*."""

        return cls(
            gateway.fetch_page,
            resource=definition.name,
            id_field=definition.id_field,
            filter_fields=definition.filter_fields,
            date_ranges=definition.date_ranges,
            export_rows=gateway.export_rows,
            export_columns=definition.export_columns,
            fetch_stats=gateway.fetch_stats if definition.has_stats else None,
            stats_keys=definition.stats_keys,
            items_keys=definition.items_keys,
            total_keys=definition.total_keys,
            **kwargs,
        )

    # -- read side ---------------------------------------------------------

    @property
    def resource(self) -> str:
        return self._resource

    @property
    def source(self) -> str:
        return self._source

    @property
    def page_number(self) -> int:
        return self._page_number

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def current_page(self) -> Page:
        return self.page.value

    @property
    def filter_fields(self) -> Tuple[FilterField, ...]:
        return self._filters.fields

    @property
    def filters_dirty(self) -> bool:
        return self._filters.is_dirty

    @property
    def poll_interval_ms(self) -> int:
        return self._poll_interval_ms

    @property
    def latest_fetch(self) -> Optional[Future]:
        """Future of the most recently issued list request."""
        return self._latest_fetch

    @property
    def latest_stats(self) -> Optional[Future]:
        return self._latest_stats

    @property
    def has_stats(self) -> bool:
        return self._fetch_stats is not None

    # -- filters -----------------------------------------------------------

    def set_draft(self, key: str, value: Any) -> Optional[Future]:
        """Edit one filter. Only ``live`` fields reach the server right away."""

        with self._lock:
            self._ensure_alive()
            self._filters.set_draft(key, value)
            self.draft_filters.value = self._filters.draft
            if not self._filters.is_live(key):
                return None
            applied = self._filters.promote(key)
            return self._apply_filters(applied)

    def commit(self) -> FilterSet:
        """Promote the draft to the applied filters and load page 1.

        Raises :class:`FilterValidationError` without touching either
        snapshot when the draft is invalid.
        """

        with self._lock:
            self._ensure_alive()
            applied = self._filters.commit()
            self._apply_filters(applied)
            return applied

    def reset(self) -> FilterSet:
        """Clear draft and applied filters and load page 1."""

        with self._lock:
            self._ensure_alive()
            applied = self._filters.reset()
            self.draft_filters.value = self._filters.draft
            self._apply_filters(applied)
            return applied

    def discard_draft(self) -> FilterSet:
        with self._lock:
            draft = self._filters.discard_draft()
            self.draft_filters.value = draft
            return draft

    def _apply_filters(self, applied: FilterSet) -> Future:
        self._page_number = 1
        self.selection.clear()
        self.applied_filters.value = dict(applied)
        self.filters_committed.emit(dict(applied))
        self._publish(FiltersCommittedEvent(resource=self._resource, filters=dict(applied), source=self._source))
        return self._issue(VISIBLE)

    # -- pagination --------------------------------------------------------

    def load(self) -> Future:
        """Initial load of the current page and of the summary counters."""

        future = self.refresh(VISIBLE)
        self.refresh_stats()
        return future

    def refresh(self, mode: str = VISIBLE) -> Future:
        if mode not in _MODES:
            raise ValueError(f"unknown fetch mode {mode!r}")
        with self._lock:
            self._ensure_alive()
            return self._issue(mode)

    def go_to_page(self, page_number: int) -> Future:
        """Load *page_number*, clamped into ``[1, last page]``."""

        with self._lock:
            self._ensure_alive()
            target = max(1, int(page_number))
            if self._loaded:
                target = min(target, self.page.value.last_page)
            if target != page_number:
                self._logger.debug("Clamped %s page %s to %s", self._resource, page_number, target)
            self._page_number = target
            return self._issue(VISIBLE)

    def next_page(self) -> Future:
        return self.go_to_page(self._page_number + 1)

    def previous_page(self) -> Future:
        return self.go_to_page(self._page_number - 1)

    def set_page_size(self, page_size: int) -> Future:
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        with self._lock:
            self._ensure_alive()
            self._page_size = int(page_size)
            self._page_number = 1
            return self._issue(VISIBLE)

    # -- fetch orchestration -----------------------------------------------

    def _begin_request(self, mode: str) -> Tuple[int, PageRequest]:
        # Caller holds the lock.
        self._request_seq += 1
        self._outstanding += 1
        if mode == VISIBLE:
            self._visible_outstanding += 1
            self.visible_loading.value = True
        request = PageRequest(self._filters.applied, self._page_number, self._page_size)
        return self._request_seq, request

    def _end_request(self, mode: str) -> None:
        with self._lock:
            self._outstanding -= 1
            if mode == VISIBLE:
                self._visible_outstanding -= 1
                self.visible_loading.value = self._visible_outstanding > 0

    def _issue(self, mode: str) -> Future:
        # Caller holds the lock.
        seq, request = self._begin_request(mode)
        future = self._workers.submit(self._execute, seq, request, mode)
        self._latest_fetch = future
        return future

    def _fetch_inline(self, mode: str) -> Optional[Page]:
        """Run a numbered fetch on the calling worker thread."""

        with self._lock:
            self._ensure_alive()
            seq, request = self._begin_request(mode)
        return self._execute(seq, request, mode)

    def _execute(self, seq: int, request: PageRequest, mode: str, allow_clamp: bool = True) -> Optional[Page]:
        try:
            try:
                raw = self._fetch_page(dict(request.filters), request.page_number, request.page_size)
                page = page_from_payload(
                    raw, request, items_keys=self._items_keys, total_keys=self._total_keys
                )
            except TransportError as exc:
                return self._on_fetch_failed(seq, mode, exc)
            except Exception as exc:
                wrapped = TransportError(f"Loading {self._resource} failed: {exc}")
                wrapped.__cause__ = exc
                return self._on_fetch_failed(seq, mode, wrapped)
            return self._on_fetch_succeeded(seq, request, mode, page, allow_clamp)
        finally:
            self._end_request(mode)

    def _on_fetch_succeeded(
        self,
        seq: int,
        request: PageRequest,
        mode: str,
        page: Page,
        allow_clamp: bool,
    ) -> Optional[Page]:
        with self._lock:
            if self.disposed or seq != self._request_seq:
                self._logger.debug("Discarding stale %s response #%s", self._resource, seq)
                return None
            if page.page_number > page.last_page:
                if allow_clamp:
                    # The result set shrank underneath us; ask for the last real page.
                    self._page_number = page.last_page
                    retry_seq, retry_request = self._begin_request(mode)
                else:
                    page = dataclasses.replace(page, page_number=page.last_page)
                    retry_seq = None
            else:
                retry_seq = None
            if retry_seq is None:
                self._page_number = page.page_number
                self._loaded = True
                self.page.value = page
                self.selection.replace_page(page.ids(self._id_field))
                self.last_error.value = None
        if retry_seq is not None:
            self._logger.info(
                "%s page %s is past the last page %s; reloading",
                self._resource, page.page_number, page.last_page,
            )
            return self._execute(retry_seq, retry_request, mode, allow_clamp=False)

        self.page_loaded.emit(page)
        self._publish(
            PageLoadedEvent(
                resource=self._resource,
                page_number=page.page_number,
                total_pages=page.total_pages,
                total_items=page.total_items,
                silent=mode == SILENT,
                source=self._source,
            )
        )
        return page

    def _on_fetch_failed(self, seq: int, mode: str, error: TransportError) -> None:
        with self._lock:
            stale = self.disposed or seq != self._request_seq
        if stale:
            self._logger.debug("Ignoring failure of stale %s request #%s: %s", self._resource, seq, error)
            return None
        if mode == SILENT:
            self._logger.warning("Background refresh of %s failed: %s", self._resource, error)
            return None
        self._surface(error, "Loading")
        raise error

    # -- summary counters --------------------------------------------------

    def refresh_stats(self) -> Optional[Future]:
        """Reload the summary counters; ``None`` when the screen has none.

        A failed stats request is logged and leaves the previous counters in
        place. It never reaches ``error_occurred``.
        """

        if self._fetch_stats is None:
            return None
        with self._lock:
            self._ensure_alive()
            self._stats_seq += 1
            future = self._workers.submit(self._execute_stats, self._stats_seq)
            self._latest_stats = future
            return future

    def _refresh_stats_inline(self) -> None:
        if self._fetch_stats is None:
            return
        with self._lock:
            if self.disposed:
                return
            self._stats_seq += 1
            seq = self._stats_seq
        self._execute_stats(seq)

    def _execute_stats(self, seq: int) -> Optional[Dict[str, Any]]:
        try:
            stats = stats_from_payload(self._fetch_stats(), keys=self._stats_keys)
        except Exception as exc:
            self._logger.warning("Loading %s stats failed: %s", self._resource, exc)
            return None
        with self._lock:
            if self.disposed or seq != self._stats_seq:
                self._logger.debug("Discarding stale %s stats #%s", self._resource, seq)
                return None
            self.stats.value = stats
        return stats

    # -- realtime polling --------------------------------------------------

    def enable_polling(self, interval_ms: Optional[int] = None) -> None:
        """Start silent refreshes every *interval_ms*; no-op if already on."""

        with self._lock:
            self._ensure_alive()
            if self._poll_task is not None and self._poll_task.active:
                return
            interval = int(interval_ms if interval_ms is not None else self._settings.poll_interval_ms)
            if interval <= 0:
                raise ValueError("interval_ms must be positive")
            self._poll_interval_ms = interval
            self._poll_generation += 1
            generation = self._poll_generation
            self._poll_task = self._scheduler.schedule_repeating(
                interval, lambda: self._on_poll_tick(generation)
            )
            self.polling_enabled.value = True
        self._logger.info("Realtime refresh of %s every %d ms", self._resource, interval)

    def disable_polling(self) -> None:
        with self._lock:
            task, self._poll_task = self._poll_task, None
            if task is not None:
                task.cancel()
            self.polling_enabled.value = False

    def toggle_polling(self) -> bool:
        if self.polling_enabled.value:
            self.disable_polling()
        else:
            self.enable_polling()
        return self.polling_enabled.value

    def _on_poll_tick(self, generation: int) -> None:
        with self._lock:
            if self.disposed or self._poll_task is None:
                return
            if generation != self._poll_generation:
                # Tick of a poller that was stopped before this one started.
                return
            if self._outstanding:
                self._logger.debug("Skipping %s poll; a request is in flight", self._resource)
                return
            # Parameters are read now, not when polling was enabled.
            self._issue(SILENT)

    # -- selection ---------------------------------------------------------

    def toggle_selection(self, resource_id: Hashable) -> bool:
        return self.selection.toggle(resource_id)

    def select_all(self) -> frozenset:
        return self.selection.select_all()

    def toggle_all(self) -> frozenset:
        return self.selection.toggle_all()

    def clear_selection(self) -> None:
        self.selection.clear()

    def is_selected(self, resource_id: Hashable) -> bool:
        return self.selection.is_selected(resource_id)

    # -- mutations ---------------------------------------------------------

    def run_bulk(self, action: ResourceAction) -> Future:
        """Apply *action* to every selected id concurrently.

        Always resolves to a :class:`BulkActionResult`; individual failures
        are reported in it rather than raised.
        """

        with self._lock:
            self._ensure_alive()
            ids = tuple(self.selection.selected_ids)
            if not ids:
                self._logger.info("Bulk action on %s skipped: nothing selected", self._resource)
                return _completed(BulkActionResult(nothing_selected=True))
            return self._workers.submit(self._execute_bulk, ids, action)

    def _execute_bulk(self, ids: Tuple[Hashable, ...], action: ResourceAction) -> BulkActionResult:
        futures = {self._actions.submit(action, resource_id): resource_id for resource_id in ids}
        succeeded: set = set()
        failed: set = set()
        errors: Dict[Hashable, str] = {}
        for future in as_completed(futures):
            resource_id = futures[future]
            try:
                future.result()
            except Exception as exc:
                failed.add(resource_id)
                errors[resource_id] = str(exc) or exc.__class__.__name__
            else:
                succeeded.add(resource_id)

        result = BulkActionResult(
            succeeded_ids=frozenset(succeeded),
            failed_ids=frozenset(failed),
            errors=errors,
        )
        self._logger.info(
            "Bulk action on %s: %d succeeded, %d failed",
            self._resource, len(succeeded), len(failed),
        )
        self.selection.clear()
        self._refetch_after_mutation()
        self.bulk_completed.emit(result)
        self._publish(
            BulkActionCompletedEvent(
                resource=self._resource,
                succeeded=len(succeeded),
                failed=len(failed),
                source=self._source,
            )
        )
        return result

    def run_action(self, resource_id: Hashable, action: ResourceAction) -> Future:
        """Single-row mutation, followed by a reload of the current page."""

        with self._lock:
            self._ensure_alive()
            self.busy_ids.value = self.busy_ids.value | {resource_id}
            return self._workers.submit(self._execute_action, resource_id, action)

    def _execute_action(self, resource_id: Hashable, action: ResourceAction) -> None:
        try:
            action(resource_id)
        except Exception as exc:
            error = exc if isinstance(exc, AdminConsoleError) else TransportError(str(exc) or exc.__class__.__name__)
            if error is not exc:
                error.__cause__ = exc
            self._surface(error, "Update")
            raise error
        finally:
            with self._lock:
                self.busy_ids.value = self.busy_ids.value - {resource_id}
        self._refetch_after_mutation()

    def _refetch_after_mutation(self) -> None:
        try:
            self._fetch_inline(VISIBLE)
        except ControllerDisposedError:
            self._logger.debug("Skipping reload of %s; controller disposed", self._resource)
        except TransportError:
            # Already surfaced through error_occurred.
            pass
        self._refresh_stats_inline()

    # -- export ------------------------------------------------------------

    def export_all(self, fmt: str = "csv") -> Future:
        """Export every row matching the applied filters as one file."""

        if fmt not in SUPPORTED_FORMATS:
            raise ExportError(f"unsupported export format {fmt!r}")
        if self._export_rows is None:
            raise ExportError(f"{self._resource} has no exporter configured")
        with self._lock:
            self._ensure_alive()
            filters = self._filters.applied
            self._exports_running += 1
            self.exporting.value = True
            return self._workers.submit(self._execute_export, filters, fmt)

    def _execute_export(self, filters: FilterSet, fmt: str) -> ExportResult:
        try:
            try:
                raw = self._export_rows(dict(filters), self._settings.export_page_size)
                rows = items_from_payload(raw, items_keys=self._items_keys)
                result = self._exporter.export(self._resource, rows, fmt)
            except ExportError:
                raise
            except Exception as exc:
                raise ExportError(f"Export of {self._resource} failed: {exc}") from exc
        except ExportError as error:
            self._surface(error, "Export")
            raise
        finally:
            with self._lock:
                self._exports_running -= 1
                self.exporting.value = self._exports_running > 0
        self.export_completed.emit(result)
        self._publish(
            ExportCompletedEvent(
                resource=self._resource,
                filename=result.filename,
                row_count=result.row_count,
                source=self._source,
            )
        )
        return result

    # -- cross-screen refresh ----------------------------------------------

    def follow_mutations(self, event_bus: Optional[EventBus] = None) -> None:
        """Silently reload when another controller mutates the same resource."""

        bus = event_bus or self._event_bus
        if bus is None:
            raise ValueError("follow_mutations needs an event bus")
        self.subscribe_event(bus, BulkActionCompletedEvent, self._on_peer_mutation)

    def _on_peer_mutation(self, event: BulkActionCompletedEvent) -> None:
        if event.resource != self._resource or event.source == self._source:
            return
        if self.disposed:
            return
        self.refresh(SILENT)

    # -- lifecycle ---------------------------------------------------------

    def dispose(self) -> None:
        """Unmount: stop the poller and drop every in-flight result."""

        with self._lock:
            if self.disposed:
                return
            task, self._poll_task = self._poll_task, None
            if task is not None:
                task.cancel()
            super().dispose()
        self.polling_enabled.value = False
        self._logger.debug("Disposed %s", self._source)

    # -- internal ----------------------------------------------------------

    def _ensure_alive(self) -> None:
        if self.disposed:
            raise ControllerDisposedError(f"{self._source} has been disposed")

    def _surface(self, error: Exception, operation: str) -> None:
        self.last_error.value = str(error)
        self.error_occurred.emit(error)
        if self._error_handler is not None:
            self._error_handler.handle(
                error, context={"resource": self._resource, "operation": operation}
            )
        else:
            self._logger.error("%s of %s failed: %s", operation, self._resource, error)

    def _publish(self, event: Any) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event)


__all__ = ["SILENT", "VISIBLE", "ResourceListViewModel"]
