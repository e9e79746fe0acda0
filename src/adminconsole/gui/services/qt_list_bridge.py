"""QtListBridge: re-emits a list view model's pure signals as Qt signals.

The view model emits from worker threads. Qt delivers signals to receivers
living on the GUI thread through queued connections, so widgets connected
to this bridge are always updated on the GUI thread.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Tuple

from PySide6.QtCore import QObject, Signal

from adminconsole.gui.viewmodels.resource_list_viewmodel import ResourceListViewModel
from adminconsole.gui.viewmodels.signal import Signal as PureSignal

LOGGER = logging.getLogger(__name__)


class QtListBridge(QObject):
    pageChanged = Signal(object)
    loadingChanged = Signal(bool)
    pollingChanged = Signal(bool)
    exportingChanged = Signal(bool)
    selectionChanged = Signal(object)
    filtersApplied = Signal(object)
    errorOccurred = Signal(str)
    bulkCompleted = Signal(object)
    exportCompleted = Signal(object)
    statsChanged = Signal(object)

    def __init__(self, view_model: ResourceListViewModel, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._view_model = view_model
        self._connections: List[Tuple[PureSignal, Callable]] = []

        self._forward(view_model.page.changed, lambda new, _old: self.pageChanged.emit(new))
        self._forward(view_model.visible_loading.changed, lambda new, _old: self.loadingChanged.emit(bool(new)))
        self._forward(view_model.polling_enabled.changed, lambda new, _old: self.pollingChanged.emit(bool(new)))
        self._forward(view_model.exporting.changed, lambda new, _old: self.exportingChanged.emit(bool(new)))
        self._forward(view_model.selection.selected.changed, lambda new, _old: self.selectionChanged.emit(new))
        self._forward(view_model.filters_committed, self.filtersApplied.emit)
        self._forward(view_model.error_occurred, lambda error: self.errorOccurred.emit(str(error)))
        self._forward(view_model.bulk_completed, self.bulkCompleted.emit)
        self._forward(view_model.export_completed, self.exportCompleted.emit)
        self._forward(view_model.stats.changed, lambda new, _old: self.statsChanged.emit(new))
        view_model.add_teardown(self.dispose)

    @property
    def view_model(self) -> ResourceListViewModel:
        return self._view_model

    def _forward(self, source: PureSignal, handler: Callable[..., Any]) -> None:
        source.connect(handler)
        self._connections.append((source, handler))

    def dispose(self) -> None:
        """Detach from the view model's signals."""
        for source, handler in self._connections:
            try:
                source.disconnect(handler)
            except ValueError:
                LOGGER.debug("Handler already detached from %r", source)
        self._connections.clear()


__all__ = ["QtListBridge"]
