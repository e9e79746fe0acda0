"""Row selection scoped to the page currently on screen."""

from __future__ import annotations

import threading
from typing import FrozenSet, Hashable, Iterable, Tuple

from .signal import ObservableProperty, ReadOnlyProperty


class SelectionModel:
    """Set of selected row ids, always a subset of the current page's ids.

    ``select_all`` is page-scoped: it never reaches rows of other pages,
    matching what a bulk action on this screen is allowed to touch.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._page_ids: Tuple[Hashable, ...] = ()
        self._selected = ObservableProperty(frozenset())

    # -- read side ---------------------------------------------------------

    @property
    def selected(self) -> ReadOnlyProperty:
        return self._selected.read_only()

    @property
    def selected_ids(self) -> FrozenSet[Hashable]:
        return self._selected.value

    @property
    def page_ids(self) -> Tuple[Hashable, ...]:
        return self._page_ids

    @property
    def count(self) -> int:
        return len(self._selected.value)

    @property
    def all_selected(self) -> bool:
        return bool(self._page_ids) and self._selected.value == frozenset(self._page_ids)

    def is_selected(self, resource_id: Hashable) -> bool:
        return resource_id in self._selected.value

    # -- mutation ----------------------------------------------------------

    def replace_page(self, ids: Iterable[Hashable]) -> None:
        """Adopt the ids of a newly applied page; drops any selection."""
        with self._lock:
            self._page_ids = tuple(ids)
        self._selected.value = frozenset()

    def toggle(self, resource_id: Hashable) -> bool:
        """Flip *resource_id*; ids that are not on the page are ignored.

        Returns whether the id is selected afterwards.
        """
        with self._lock:
            if resource_id not in self._page_ids:
                return False
            current = set(self._selected.value)
            if resource_id in current:
                current.discard(resource_id)
            else:
                current.add(resource_id)
            updated = frozenset(current)
        self._selected.value = updated
        return resource_id in updated

    def select_all(self) -> FrozenSet[Hashable]:
        with self._lock:
            updated = frozenset(self._page_ids)
        self._selected.value = updated
        return updated

    def toggle_all(self) -> FrozenSet[Hashable]:
        """Header-checkbox behaviour: select the page, or clear if it already is."""
        if self.all_selected:
            self.clear()
            return frozenset()
        return self.select_all()

    def clear(self) -> None:
        self._selected.value = frozenset()
