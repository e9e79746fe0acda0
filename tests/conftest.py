import sys
import threading
from pathlib import Path
from typing import Callable, List

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Ensure the project sources are importable without an editable install.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


class ManualTask:
    def __init__(self, scheduler: "ManualScheduler", interval_ms: int, callback: Callable[[], None]) -> None:
        self.interval_ms = interval_ms
        self.callback = callback
        self._scheduler = scheduler
        self.cancelled = False

    @property
    def active(self) -> bool:
        return not self.cancelled

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler whose ticks fire only when a test calls :meth:`tick`."""

    def __init__(self) -> None:
        self.tasks: List[ManualTask] = []

    def schedule_repeating(self, interval_ms: int, callback: Callable[[], None]) -> ManualTask:
        task = ManualTask(self, interval_ms, callback)
        self.tasks.append(task)
        return task

    @property
    def active_tasks(self) -> List[ManualTask]:
        return [task for task in self.tasks if task.active]

    def tick(self) -> int:
        """Fire every active task once; return how many fired."""
        fired = 0
        for task in list(self.tasks):
            if task.active:
                task.callback()
                fired += 1
        return fired


def make_payload(ids, *, page=1, total_pages=1, total=None, id_field="id"):
    items = [{id_field: resource_id, "name": f"row-{resource_id}"} for resource_id in ids]
    return {
        "items": items,
        "page": page,
        "totalPages": total_pages,
        "total": len(items) if total is None else total,
    }


class RecordingFetcher:
    """Fake ``fetch_page`` that records calls and answers from a callback.

    Calls listed in ``gates`` block until the matching event is set, which
    lets tests resolve requests out of order.
    """

    def __init__(self, responder: Callable[[dict, int, int], object]) -> None:
        self.responder = responder
        self.calls: List[tuple] = []
        self.gates: dict = {}
        self.started = threading.Event()
        self._lock = threading.Lock()

    def gate(self, call_index: int) -> threading.Event:
        event = threading.Event()
        self.gates[call_index] = event
        return event

    def __call__(self, filters, page_number, page_size):
        with self._lock:
            index = len(self.calls)
            self.calls.append((dict(filters), page_number, page_size))
        self.started.set()
        gate = self.gates.get(index)
        if gate is not None:
            assert gate.wait(5), f"gate for call {index} never opened"
        result = self.responder(filters, page_number, page_size)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def manual_scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def recording_fetcher():
    def _factory(responder=None):
        return RecordingFetcher(responder or (lambda filters, page, size: make_payload([1, 2, 3], page=page)))

    return _factory


@pytest.fixture
def page_payload():
    return make_payload
