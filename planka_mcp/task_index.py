"""Bounded task-id to card-id index used to look up tasks without a parent id."""

import threading
from collections import OrderedDict


class TaskCardIndex:
    """
    Least-recently-used map from task id to owning card id.

    Filled as a side effect of reading and creating tasks. It is advisory:
    a miss means the caller has to supply the card id, and a stale hit
    simply fails the lookup on the card it points at.
    """

    def __init__(self, max_size: int = 1024):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._entries: OrderedDict[str, str] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, task_id: str) -> bool:
        return task_id in self._entries

    def remember(self, task_id: str, card_id: str) -> None:
        with self._lock:
            self._entries[task_id] = card_id
            self._entries.move_to_end(task_id)
            while len(self._entries) > self.max_size:
                self._entries.popitem(last=False)

    def lookup(self, task_id: str) -> str | None:
        with self._lock:
            card_id = self._entries.get(task_id)
            if card_id is not None:
                self._entries.move_to_end(task_id)
            return card_id

    def invalidate(self, task_id: str) -> None:
        with self._lock:
            self._entries.pop(task_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
