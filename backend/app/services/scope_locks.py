from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from threading import Lock


def timetable_scope_keys(term_id: str, class_id: str | None, class_group_id: str | None) -> list[str]:
    keys: list[str] = []
    if class_id:
        keys.append(f"{term_id}|class|{class_id}")
    if class_group_id:
        keys.append(f"{term_id}|group|{class_group_id}")
    return keys


def booking_scope_keys(term_id: str, teacher_ids: Iterable[str], classroom_ids: Iterable[str]) -> list[str]:
    """Keys for the teachers and classrooms a write is about to book in a term.

    Writes for different classes that share a teacher or room must not both
    pass the conflict check before either commits.
    """
    keys = [f"{term_id}|teacher|{teacher_id}" for teacher_id in set(teacher_ids)]
    keys.extend(f"{term_id}|classroom|{classroom_id}" for classroom_id in set(classroom_ids))
    return keys


class ScopeLockRegistry:
    """One lock per timetable scope key, shared by every request in the process.

    The unique constraints on ``timetables`` cover writers in other processes;
    this keeps two in-process creations for the same scope from both passing
    validation.
    """

    def __init__(self) -> None:
        self._locks: dict[str, Lock] = defaultdict(Lock)
        self._guard = Lock()

    def _lock_for(self, key: str) -> Lock:
        with self._guard:
            return self._locks[key]

    @contextmanager
    def hold(self, keys: Iterable[str]) -> Iterator[None]:
        # Sorted acquisition so overlapping key sets cannot deadlock.
        locks = [self._lock_for(key) for key in sorted(set(keys))]
        acquired: list[Lock] = []
        try:
            for lock in locks:
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()

    def clear(self) -> None:
        with self._guard:
            self._locks.clear()


_registry = ScopeLockRegistry()


def get_scope_locks() -> ScopeLockRegistry:
    return _registry
