import threading
from contextlib import contextmanager
from datetime import date
from typing import Dict, Tuple


class ReservationLocks:
    """Mutual exclusion for conflict checks, keyed by (room_id, date).

    Bookings for different rooms, or for the same room on different days,
    never wait on each other. Entries are dropped once no thread holds or
    waits on them.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Tuple[int, date], threading.Lock] = {}
        self._waiters: Dict[Tuple[int, date], int] = {}

    @contextmanager
    def hold(self, room_id: int, day: date):
        key = (room_id, day)
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._waiters[key] = self._waiters.get(key, 0) + 1
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._waiters[key] -= 1
                if not self._waiters[key]:
                    del self._waiters[key]
                    del self._locks[key]

    def __len__(self):
        with self._guard:
            return len(self._locks)


reservation_locks = ReservationLocks()
