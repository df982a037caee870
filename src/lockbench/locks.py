"""
Lock primitives compared by the benchmark.

- FairLock: ticket lock, waiters acquire in arrival (FIFO) order
- UnfairLock: raw mutex with a bounded spin before blocking, no ordering guarantee
- AllocatedUnfairLock: UnfairLock that owns the protected state
- ReadWriteLock: shared readers, exclusive writers (writer-preferring)

All primitives are context managers.
"""

import threading
from collections.abc import Callable
from typing import Generic, TypeVar

S = TypeVar("S")
R = TypeVar("R")


class FairLock:
    """
    Mutual exclusion lock with FIFO wake order.

    Each acquirer takes a ticket and waits until it is being served, so no
    waiter can be overtaken by a later arrival.
    """

    def __init__(self):
        self._condition = threading.Condition(threading.Lock())
        self._next_ticket = 0
        self._now_serving = 0

    def acquire(self) -> None:
        with self._condition:
            ticket = self._next_ticket
            self._next_ticket += 1
            while ticket != self._now_serving:
                self._condition.wait()

    def release(self) -> None:
        with self._condition:
            if self._now_serving == self._next_ticket:
                raise RuntimeError("release of unlocked FairLock")
            self._now_serving += 1
            self._condition.notify_all()

    def locked(self) -> bool:
        with self._condition:
            return self._now_serving != self._next_ticket

    def __enter__(self) -> "FairLock":
        self.acquire()
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()


class UnfairLock:
    """
    Low-level mutex with no fairness guarantee.

    ``acquire`` first spins on a non-blocking attempt ``spin_count`` times and
    only then blocks, so a thread that just released the lock can retake it
    ahead of waiters. The underlying lock is allocated once and never
    replaced; holders of an UnfairLock must share the instance, not copy it.
    """

    __slots__ = ("_lock", "_spin_count")

    def __init__(self, spin_count: int = 64):
        self._lock = threading.Lock()
        self._spin_count = spin_count

    def acquire(self) -> None:
        lock = self._lock
        for _ in range(self._spin_count):
            if lock.acquire(blocking=False):
                return
        lock.acquire()

    def release(self) -> None:
        self._lock.release()

    def locked(self) -> bool:
        return self._lock.locked()

    def __enter__(self) -> "UnfairLock":
        self.acquire()
        return self

    def __exit__(self, *exc_info) -> None:
        self._lock.release()

    def __copy__(self):
        raise TypeError("UnfairLock cannot be copied; share the instance instead")

    def __deepcopy__(self, memo):
        raise TypeError("UnfairLock cannot be copied; share the instance instead")


class AllocatedUnfairLock(Generic[S]):
    """
    UnfairLock that owns the state it protects.

    The state is only reachable inside ``with_lock``, which passes it to the
    given function while the lock is held and returns the function's result.
    """

    def __init__(self, initial_state: S, spin_count: int = 64):
        self._lock = UnfairLock(spin_count)
        self._state = initial_state

    def with_lock(self, body: Callable[[S], R]) -> R:
        with self._lock:
            return body(self._state)


class ReadWriteLock:
    """
    Reader/writer lock.

    Any number of readers may hold the lock together; a writer waits for
    in-flight readers and writers to drain and then holds it alone. Arriving
    readers queue behind a waiting writer so writers cannot starve.
    """

    def __init__(self):
        self._condition = threading.Condition(threading.Lock())
        self._active_readers = 0
        self._writer_active = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._condition:
            while self._writer_active or self._writers_waiting:
                self._condition.wait()
            self._active_readers += 1

    def release_read(self) -> None:
        with self._condition:
            self._active_readers -= 1
            if self._active_readers == 0:
                self._condition.notify_all()

    def acquire_write(self) -> None:
        with self._condition:
            self._writers_waiting += 1
            try:
                while self._writer_active or self._active_readers:
                    self._condition.wait()
            finally:
                self._writers_waiting -= 1
            self._writer_active = True

    def release_write(self) -> None:
        with self._condition:
            self._writer_active = False
            self._condition.notify_all()

    def read_locked(self) -> "_ReadGuard":
        return _ReadGuard(self)

    def write_locked(self) -> "_WriteGuard":
        return _WriteGuard(self)


class _ReadGuard:
    __slots__ = ("_lock",)

    def __init__(self, lock: ReadWriteLock):
        self._lock = lock

    def __enter__(self) -> None:
        self._lock.acquire_read()

    def __exit__(self, *exc_info) -> None:
        self._lock.release_read()


class _WriteGuard:
    __slots__ = ("_lock",)

    def __init__(self, lock: ReadWriteLock):
        self._lock = lock

    def __enter__(self) -> None:
        self._lock.acquire_write()

    def __exit__(self, *exc_info) -> None:
        self._lock.release_write()
