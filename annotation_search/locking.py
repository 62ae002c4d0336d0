"""
Single-writer / multiple-reader lock guarding a search engine instance.

Any number of readers may hold the lock together; a writer holds it alone.
Writers are preferred: once a writer is waiting, new readers queue behind
it, so a steady stream of searches cannot starve an incoming edit.

Usage:
    lock = ReadWriteLock()
    with lock.read():
        snapshot = tuple(corpus)

    with lock.write():
        corpus.append(record)
        index.add(record)

    # Or with timeout:
    lock = ReadWriteLock(timeout=5.0)
    with lock.write():
        ...

    # Non-blocking try:
    if lock.acquire_write(blocking=False):
        try:
            ...
        finally:
            lock.release_write()

The lock is not reentrant.  A thread that already holds it must not
acquire it again.
"""

import logging
import threading

logger = logging.getLogger("annotation_search")


class LockTimeout(Exception):
    """Raised when a lock cannot be acquired within the timeout."""
    pass


class _Held:
    """Context manager pairing one acquire call with its release."""

    __slots__ = ("_acquire", "_release")

    def __init__(self, acquire, release):
        self._acquire = acquire
        self._release = release

    def __enter__(self):
        self._acquire()
        return self

    def __exit__(self, *exc):
        self._release()
        return False


class ReadWriteLock:
    """Writer-preferring reader/writer lock.

    Args:
        name: Label used in log lines and timeout messages.
        timeout: Default seconds to wait for acquisition (None = wait forever)
    """

    def __init__(self, name: str = "annotation-index", timeout: float = None):
        self.name = name
        self.timeout = timeout
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    # ── readers ─────────────────────────────────────────────────────────

    def acquire_read(self, blocking: bool = True, timeout: float = None) -> bool:
        """Acquire a shared hold.

        Returns:
            True if acquired, False if non-blocking and a writer holds or
            awaits the lock.

        Raises:
            LockTimeout: If blocking and the timeout expired.
        """
        eff_timeout = timeout if timeout is not None else self.timeout
        with self._cond:
            can_read = lambda: not self._writer and self._writers_waiting == 0
            if not can_read():
                if not blocking:
                    return False
                if not self._cond.wait_for(can_read, eff_timeout):
                    raise LockTimeout(
                        f"Could not acquire read lock on {self.name} "
                        f"after {eff_timeout:.1f}s"
                    )
            self._readers += 1
            return True

    def release_read(self):
        with self._cond:
            if self._readers == 0:
                logger.warning(f"release_read() on {self.name} without a reader hold")
                return
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    # ── writers ─────────────────────────────────────────────────────────

    def acquire_write(self, blocking: bool = True, timeout: float = None) -> bool:
        """Acquire the exclusive hold.

        Returns:
            True if acquired, False if non-blocking and the lock is busy.

        Raises:
            LockTimeout: If blocking and the timeout expired.
        """
        eff_timeout = timeout if timeout is not None else self.timeout
        with self._cond:
            can_write = lambda: not self._writer and self._readers == 0
            if not can_write():
                if not blocking:
                    return False
                self._writers_waiting += 1
                try:
                    acquired = self._cond.wait_for(can_write, eff_timeout)
                finally:
                    self._writers_waiting -= 1
                if not acquired:
                    # Readers parked behind us may proceed now
                    self._cond.notify_all()
                    raise LockTimeout(
                        f"Could not acquire write lock on {self.name} "
                        f"after {eff_timeout:.1f}s (readers: {self._readers})"
                    )
            self._writer = True
            logger.debug(f"Write lock acquired: {self.name}")
            return True

    def release_write(self):
        with self._cond:
            if not self._writer:
                logger.warning(f"release_write() on {self.name} without a writer hold")
                return
            self._writer = False
            self._cond.notify_all()
            logger.debug(f"Write lock released: {self.name}")

    # ── context managers ────────────────────────────────────────────────

    def read(self) -> _Held:
        return _Held(self.acquire_read, self.release_read)

    def write(self) -> _Held:
        return _Held(self.acquire_write, self.release_write)

    # ── introspection ───────────────────────────────────────────────────

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def write_locked(self) -> bool:
        return self._writer

    def __repr__(self) -> str:
        return (
            f"<ReadWriteLock {self.name} readers={self._readers} "
            f"writer={self._writer} waiting={self._writers_waiting}>"
        )
