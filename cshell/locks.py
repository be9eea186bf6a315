"""Binary command locks and the small pool they are handed out from."""

from __future__ import annotations

import threading

NUM_LOCKS = 2


class CommandLock:
    """A binary semaphore whose release never raises its count above one."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._value = 1

    def take(self, block_time_ms: int = -1) -> bool:
        """Take the lock; -1 waits forever, otherwise wait up to block_time_ms."""
        timeout = None if block_time_ms == -1 else max(block_time_ms, 0) / 1000
        with self._cond:
            if not self._cond.wait_for(lambda: self._value > 0, timeout):
                return False
            self._value -= 1
            return True

    def give(self) -> None:
        with self._cond:
            if self._value > 0:
                return
            self._value += 1
            self._cond.notify()

    def __enter__(self) -> CommandLock:
        self.take()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.give()


class LockPool:
    """Hands out a fixed number of command locks."""

    def __init__(self, size: int = NUM_LOCKS) -> None:
        self._free = size

    def acquire(self) -> CommandLock:
        """Return a fresh lock; raise RuntimeError when the pool is used up."""
        if self._free <= 0:
            raise RuntimeError("no command locks left")
        self._free -= 1
        return CommandLock()