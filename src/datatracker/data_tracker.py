"""
DataTracker: owns a value and notifies listeners when it changes.

The value is read with read() and changed through a Modifier obtained from
begin_mutation(). When the Modifier is released it compares the value with a
snapshot taken at creation time and, only if they differ, calls every
registered listener with (old_value, new_value).

Example:
    >>> from dataclasses import dataclass
    >>> from datatracker import DataTracker
    >>>
    >>> @dataclass
    ... class MyData:
    ...     a: int
    >>>
    >>> tracker = DataTracker(MyData(a=1))
    >>> tracker.add_listener("printer", lambda old, new: print(f"{old} -> {new}"))
    >>> with tracker.begin_mutation() as m:
    ...     m.a = 10
    MyData(a=1) -> MyData(a=10)
    >>> tracker.read().a
    10

Exclusive access:
    At most one Modifier exists per tracker at a time, and read() is refused
    while one is outstanding. This is enforced with a lock held for the
    Modifier's lifetime; what a conflicting call does is set by
    TrackerConfig.conflict_policy (see ConflictPolicy).
"""

import logging
import threading
from enum import Enum
from typing import Callable, Generic, Hashable, Optional, TypeVar

from datatracker.config import ConflictPolicy, TrackerConfig, get_default_tracker_config
from datatracker.errors import MutationInProgressError
from datatracker.listener_registry import Callback, ListenerRegistry
from datatracker.modifier import Modifier

logger = logging.getLogger(__name__)

T = TypeVar('T')
K = TypeVar('K', bound=Hashable)
R = TypeVar('R')


class TrackerState(Enum):
    IDLE = "idle"
    HANDLE_ACTIVE = "handle_active"


class DataTracker(Generic[T, K]):
    """Owns a value of type T; listeners are keyed by K.

    T must support copying (via TrackerConfig.copier, copy.deepcopy by
    default) and == comparison. K must be hashable.
    """

    def __init__(self, value: T, config: Optional[TrackerConfig] = None):
        self._value: T = value
        self._registry: ListenerRegistry[T, K] = ListenerRegistry()
        self._config: TrackerConfig = config if config is not None else get_default_tracker_config()

        self._lock = threading.Lock()
        self._state = TrackerState.IDLE
        self._owner_thread: Optional[int] = None

    @property
    def config(self) -> TrackerConfig:
        return self._config

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def is_mutating(self) -> bool:
        return self._state is TrackerState.HANDLE_ACTIVE

    @property
    def listener_count(self) -> int:
        return len(self._registry)

    # === Listeners ===

    def add_listener(self, key: K, callback: Callback) -> Optional[Callback]:
        """Register a callback to run just after a change is detected.

        If a callback already exists under key it is replaced and returned.
        Otherwise None is returned.
        """
        return self._registry.insert(key, callback)

    def remove_listener(self, key: K) -> Optional[Callback]:
        """Remove the callback under key and return it, or None if there was none."""
        return self._registry.remove(key)

    def has_listener(self, key: K) -> bool:
        return key in self._registry

    # === Access ===

    def read(self) -> T:
        """Return the current value without snapshotting or notifying.

        The returned object is the live value, not a copy. Mutating it directly
        bypasses change tracking; use begin_mutation() for edits.

        Raises:
            MutationInProgressError: a Modifier is outstanding (REJECT policy,
                or BLOCK policy on the Modifier's own thread or after timeout).
        """
        if self._config.conflict_policy is ConflictPolicy.REJECT:
            # Under REJECT only begin_mutation() takes the lock, so a held lock
            # also covers a Modifier that is still being set up
            if self._state is TrackerState.HANDLE_ACTIVE or self._lock.locked():
                raise MutationInProgressError("Cannot read: a Modifier is outstanding")
            return self._value

        self._acquire("read")
        try:
            return self._value
        finally:
            self._lock.release()

    def as_ref(self) -> T:
        return self.read()

    def begin_mutation(self) -> Modifier[T, K]:
        """Snapshot the value and return a Modifier with exclusive access to it.

        Raises:
            MutationInProgressError: another Modifier is outstanding.
            Whatever the configured copier raises (the tracker stays idle).
        """
        self._acquire("begin a mutation")
        self._state = TrackerState.HANDLE_ACTIVE
        self._owner_thread = threading.get_ident()
        try:
            snapshot = self._config.copier(self._value)
        except BaseException:
            self._end_mutation()
            raise
        logger.debug(f"Began mutation of {type(self._value).__name__}")
        return Modifier(self, snapshot)

    def as_tracked_mut(self) -> Modifier[T, K]:
        return self.begin_mutation()

    def modify(self, func: Callable[[Modifier[T, K]], R]) -> R:
        """Run func(modifier) inside a single mutation and return its result."""
        with self.begin_mutation() as modifier:
            return func(modifier)

    def replace(self, new_value: T) -> None:
        """Replace the whole value; listeners run if it differs from the current one."""
        with self.begin_mutation() as modifier:
            modifier.tracked_value = new_value

    # === Exclusive access ===

    def _acquire(self, operation: str) -> None:
        """Take the lock according to the conflict policy, or raise."""
        if self._state is TrackerState.HANDLE_ACTIVE and self._owner_thread == threading.get_ident():
            raise MutationInProgressError(
                f"Cannot {operation}: a Modifier is outstanding on this thread"
            )

        if self._config.conflict_policy is ConflictPolicy.BLOCK:
            timeout = self._config.block_timeout
            acquired = self._lock.acquire(timeout=-1 if timeout is None else timeout)
        else:
            acquired = self._lock.acquire(blocking=False)

        if not acquired:
            raise MutationInProgressError(f"Cannot {operation}: a Modifier is outstanding")

    def _end_mutation(self) -> None:
        """Hand exclusive access back. Called exactly once per Modifier."""
        self._state = TrackerState.IDLE
        self._owner_thread = None
        self._lock.release()
        logger.debug(f"Ended mutation of {type(self._value).__name__}")

    def __repr__(self) -> str:
        if self._state is TrackerState.HANDLE_ACTIVE:
            return f"DataTracker(<mutating>, listeners={len(self._registry)})"
        return f"DataTracker({self._value!r}, listeners={len(self._registry)})"
