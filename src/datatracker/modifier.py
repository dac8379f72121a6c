"""
Modifier: scoped mutation handle for a DataTracker.

Lifecycle:
- Created by DataTracker.begin_mutation(), which takes the tracker's exclusive
  lock and snapshots the current value.
- ACTIVE: reads and writes go straight to the live value. Nothing is diffed or
  notified while the handle is active, however many writes happen.
- RELEASED: on release the snapshot is compared to the live value. If they
  differ, every listener is called once with (snapshot, live value). The
  exclusive lock is then handed back to the tracker.

Release runs exactly once. The normal way to get that is a with block:

    with tracker.begin_mutation() as m:
        m.a = 10
    # listeners have run here (if a changed)

release() may also be called explicitly; a with block exiting after that is a
no-op. A handle dropped without either is released from __del__ with a
warning, which on CPython means a bare temporary still works:

    tracker.begin_mutation().a = 10

The __del__ release cannot pass listener failures on to anyone: Python reports
them as "Exception ignored in" on stderr and carries on. Use a with block or
release() whenever listener errors matter.

Reserved names:
    tracked_value, release, released, changed and snapshot belong to the
    Modifier and are never forwarded. If the live value has an attribute with
    one of these names, using that name on the Modifier raises AttributeError
    instead of silently picking one side; reach the value's attribute through
    another path (item access, a method of the value, or tracker.read() after
    release).
"""

import logging
from typing import TYPE_CHECKING, Any, Generic, Hashable, TypeVar

from datatracker.errors import ModifierReleasedError

if TYPE_CHECKING:
    from datatracker.data_tracker import DataTracker

logger = logging.getLogger(__name__)

T = TypeVar('T')
K = TypeVar('K', bound=Hashable)

RESERVED_NAMES = frozenset({'tracked_value', 'release', 'released', 'changed', 'snapshot'})


class Modifier(Generic[T, K]):
    """Read/write view of a DataTracker's value that notifies listeners on release.

    Attribute and item access are forwarded to the live value, so a Modifier
    reads like the value itself:

        m.a = 10                # setattr(live, 'a', 10)
        m['key'] = 'x'          # live['key'] = 'x'
        m.tracked_value = other # replace the whole value

    Listeners run while the tracker is still held by this handle, so a listener
    must use the (old_value, new_value) arguments rather than tracker.read().
    new_value is the live object itself and is only guaranteed to reflect the
    change during the callback; copy it to keep it.
    """

    __slots__ = ('_tracker', '_snapshot', '_released')

    def __init__(self, tracker: 'DataTracker[T, K]', snapshot: T):
        # Only DataTracker.begin_mutation() should construct this; it holds the lock already
        object.__setattr__(self, '_tracker', tracker)
        object.__setattr__(self, '_snapshot', snapshot)
        object.__setattr__(self, '_released', False)

    # === Context manager ===

    def __enter__(self) -> 'Modifier[T, K]':
        self._check_active()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        if not self._released:
            self._finish()
        return False

    def __del__(self):
        if getattr(self, '_released', True):
            return
        logger.warning("Modifier was dropped without being released; releasing now")
        self._finish()

    # === Release protocol ===

    def release(self) -> None:
        """Diff against the snapshot, notify listeners if changed, give the value back.

        Raises:
            ModifierReleasedError: if this handle was already released.
            Any exception raised by a listener (remaining listeners are skipped).
        """
        self._check_active()
        self._finish()

    def _finish(self) -> None:
        object.__setattr__(self, '_released', True)
        tracker = self._tracker
        try:
            new_value = tracker._value
            if self._snapshot == new_value:
                logger.debug(f"Modifier released: no change ({type(new_value).__name__})")
            else:
                logger.debug(f"Modifier released: change detected ({type(new_value).__name__})")
                tracker._registry.notify_all(self._snapshot, new_value)
        finally:
            tracker._end_mutation()

    # === Own state ===

    @property
    def released(self) -> bool:
        self._check_unambiguous('released')
        return self._released

    @property
    def tracked_value(self) -> T:
        """The whole live value."""
        self._check_unambiguous('tracked_value')
        return self._live()

    @tracked_value.setter
    def tracked_value(self, new_value: T) -> None:
        self._check_unambiguous('tracked_value')
        self._check_active()
        self._tracker._value = new_value

    @property
    def snapshot(self) -> T:
        """Copy of the value as it was when this handle was created."""
        self._check_unambiguous('snapshot')
        self._check_active()
        return self._tracker._config.copier(self._snapshot)

    @property
    def changed(self) -> bool:
        """Whether the live value currently differs from the snapshot."""
        self._check_unambiguous('changed')
        return not (self._snapshot == self._live())

    def _live(self) -> T:
        self._check_active()
        return self._tracker._value

    def _check_active(self) -> None:
        if self._released:
            raise ModifierReleasedError("Modifier has already been released")

    def _check_unambiguous(self, name: str) -> None:
        live = self._tracker._value
        if hasattr(live, name):
            raise AttributeError(
                f"'{name}' is reserved by Modifier and is also an attribute of "
                f"{type(live).__name__}; refusing to guess which one is meant"
            )

    # === Forwarding to the live value ===

    def __getattribute__(self, name: str) -> Any:
        # release is a plain method, so guard it here rather than in a property
        if name == 'release':
            object.__getattribute__(self, '_check_unambiguous')(name)
        return object.__getattribute__(self, name)

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails; slots unset during __init__ land here too
        if name in Modifier.__slots__:
            raise AttributeError(name)
        # A reserved lookup that failed (e.g. on a name clash) must not fall through to the value
        if name in RESERVED_NAMES:
            self._check_unambiguous(name)
            raise AttributeError(name)
        return getattr(self._live(), name)

    def __setattr__(self, name: str, attr_value: Any) -> None:
        if name == 'tracked_value' or name in Modifier.__slots__:
            object.__setattr__(self, name, attr_value)
        elif name in RESERVED_NAMES:
            raise AttributeError(f"'{name}' is reserved by Modifier and cannot be assigned")
        else:
            setattr(self._live(), name, attr_value)

    def __delattr__(self, name: str) -> None:
        if name in RESERVED_NAMES or name in Modifier.__slots__:
            raise AttributeError(f"Cannot delete Modifier attribute '{name}'")
        delattr(self._live(), name)

    def __getitem__(self, key):
        return self._live()[key]

    def __setitem__(self, key, item) -> None:
        self._live()[key] = item

    def __delitem__(self, key) -> None:
        del self._live()[key]

    def __repr__(self) -> str:
        if self._released:
            return "Modifier(released)"
        return f"Modifier(value={self._tracker._value!r})"
