"""
Keyed registry of change listeners.

A listener is either a plain callable taking (old_value, new_value) or an
object implementing the OnChanged protocol. The registry stores and hands back
exactly the object it was given, so callers can compare a returned callback
against the one they registered.
"""

import logging
from typing import Callable, Dict, Generic, Hashable, List, Optional, Protocol, Tuple, TypeVar, Union, runtime_checkable

logger = logging.getLogger(__name__)

T = TypeVar('T')
K = TypeVar('K', bound=Hashable)


@runtime_checkable
class OnChanged(Protocol[T]):
    """Change notification capability."""

    def on_changed(self, old_value: T, new_value: T) -> None:
        ...


Callback = Union[OnChanged[T], Callable[[T, T], None]]


def _invoke(callback: 'Callback', old_value, new_value) -> None:
    on_changed = getattr(callback, 'on_changed', None)
    if on_changed is not None and callable(on_changed):
        on_changed(old_value, new_value)
    else:
        callback(old_value, new_value)


class ListenerRegistry(Generic[T, K]):
    """Mapping from listener key to callback.

    Notification order is unspecified. Each callback is invoked exactly once
    per round unless an earlier callback raises, in which case the exception
    propagates and the rest of the round is skipped.
    """

    def __init__(self):
        self._listeners: Dict[K, Callback] = {}

    def insert(self, key: K, callback: Callback) -> Optional[Callback]:
        """Insert or replace the callback at key.

        Returns:
            The previously registered callback, or None if the key was new.
        """
        if not (callable(callback) or isinstance(callback, OnChanged)):
            raise TypeError(
                f"Listener must be callable or implement on_changed(), got {type(callback).__name__}"
            )
        previous = self._listeners.get(key)
        self._listeners[key] = callback
        if previous is not None:
            logger.debug(f"Replaced listener: key={key!r}")
        else:
            logger.debug(f"Added listener: key={key!r}")
        return previous

    def remove(self, key: K) -> Optional[Callback]:
        """Remove and return the callback at key, or None if absent."""
        previous = self._listeners.pop(key, None)
        if previous is not None:
            logger.debug(f"Removed listener: key={key!r}")
        return previous

    def notify_all(self, old_value: T, new_value: T) -> None:
        """Invoke every callback with (old_value, new_value).

        new_value is the caller's live object, not a copy; it is only
        guaranteed to hold the new state during the callback.

        Listeners may add, remove or replace entries mid-round. A callback
        removed or replaced before its turn is skipped; entries added
        mid-round wait for the next round.
        """
        entries = list(self._listeners.items())
        logger.debug(f"Notifying {len(entries)} listener(s)")
        for key, callback in entries:
            if self._listeners.get(key) is not callback:
                continue
            _invoke(callback, old_value, new_value)

    def keys(self) -> List[K]:
        return list(self._listeners.keys())

    def items(self) -> List[Tuple[K, Callback]]:
        return list(self._listeners.items())

    def clear(self) -> None:
        self._listeners.clear()

    def __len__(self) -> int:
        return len(self._listeners)

    def __contains__(self, key: object) -> bool:
        return key in self._listeners

    def __repr__(self) -> str:
        return f"ListenerRegistry(keys={self.keys()!r})"
