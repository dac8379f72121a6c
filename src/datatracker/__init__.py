"""
Track changes to a value and notify listeners.

A DataTracker takes ownership of a value. read() gives read-only access.
begin_mutation() returns a Modifier that forwards reads and writes to the
value; when the Modifier is released (normally at the end of a with block) it
compares the value with a snapshot taken at creation and, if they differ,
calls every registered listener with (old_value, new_value).

Quick Start:
    >>> from datatracker import DataTracker
    >>>
    >>> tracker = DataTracker({"a": 1})
    >>> tracker.add_listener(0, lambda old, new: print(old, "->", new))
    >>> with tracker.begin_mutation() as m:
    ...     m["a"] = 10
    {'a': 1} -> {'a': 10}
    >>> tracker.remove_listener(0) is not None
    True

Modules:
    - data_tracker: DataTracker container and its exclusive-access guard
    - modifier: Modifier, the scoped mutation handle
    - listener_registry: keyed listener storage and the OnChanged protocol
    - config: TrackerConfig, ConflictPolicy and the process-wide default
    - errors: exception types
"""

from datatracker.config import (
    ConflictPolicy,
    TrackerConfig,
    set_default_tracker_config,
    get_default_tracker_config,
    reset_default_tracker_config,
)
from datatracker.errors import (
    DataTrackerError,
    MutationInProgressError,
    ModifierReleasedError,
)
from datatracker.listener_registry import Callback, ListenerRegistry, OnChanged
from datatracker.modifier import Modifier
from datatracker.data_tracker import DataTracker, TrackerState

__all__ = [
    # Container
    'DataTracker',
    'TrackerState',
    # Handle
    'Modifier',
    # Listeners
    'ListenerRegistry',
    'OnChanged',
    'Callback',
    # Configuration
    'ConflictPolicy',
    'TrackerConfig',
    'set_default_tracker_config',
    'get_default_tracker_config',
    'reset_default_tracker_config',
    # Errors
    'DataTrackerError',
    'MutationInProgressError',
    'ModifierReleasedError',
]

__version__ = '0.1.0'
__description__ = 'Track changes to owned data and notify listeners'
