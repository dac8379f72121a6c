"""
Tracker configuration.

A DataTracker constructed without an explicit config picks up the process-wide
default at construction time. Changing the default afterwards does not affect
trackers that already exist.
"""

import copy
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional


class ConflictPolicy(Enum):
    """What happens when a tracker is accessed while a Modifier is outstanding.

    REJECT: raise MutationInProgressError immediately.
    BLOCK: wait for the outstanding Modifier to be released (bounded by
           TrackerConfig.block_timeout). The thread holding the Modifier is
           always rejected, since waiting on itself would deadlock.
    """
    REJECT = "reject"
    BLOCK = "block"


@dataclass(frozen=True)
class TrackerConfig:
    conflict_policy: ConflictPolicy = ConflictPolicy.REJECT
    block_timeout: Optional[float] = None  # seconds, None = wait forever
    copier: Callable[[Any], Any] = field(default=copy.deepcopy)  # snapshot function

    def __post_init__(self):
        if self.block_timeout is not None and self.block_timeout < 0:
            raise ValueError(f"block_timeout must be >= 0 or None, got {self.block_timeout}")


_default_config: TrackerConfig = TrackerConfig()
_default_config_lock = threading.Lock()


def set_default_tracker_config(config: TrackerConfig) -> None:
    """Set the config used by trackers created without an explicit one."""
    global _default_config
    if not isinstance(config, TrackerConfig):
        raise TypeError(f"Expected TrackerConfig, got {type(config).__name__}")
    with _default_config_lock:
        _default_config = config


def get_default_tracker_config() -> TrackerConfig:
    with _default_config_lock:
        return _default_config


def reset_default_tracker_config() -> None:
    """Restore the built-in default (REJECT, deepcopy snapshots)."""
    set_default_tracker_config(TrackerConfig())
