"""
Exception types raised by datatracker.

Listener failures are never wrapped: whatever a listener raises propagates
unchanged to the code that released the Modifier.
"""


class DataTrackerError(Exception):
    """Base class for datatracker errors."""


class MutationInProgressError(DataTrackerError, RuntimeError):
    """A read or a second Modifier was requested while a Modifier is outstanding."""


class ModifierReleasedError(DataTrackerError, RuntimeError):
    """A Modifier was used (or explicitly released) after it was already released."""
