"""
Minimal DataTracker usage.

Run with: python examples/simple.py
"""
import logging
from dataclasses import dataclass

from datatracker import DataTracker

logger = logging.getLogger(__name__)


@dataclass
class MyData:
    a: int


def main():
    logging.basicConfig(level=logging.INFO)

    tracker = DataTracker(MyData(a=1))
    key = 0  # Keep the key to remove the listener later
    tracker.add_listener(key, lambda old, new: logger.info(f"changed {old} -> {new}"))

    # Read-only access; no snapshot, no notification
    logger.info(f"x.a: {tracker.read().a}")

    # Changes are detected when the with block exits
    with tracker.begin_mutation() as x:
        x.a = 10
        logger.info(f"x.a: {x.a}")

    tracker.remove_listener(key)


if __name__ == "__main__":
    main()
